from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import date

from ratedesk.engine.conflicts import find_reservation, validate_booking
from ratedesk.engine.dates import parse_date
from ratedesk.engine.errors import BookingError
from ratedesk.engine.models import RateRules, Reservation, Room
from ratedesk.engine.rates import DEFAULT_RULES

logger = logging.getLogger(__name__)


def relocate(
    rooms: Sequence[Room],
    reservations: Sequence[Reservation],
    reservation_id: str,
    new_room_id: str,
    new_check_in: date | str,
    rules: RateRules = DEFAULT_RULES,
) -> Reservation | BookingError:
    """Move a reservation to another room and/or arrival date.

    The stay keeps its length. The move is validated against every other
    reservation; on failure the BookingError is returned and nothing changes,
    so the caller can snap the booking back to where it was.
    """
    original = find_reservation(reservations, reservation_id)
    check_in = parse_date(new_check_in)
    moved = original.model_copy(
        update={
            "room_id": new_room_id,
            "check_in": check_in,
            "check_out": check_in + (original.check_out - original.check_in),
        }
    )

    error = validate_booking(rooms, reservations, moved, rules)
    if error is not None:
        return error

    logger.info(
        f"Moved reservation {reservation_id} from {original.room_id}@{original.check_in} "
        f"to {new_room_id}@{check_in}"
    )
    return moved
