from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import date

from ratedesk.engine.conflicts import NON_BLOCKING_STATUSES, has_conflict, has_stop_sale
from ratedesk.engine.dates import parse_date
from ratedesk.engine.models import Reservation, Room


def available_rooms(
    rooms: Iterable[Room],
    reservations: Sequence[Reservation],
    check_in: date | str,
    check_out: date | str,
    room_type: str | None = None,
) -> list[Room]:
    """Rooms that could take a new booking for the whole stay."""
    return [
        room
        for room in rooms
        if (room_type is None or room.type == room_type)
        and not has_stop_sale(room, check_in, check_out)
        and not has_conflict(reservations, room.id, check_in, check_out)
    ]


def occupant(
    reservations: Iterable[Reservation], room_id: str, day: date | str
) -> Reservation | None:
    """The reservation sleeping in a room on the night of ``day``, if any."""
    night = parse_date(day)
    for reservation in reservations:
        if (
            reservation.room_id == room_id
            and reservation.status not in NON_BLOCKING_STATUSES
            and reservation.check_in <= night < reservation.check_out
        ):
            return reservation
    return None
