"""Booking conflict and restriction checks.

Every check here treats a stay as the half-open interval [check_in, check_out):
a guest leaving on the 10th and another arriving on the 10th share the room.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import date, timedelta
from typing import Literal

from ratedesk.engine.dates import nights, parse_date, stay_dates
from ratedesk.engine.errors import (
    BookingError,
    InvalidRangeError,
    RestrictionError,
    RoomOccupiedError,
    StopSaleError,
    UnknownReservationError,
    UnknownRoomError,
)
from ratedesk.engine.models import RateRules, Reservation, Room
from ratedesk.engine.rates import DEFAULT_RULES, resolve_rate

logger = logging.getLogger(__name__)

RestrictionViolation = Literal["min-stay", "closed-arrival", "closed-departure"]

NON_BLOCKING_STATUSES = frozenset({"cancelled"})


def find_room(rooms: Iterable[Room], room_id: str) -> Room:
    for room in rooms:
        if room.id == room_id:
            return room
    raise UnknownRoomError(room_id)


def find_reservation(reservations: Iterable[Reservation], reservation_id: str) -> Reservation:
    for reservation in reservations:
        if reservation.id == reservation_id:
            return reservation
    raise UnknownReservationError(reservation_id)


def _checked_range(check_in: date | str, check_out: date | str) -> tuple[date, date]:
    ci = parse_date(check_in)
    co = parse_date(check_out)
    if co <= ci:
        raise InvalidRangeError()
    return ci, co


def overlaps(check_in: date, check_out: date, other: Reservation) -> bool:
    return check_in < other.check_out and check_out > other.check_in


def conflicting_reservations(
    reservations: Iterable[Reservation],
    room_id: str,
    check_in: date | str,
    check_out: date | str,
    exclude_reservation_id: str | None = None,
) -> list[Reservation]:
    ci, co = _checked_range(check_in, check_out)
    return [
        other
        for other in reservations
        if other.room_id == room_id
        and other.status not in NON_BLOCKING_STATUSES
        and other.id != exclude_reservation_id
        and overlaps(ci, co, other)
    ]


def has_conflict(
    reservations: Iterable[Reservation],
    room_id: str,
    check_in: date | str,
    check_out: date | str,
    exclude_reservation_id: str | None = None,
) -> bool:
    return bool(
        conflicting_reservations(
            reservations, room_id, check_in, check_out, exclude_reservation_id
        )
    )


def has_stop_sale(room: Room, check_in: date | str, check_out: date | str) -> bool:
    for day in stay_dates(check_in, check_out):
        rate = room.daily_rates.get(day)
        if rate is not None and rate.stop_sale:
            return True
    return False


def violates_restrictions(
    room: Room,
    check_in: date | str,
    check_out: date | str,
    rules: RateRules = DEFAULT_RULES,
) -> RestrictionViolation | None:
    """Return the first violated restriction, or None."""
    ci, co = _checked_range(check_in, check_out)
    arrival = resolve_rate(room, ci, rules)
    if arrival.min_stay > nights(ci, co):
        return "min-stay"
    if arrival.closed_for_arrival:
        return "closed-arrival"
    if resolve_rate(room, co - timedelta(days=1), rules).closed_for_departure:
        return "closed-departure"
    return None


def validate_booking(
    rooms: Iterable[Room],
    reservations: Iterable[Reservation],
    candidate: Reservation,
    rules: RateRules = DEFAULT_RULES,
) -> BookingError | None:
    """Gate for creating or moving a reservation.

    Returns the first business-rule failure (stop sale, occupied room,
    restriction) or None. The candidate's own id is ignored when looking for
    conflicts so an existing reservation can be edited in place. An unknown
    room id raises UnknownRoomError.
    """
    room = find_room(rooms, candidate.room_id)
    ci, co = _checked_range(candidate.check_in, candidate.check_out)

    if has_stop_sale(room, ci, co):
        logger.info(f"Rejected booking on room {room.id}: stop sale in {ci}..{co}")
        return StopSaleError()

    if has_conflict(reservations, room.id, ci, co, exclude_reservation_id=candidate.id):
        logger.info(f"Rejected booking on room {room.id}: occupied in {ci}..{co}")
        return RoomOccupiedError()

    violation = violates_restrictions(room, ci, co, rules)
    if violation:
        logger.info(f"Rejected booking on room {room.id}: {violation}")
        return RestrictionError(violation)

    return None
