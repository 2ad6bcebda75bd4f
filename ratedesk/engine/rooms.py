"""Room inventory changes on a property snapshot."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from ratedesk.engine.conflicts import NON_BLOCKING_STATUSES, find_room
from ratedesk.engine.errors import DuplicateRoomError, RoomInUseError
from ratedesk.engine.models import Reservation, Room

logger = logging.getLogger(__name__)


def _check_number(rooms: Iterable[Room], number: str, room_id: str) -> None:
    if not number:
        return
    for room in rooms:
        if room.number == number and room.id != room_id:
            raise DuplicateRoomError(number)


def add_room(rooms: Sequence[Room], room: Room) -> list[Room]:
    _check_number(rooms, room.number, room.id)
    return [*rooms, room]


def update_room(rooms: Sequence[Room], room_id: str, changes: dict) -> tuple[list[Room], Room]:
    """Apply field changes to one room. Its rate calendar is kept as is."""
    current = find_room(rooms, room_id)
    updated = Room.model_validate({**current.model_dump(), **changes})
    _check_number(rooms, updated.number, room_id)
    return [updated if room.id == room_id else room for room in rooms], updated


def remove_room(
    rooms: Sequence[Room], reservations: Iterable[Reservation], room_id: str
) -> list[Room]:
    """Drop a room unless a reservation that is not cancelled still points at it."""
    find_room(rooms, room_id)
    active = [
        r.id
        for r in reservations
        if r.room_id == room_id and r.status not in NON_BLOCKING_STATUSES
    ]
    if active:
        logger.info(f"Refused to delete room {room_id}: reservations {active}")
        raise RoomInUseError(room_id, active)
    return [room for room in rooms if room.id != room_id]
