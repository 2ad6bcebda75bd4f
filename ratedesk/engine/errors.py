"""Error taxonomy for the rate calendar engine.

Booking errors (stop sale, occupied room, restriction) are returned by the
validation functions rather than raised: they are routine and meant to be
shown to hotel staff. The remaining classes signal contract violations and
are raised.
"""

from __future__ import annotations


class EngineError(Exception):
    code = "engine-error"
    message = "Rate calendar operation failed."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)

    @property
    def detail(self) -> str:
        return str(self)


class InvalidRangeError(EngineError, ValueError):
    code = "invalid-range"
    message = "Check-out must be after check-in."


class EmptySelectionError(EngineError):
    code = "empty-selection"
    message = "No dates selected. Check your date range and day filters."


class InvalidTransitionError(EngineError):
    code = "invalid-transition"

    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(f"Cannot move reservation from '{current}' to '{target}'.")


class UnknownRoomError(EngineError, LookupError):
    code = "unknown-room"

    def __init__(self, room_id: str):
        self.room_id = room_id
        super().__init__(f"Room '{room_id}' not found.")


class UnknownReservationError(EngineError, LookupError):
    code = "unknown-reservation"

    def __init__(self, reservation_id: str):
        self.reservation_id = reservation_id
        super().__init__(f"Reservation '{reservation_id}' not found.")


class BookingError(EngineError):
    code = "booking-rejected"


class StopSaleError(BookingError):
    code = "stop-sale"
    message = "Stop Sale active for selected dates."


class RoomOccupiedError(BookingError):
    code = "room-occupied"
    message = "Room already booked for these dates."


RESTRICTION_MESSAGES = {
    "min-stay": "Minimum stay not met for the selected arrival date.",
    "closed-arrival": "Arrival is closed on the selected check-in date.",
    "closed-departure": "Departure is closed on the selected check-out date.",
}


class RestrictionError(BookingError):
    code = "restriction"

    def __init__(self, kind: str):
        self.kind = kind
        super().__init__(RESTRICTION_MESSAGES.get(kind, f"Restriction violated: {kind}."))


class DuplicateRoomError(EngineError):
    code = "duplicate-room"

    def __init__(self, number: str):
        self.number = number
        super().__init__(f"Room number '{number}' is already in use.")


class RoomInUseError(EngineError):
    code = "room-in-use"

    def __init__(self, room_id: str, reservation_ids: list[str]):
        self.room_id = room_id
        self.reservation_ids = reservation_ids
        super().__init__(
            f"Room '{room_id}' still has {len(reservation_ids)} active reservation(s)."
        )
