from __future__ import annotations

from ratedesk.engine.errors import InvalidTransitionError
from ratedesk.engine.models import Reservation

TERMINAL_STATUSES = frozenset({"cancelled", "checked-out", "refunded"})

ALLOWED_TRANSITIONS: dict[str, frozenset[str]] = {
    "confirmed": frozenset({"checked-in", "cancelled", "refunded"}),
    "checked-in": frozenset({"checked-out", "refunded"}),
    "checked-out": frozenset(),
    "cancelled": frozenset(),
    "refunded": frozenset(),
}

# Quick actions on the calendar map onto target statuses.
ACTION_TO_STATUS = {
    "check-in": "checked-in",
    "check-out": "checked-out",
    "cancel": "cancelled",
    "refund": "refunded",
}


def can_transition(current: str, target: str) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def transition_to(reservation: Reservation, target: str) -> Reservation:
    """Return a copy of the reservation in the target status.

    Refunds also clear the paid flag. Room availability is not re-checked.
    Raises InvalidTransitionError for moves the state machine does not allow.
    """
    if not can_transition(reservation.status, target):
        raise InvalidTransitionError(reservation.status, target)

    update: dict = {"status": target}
    if target == "refunded":
        update["paid"] = False
    return reservation.model_copy(update=update)


def transition(reservation: Reservation, action: str) -> Reservation:
    target = ACTION_TO_STATUS.get(action)
    if target is None:
        raise ValueError(f"Unknown reservation action '{action}'.")
    return transition_to(reservation, target)
