import pytest

from ratedesk.engine.errors import InvalidTransitionError
from ratedesk.engine.lifecycle import (
    ALLOWED_TRANSITIONS,
    TERMINAL_STATUSES,
    can_transition,
    transition,
    transition_to,
)
from ratedesk.engine.models import Reservation


def _reservation(status="confirmed", paid=True) -> Reservation:
    return Reservation(
        id="res-1",
        room_id="r101",
        guest_name="Ada",
        check_in="2024-03-01",
        check_out="2024-03-03",
        status=status,
        amount=5000,
        paid=paid,
    )


def test_happy_path_check_in_then_out():
    checked_in = transition(_reservation(), "check-in")
    assert checked_in.status == "checked-in"
    checked_out = transition(checked_in, "check-out")
    assert checked_out.status == "checked-out"
    assert checked_out.paid is True


def test_refund_clears_paid_flag():
    refunded = transition(_reservation(status="checked-in"), "refund")
    assert refunded.status == "refunded"
    assert refunded.paid is False


def test_transition_returns_copy():
    original = _reservation()
    transition(original, "cancel")
    assert original.status == "confirmed"


@pytest.mark.parametrize(
    ("current", "target"),
    [
        ("confirmed", "checked-out"),
        ("checked-in", "cancelled"),
        ("checked-in", "confirmed"),
        ("cancelled", "confirmed"),
        ("cancelled", "checked-in"),
        ("checked-out", "refunded"),
        ("refunded", "confirmed"),
    ],
)
def test_disallowed_transitions_raise(current, target):
    assert not can_transition(current, target)
    with pytest.raises(InvalidTransitionError) as excinfo:
        transition_to(_reservation(status=current), target)
    assert excinfo.value.current == current
    assert excinfo.value.target == target


def test_unknown_action_is_rejected():
    with pytest.raises(ValueError):
        transition(_reservation(), "no-show")


def test_terminal_statuses_allow_nothing():
    for status in TERMINAL_STATUSES:
        assert ALLOWED_TRANSITIONS[status] == frozenset()
