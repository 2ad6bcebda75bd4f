from datetime import date

import pytest

from ratedesk.engine.errors import InvalidRangeError
from ratedesk.engine.models import Reservation, Room
from ratedesk.engine.reports import occupancy_rate, summarize

ROOMS = [
    Room(id="r1", type="Standard", base_price=1000),
    Room(id="r2", type="Standard", base_price=1000),
]


def _reservation(res_id, room_id, check_in, check_out, amount, status="confirmed"):
    return Reservation(
        id=res_id,
        room_id=room_id,
        check_in=check_in,
        check_out=check_out,
        amount=amount,
        status=status,
    )


def test_summary_spreads_revenue_across_nights():
    reservations = [
        # 4 nights, two of them inside the window
        _reservation("a", "r1", "2024-02-28", "2024-03-03", 4000),
        _reservation("b", "r2", "2024-03-01", "2024-03-02", 1500),
    ]
    summary = summarize(ROOMS, reservations, "2024-03-01", "2024-03-02")

    assert summary.start == date(2024, 3, 1)
    assert summary.end == date(2024, 3, 2)
    assert summary.revenue == 3500
    assert summary.occupied_room_nights == 3
    assert summary.capacity_room_nights == 4
    assert summary.occupancy_rate == 75.0
    assert summary.adr == pytest.approx(3500 / 3, abs=0.01)
    assert summary.arrivals == 1
    assert summary.departures == 1
    assert [day.occupied_rooms for day in summary.trend] == [2, 1]
    assert [day.revenue for day in summary.trend] == [2500, 1000]


def test_cancelled_and_refunded_stays():
    reservations = [
        _reservation("a", "r1", "2024-03-01", "2024-03-02", 1000, status="cancelled"),
        _reservation("b", "r2", "2024-03-01", "2024-03-02", 1000, status="refunded"),
    ]
    summary = summarize(ROOMS, reservations, "2024-03-01", "2024-03-01")
    assert summary.revenue == 0
    # refunded guests still slept in the room; cancelled ones did not
    assert summary.occupied_room_nights == 1
    assert summary.cancellations == 1
    assert summary.adr == 0


def test_occupancy_rate_without_rooms_is_zero():
    assert occupancy_rate([], [], "2024-03-01", "2024-03-07") == 0.0


def test_reversed_window_is_rejected():
    with pytest.raises(InvalidRangeError):
        summarize(ROOMS, [], "2024-03-07", "2024-03-01")
