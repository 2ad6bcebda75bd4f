"""Occupancy and revenue figures over a reporting window.

Revenue is spread evenly across the nights of each stay, so a stay that only
partly overlaps the window contributes only the nights inside it. Cancelled
and refunded reservations earn nothing; cancelled ones do not occupy a room.
"""

from __future__ import annotations

import datetime as dt
from collections.abc import Sequence
from datetime import date

from pydantic import BaseModel

from ratedesk.engine.dates import dates_in_range, parse_date
from ratedesk.engine.models import Reservation, Room

NON_REVENUE_STATUSES = frozenset({"cancelled", "refunded"})


class DailyPerformance(BaseModel):
    date: dt.date
    revenue: float
    occupied_rooms: int
    adr: float


class PerformanceSummary(BaseModel):
    start: date
    end: date
    revenue: float
    occupied_room_nights: int
    capacity_room_nights: int
    occupancy_rate: float
    adr: float
    arrivals: int
    departures: int
    cancellations: int
    trend: list[DailyPerformance]


def _nightly_share(reservation: Reservation) -> float:
    return reservation.amount / reservation.nights


def summarize(
    rooms: Sequence[Room],
    reservations: Sequence[Reservation],
    start: date | str,
    end: date | str,
) -> PerformanceSummary:
    window = list(dates_in_range(start, end))
    first, last = window[0], window[-1]

    trend: list[DailyPerformance] = []
    total_revenue = 0.0
    occupied_total = 0
    paying_nights = 0

    for day in window:
        revenue = 0.0
        occupied = 0
        paying = 0
        for reservation in reservations:
            if reservation.status == "cancelled":
                continue
            if not reservation.check_in <= day < reservation.check_out:
                continue
            occupied += 1
            if reservation.status not in NON_REVENUE_STATUSES:
                revenue += _nightly_share(reservation)
                paying += 1
        trend.append(
            DailyPerformance(
                date=day,
                revenue=round(revenue, 2),
                occupied_rooms=occupied,
                adr=round(revenue / paying, 2) if paying else 0.0,
            )
        )
        total_revenue += revenue
        occupied_total += occupied
        paying_nights += paying

    capacity = len(rooms) * len(window)
    occupancy = min(100.0, round(occupied_total / capacity * 100, 1)) if capacity else 0.0

    active = [r for r in reservations if r.status != "cancelled"]
    return PerformanceSummary(
        start=first,
        end=last,
        revenue=round(total_revenue, 2),
        occupied_room_nights=occupied_total,
        capacity_room_nights=capacity,
        occupancy_rate=occupancy,
        adr=round(total_revenue / paying_nights, 2) if paying_nights else 0.0,
        arrivals=sum(1 for r in active if first <= r.check_in <= last),
        departures=sum(1 for r in active if first <= r.check_out <= last),
        cancellations=sum(
            1
            for r in reservations
            if r.status == "cancelled" and first <= r.check_in <= last
        ),
        trend=trend,
    )


def occupancy_rate(
    rooms: Sequence[Room],
    reservations: Sequence[Reservation],
    start: date | str,
    end: date | str,
) -> float:
    return summarize(rooms, reservations, parse_date(start), parse_date(end)).occupancy_rate
