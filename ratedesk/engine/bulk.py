"""Rate mutations over date ranges, with the price-change audit trail."""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Iterable
from datetime import date, datetime, timezone
from typing import Literal

from ratedesk.engine.dates import dates_in_range, filter_by_weekday, parse_date
from ratedesk.engine.errors import EmptySelectionError
from ratedesk.engine.models import (
    BulkUpdateResult,
    DailyRate,
    DateRange,
    PriceChangeLog,
    RatePatch,
    RateRules,
    Room,
)
from ratedesk.engine.rates import DEFAULT_RULES, resolve_rate

logger = logging.getLogger(__name__)

DEFAULT_USER = "Manager"

Direction = Literal["raise", "lower", "hold"]
QuickAction = Literal["stop_sale", "price_inc", "price_dec", "min_stay"]

QUICK_ACTION_LABELS = {
    "stop_sale": "Quick Action",
    "price_inc": "Quick +10%",
    "price_dec": "Quick -10%",
    "min_stay": "Quick MinStay",
}


def _round_half_up(value: float) -> float:
    return float(math.floor(value + 0.5))


def _as_range(date_range: DateRange | tuple[date | str, date | str]) -> tuple[date, date]:
    if isinstance(date_range, DateRange):
        return date_range.start, date_range.end
    start, end = date_range
    return parse_date(start), parse_date(end)


def _rewrite_rates(
    rooms: Iterable[Room],
    room_type: str,
    days: list[date],
    update: Callable[[DailyRate], DailyRate],
    action: str,
    user: str,
    now: datetime | None,
    rules: RateRules,
) -> BulkUpdateResult:
    if not days:
        raise EmptySelectionError()

    timestamp = now or datetime.now(timezone.utc)
    updated_rooms: list[Room] = []
    logs: list[PriceChangeLog] = []

    for room in rooms:
        if room.type != room_type:
            updated_rooms.append(room)
            continue

        new_rates = dict(room.daily_rates)
        for day in days:
            existing = resolve_rate(room, day, rules)
            merged = update(existing)
            if merged.price != existing.price:
                logs.append(
                    PriceChangeLog(
                        target_date=day,
                        room_type=room.type,
                        room_id=room.id,
                        old_price=existing.price,
                        new_price=merged.price,
                        action=action,
                        user=user,
                        timestamp=timestamp,
                    )
                )
            new_rates[day] = merged
        updated_rooms.append(room.model_copy(update={"daily_rates": new_rates}))

    logger.debug(
        f"{action}: {len(days)} date(s) on {room_type}, {len(logs)} price change(s)"
    )
    return BulkUpdateResult(updated_rooms=updated_rooms, change_logs=logs)


def apply_bulk_update(
    rooms: Iterable[Room],
    room_type: str,
    date_range: DateRange | tuple[date | str, date | str],
    day_of_week_mask: int,
    patch: RatePatch | dict,
    *,
    action: str = "Bulk Update",
    user: str = DEFAULT_USER,
    now: datetime | None = None,
    rules: RateRules = DEFAULT_RULES,
) -> BulkUpdateResult:
    """Merge ``patch`` into every rate of ``room_type`` in the range.

    Dates are kept when their weekday bit (Sunday = bit 0) is set in
    ``day_of_week_mask``. Only fields explicitly present in the patch are
    written; everything else keeps its current (or default) value. The input
    rooms are not modified. Raises EmptySelectionError when the range and mask
    leave no dates.
    """
    if not isinstance(patch, RatePatch):
        patch = RatePatch.model_validate(patch)
    changes = patch.changes()

    start, end = _as_range(date_range)
    days = filter_by_weekday(dates_in_range(start, end), day_of_week_mask)

    return _rewrite_rates(
        rooms,
        room_type,
        days,
        lambda rate: rate.model_copy(update=changes),
        action,
        user,
        now,
        rules,
    )


def clamp_percentage(pct: float, rules: RateRules = DEFAULT_RULES) -> float:
    if pct != pct:  # NaN
        return 0.0
    return min(max(float(pct), 0.0), rules.max_adjustment_pct)


def apply_suggested_adjustment(
    rooms: Iterable[Room],
    room_type: str,
    pct: float,
    direction: Direction,
    date_range: DateRange | tuple[date | str, date | str],
    *,
    user: str = DEFAULT_USER,
    now: datetime | None = None,
    rules: RateRules = DEFAULT_RULES,
) -> BulkUpdateResult:
    """Scale all channel prices by a suggested percentage over a date range.

    The percentage is clamped to ``[0, rules.max_adjustment_pct]``; prices are
    rounded to whole currency units.
    """
    pct = clamp_percentage(pct, rules)
    if direction == "raise":
        multiplier = 1 + pct / 100
    elif direction == "lower":
        multiplier = 1 - pct / 100
    elif direction == "hold":
        multiplier = 1.0
    else:
        raise ValueError(f"Unknown adjustment direction '{direction}'.")

    def scale(rate: DailyRate) -> DailyRate:
        online = rate.online_price or rate.price
        agency = rate.agency_price or rate.price * (1 - rules.agency_discount)
        return rate.model_copy(
            update={
                "price": _round_half_up(rate.price * multiplier),
                "online_price": _round_half_up(online * multiplier),
                "agency_price": _round_half_up(agency * multiplier),
            }
        )

    start, end = _as_range(date_range)
    days = list(dates_in_range(start, end))
    return _rewrite_rates(
        rooms,
        room_type,
        days,
        scale,
        f"AI Smart Strategy ({direction})",
        user,
        now,
        rules,
    )


def apply_quick_action(
    rooms: Iterable[Room],
    room_type: str,
    day: date | str,
    action: QuickAction,
    value: bool | int | None = None,
    *,
    user: str = DEFAULT_USER,
    now: datetime | None = None,
    rules: RateRules = DEFAULT_RULES,
) -> BulkUpdateResult:
    """Single-date edits offered from the calendar's context menu."""
    if action == "stop_sale" and not isinstance(value, bool):
        raise ValueError("stop_sale quick action needs a boolean value.")
    if action == "min_stay" and (
        isinstance(value, bool) or not isinstance(value, int) or value < 1
    ):
        raise ValueError("min_stay quick action needs an integer value >= 1.")
    if action not in QUICK_ACTION_LABELS:
        raise ValueError(f"Unknown quick action '{action}'.")

    def update(rate: DailyRate) -> DailyRate:
        if action == "stop_sale":
            return rate.model_copy(update={"stop_sale": value})
        if action == "min_stay":
            return rate.model_copy(update={"min_stay": value})
        # round first so 2500 * 1.1 lands on 2750, not 2751
        if action == "price_inc":
            return rate.model_copy(
                update={"price": float(math.ceil(round(rate.price * 1.1, 6)))}
            )
        return rate.model_copy(
            update={"price": float(math.floor(round(rate.price * 0.9, 6)))}
        )

    return _rewrite_rates(
        rooms,
        room_type,
        [parse_date(day)],
        update,
        QUICK_ACTION_LABELS[action],
        user,
        now,
        rules,
    )
