from __future__ import annotations

from collections.abc import Iterable, Iterator
from datetime import date, timedelta

from ratedesk.engine.errors import InvalidRangeError

ALL_DAYS_MASK = 0b1111111
WEEKEND_MASK = 0b1000001  # Sunday (bit 0) + Saturday (bit 6)
WEEKDAYS_MASK = 0b0111110


def parse_date(value: date | str) -> date:
    """Accept a date or a YYYY-MM-DD string. Raises ValueError otherwise."""
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid date '{value}'. Use YYYY-MM-DD.")


def nights(check_in: date, check_out: date) -> int:
    return (check_out - check_in).days


def dates_in_range(start: date | str, end: date | str) -> Iterator[date]:
    """Yield every date from start to end, both inclusive."""
    first = parse_date(start)
    last = parse_date(end)
    if last < first:
        raise InvalidRangeError("End date must not be before start date.")
    return _walk(first, last)


def _walk(first: date, last: date) -> Iterator[date]:
    current = first
    while current <= last:
        yield current
        current += timedelta(days=1)


def stay_dates(check_in: date | str, check_out: date | str) -> Iterator[date]:
    """Yield the occupied nights of a stay: the half-open [check_in, check_out)."""
    first = parse_date(check_in)
    last = parse_date(check_out)
    if last <= first:
        raise InvalidRangeError()
    return _walk(first, last - timedelta(days=1))


def weekday_bit(day: date) -> int:
    """Bit index with Sunday as 0, matching the calendar's day toggles."""
    return (day.weekday() + 1) % 7


def mask_from_days(days: Iterable[int]) -> int:
    mask = 0
    for index in days:
        if not 0 <= index <= 6:
            raise ValueError(f"Day index {index} out of range 0-6 (Sunday=0).")
        mask |= 1 << index
    return mask


def filter_by_weekday(days: Iterable[date], mask: int) -> list[date]:
    return [day for day in days if mask & (1 << weekday_bit(day))]
