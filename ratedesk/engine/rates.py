"""Rate resolution: which nightly price applies to a room, date and channel."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date

from ratedesk.engine.dates import nights, parse_date, stay_dates
from ratedesk.engine.errors import InvalidRangeError
from ratedesk.engine.models import (
    DailyRate,
    NightlyCharge,
    RateRules,
    Room,
    ServiceItem,
    StayQuote,
)

ONLINE_SOURCES = frozenset({"Booking.com", "Expedia"})
AGENCY_SOURCES = frozenset({"Agency"})

DEFAULT_RULES = RateRules()


def default_rate(room: Room, rules: RateRules = DEFAULT_RULES) -> DailyRate:
    return DailyRate(
        price=room.base_price,
        online_price=room.base_price,
        agency_price=room.base_price * (1 - rules.agency_discount),
        inventory=rules.default_inventory,
        stop_sale=False,
        min_stay=1,
        closed_for_arrival=False,
        closed_for_departure=False,
    )


def resolve_rate(room: Room, day: date | str, rules: RateRules = DEFAULT_RULES) -> DailyRate:
    rate = room.daily_rates.get(parse_date(day))
    if rate is not None:
        return rate
    return default_rate(room, rules)


def channel_price(rate: DailyRate, source: str | None) -> float:
    if source in ONLINE_SOURCES:
        return rate.online_price or rate.price
    if source in AGENCY_SOURCES:
        return rate.agency_price or rate.price
    return rate.price


def quote_stay(
    room: Room,
    check_in: date | str,
    check_out: date | str,
    source: str | None = None,
    board_type: str | None = None,
    extras: Iterable[ServiceItem] = (),
    rules: RateRules = DEFAULT_RULES,
) -> StayQuote:
    """Price a stay night by night for the given booking channel."""
    ci = parse_date(check_in)
    co = parse_date(check_out)
    if co <= ci:
        raise InvalidRangeError()

    breakdown = [
        NightlyCharge(date=day, price=channel_price(resolve_rate(room, day, rules), source))
        for day in stay_dates(ci, co)
    ]
    stay_nights = nights(ci, co)
    room_subtotal = sum(charge.price for charge in breakdown)
    board_total = rules.board_surcharge(board_type) * stay_nights
    extras_total = sum(item.price for item in extras)

    return StayQuote(
        nights=stay_nights,
        per_night_breakdown=breakdown,
        room_subtotal=room_subtotal,
        board_surcharge_total=board_total,
        extras_total=extras_total,
        total=room_subtotal + board_total + extras_total,
    )
