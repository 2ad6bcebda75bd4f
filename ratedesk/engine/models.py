from __future__ import annotations

import datetime as dt
from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field, model_validator

from ratedesk.engine.errors import InvalidRangeError

RoomType = Literal["Standard", "Deluxe", "Suite", "Villa"]
BoardType = Literal[
    "Room Only",
    "Bed & Breakfast",
    "Half Board",
    "Full Board",
    "All Inclusive",
]
ReservationStatus = Literal[
    "confirmed",
    "checked-in",
    "checked-out",
    "cancelled",
    "refunded",
]

DEFAULT_BOARD_SURCHARGES: dict[str, float] = {
    "All Inclusive": 2000.0,
    "Full Board": 1200.0,
    "Half Board": 750.0,
    "Bed & Breakfast": 250.0,
    "Room Only": 0.0,
}


class RateRules(BaseModel):
    """Tunable constants of the rate calendar.

    Built from application settings by the host; the engine only ever
    receives an instance and never reads configuration on its own.
    """

    agency_discount: float = Field(0.15, ge=0, lt=1)
    default_inventory: int = Field(5, ge=0)
    board_surcharges: dict[str, float] = Field(
        default_factory=lambda: dict(DEFAULT_BOARD_SURCHARGES)
    )
    max_adjustment_pct: float = Field(100.0, ge=0)

    def board_surcharge(self, board_type: str | None) -> float:
        if not board_type:
            return 0.0
        return float(self.board_surcharges.get(board_type, 0.0))


class DailyRate(BaseModel):
    price: float = Field(..., ge=0)
    online_price: float | None = Field(None, ge=0)
    agency_price: float | None = Field(None, ge=0)
    inventory: int = Field(5, ge=0)
    stop_sale: bool = False
    min_stay: int = Field(1, ge=1)
    closed_for_arrival: bool = False
    closed_for_departure: bool = False


CLEARABLE_RATE_FIELDS = {"online_price", "agency_price"}


class RatePatch(BaseModel):
    """Partial DailyRate; only fields explicitly provided are applied.

    An explicit null on a channel price clears it, so that channel falls back
    to ``price`` again. Nulls on any other field are ignored.
    """

    price: float | None = Field(None, ge=0)
    online_price: float | None = Field(None, ge=0)
    agency_price: float | None = Field(None, ge=0)
    inventory: int | None = Field(None, ge=0)
    stop_sale: bool | None = None
    min_stay: int | None = Field(None, ge=1)
    closed_for_arrival: bool | None = None
    closed_for_departure: bool | None = None

    def changes(self) -> dict:
        return {
            field: value
            for field, value in self.model_dump(exclude_unset=True).items()
            if value is not None or field in CLEARABLE_RATE_FIELDS
        }


class Room(BaseModel):
    id: str
    number: str = ""
    type: RoomType
    base_price: float = Field(..., ge=0)
    board_types: list[BoardType] = []
    daily_rates: dict[date, DailyRate] = {}


class ServiceItem(BaseModel):
    id: str | None = None
    name: str = Field(..., min_length=1)
    price: float = Field(..., ge=0)
    date: dt.date | None = None


class Reservation(BaseModel):
    id: str
    room_id: str
    guest_name: str = ""
    check_in: date
    check_out: date
    status: ReservationStatus = "confirmed"
    source: str = "Direct"
    board_type: BoardType | None = None
    amount: float = Field(0.0, ge=0)
    paid: bool = False
    extras: list[ServiceItem] = []
    notes: str | None = None

    @model_validator(mode="after")
    def validate_stay(self):
        if self.check_out <= self.check_in:
            raise InvalidRangeError()
        return self

    @property
    def nights(self) -> int:
        return (self.check_out - self.check_in).days


class PriceChangeLog(BaseModel):
    target_date: date
    room_type: RoomType
    room_id: str
    old_price: float
    new_price: float
    action: str
    user: str
    timestamp: datetime


class DateRange(BaseModel):
    start: date
    end: date


class NightlyCharge(BaseModel):
    date: dt.date
    price: float


class StayQuote(BaseModel):
    nights: int
    per_night_breakdown: list[NightlyCharge]
    room_subtotal: float
    board_surcharge_total: float
    extras_total: float
    total: float


class BulkUpdateResult(BaseModel):
    updated_rooms: list[Room]
    change_logs: list[PriceChangeLog] = []
