from __future__ import annotations

import datetime as dt
from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field, model_validator

from ratedesk.engine.bulk import Direction, QuickAction
from ratedesk.engine.dates import ALL_DAYS_MASK, mask_from_days
from ratedesk.engine.models import DailyRate, PriceChangeLog, RatePatch, Room, RoomType


class BulkRateUpdate(BaseModel):
    room_type: RoomType
    start: date
    end: date
    # Sunday = 0 ... Saturday = 6; omitted means every day.
    days_of_week: list[int] | None = None
    patch: RatePatch
    action: Literal["Bulk Update", "Manual Update"] = "Bulk Update"

    def day_of_week_mask(self) -> int:
        if self.days_of_week is None:
            return ALL_DAYS_MASK
        return mask_from_days(self.days_of_week)

    @model_validator(mode="after")
    def validate_days(self):
        if self.days_of_week is not None:
            mask_from_days(self.days_of_week)
        return self


class QuickActionRequest(BaseModel):
    room_type: RoomType
    date: dt.date
    action: QuickAction
    value: bool | int | None = None


class AdjustmentRequest(BaseModel):
    room_type: RoomType
    action: Direction
    percentage: float
    start: date | None = None
    end: date | None = None


class SuggestionRequest(BaseModel):
    room_type: RoomType
    competitor_avg: float | None = Field(None, ge=0)
    language: str = "en"


class RateChangeResponse(BaseModel):
    rooms: list[Room]
    change_logs: list[PriceChangeLog]
    logged: int
    version: int


class DatedRate(BaseModel):
    date: dt.date
    rate: DailyRate
    stored: bool


class RoomRatesResponse(BaseModel):
    room_id: str
    room_type: RoomType
    items: list[DatedRate]


class PriceChangeResponse(BaseModel):
    id: int
    property_id: str
    room_id: str
    room_type: str
    target_date: date
    old_price: float
    new_price: float
    action: str
    user: str
    created_at: datetime


class PriceHistoryResponse(BaseModel):
    items: list[PriceChangeResponse]
    next_cursor: str | None = None
