from __future__ import annotations

from datetime import date
from typing import Literal

from pydantic import BaseModel, Field

from ratedesk.engine.models import BoardType, Reservation, ServiceItem, StayQuote


class QuoteRequest(BaseModel):
    room_id: str
    check_in: date
    check_out: date
    source: str = "Direct"
    board_type: BoardType | None = None
    extras: list[ServiceItem] = []


class ReservationCreate(BaseModel):
    room_id: str
    guest_name: str = Field(..., min_length=1)
    check_in: date
    check_out: date
    source: str = "Direct"
    board_type: BoardType | None = None
    # Omitted amount means "price it from the rate calendar".
    amount: float | None = Field(None, ge=0)
    paid: bool = False
    extras: list[ServiceItem] = []
    notes: str | None = None


class ReservationUpdate(BaseModel):
    room_id: str | None = None
    guest_name: str | None = Field(None, min_length=1)
    check_in: date | None = None
    check_out: date | None = None
    source: str | None = None
    board_type: BoardType | None = None
    amount: float | None = Field(None, ge=0)
    paid: bool | None = None
    extras: list[ServiceItem] | None = None
    notes: str | None = None


class ReservationMove(BaseModel):
    room_id: str
    check_in: date


class ReservationStatusChange(BaseModel):
    action: Literal["check-in", "check-out", "cancel", "refund"]


class ReservationResponse(BaseModel):
    reservation: Reservation
    version: int


class ReservationListResponse(BaseModel):
    items: list[Reservation]
    version: int


class QuoteResponse(StayQuote):
    room_id: str
    source: str
