from __future__ import annotations

from pydantic import BaseModel, Field

from ratedesk.engine.models import BoardType, Room, RoomType


class RoomCreate(BaseModel):
    number: str = Field(..., min_length=1)
    type: RoomType
    base_price: float = Field(..., ge=0)
    board_types: list[BoardType] = []


class RoomUpdate(BaseModel):
    number: str | None = Field(None, min_length=1)
    type: RoomType | None = None
    base_price: float | None = Field(None, ge=0)
    board_types: list[BoardType] | None = None


class RoomResponse(BaseModel):
    room: Room
    version: int


class RoomListResponse(BaseModel):
    items: list[Room]
    version: int
