from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from supabase import Client

from ratedesk.api import deps
from ratedesk.api.errors import http_error
from ratedesk.crud.property import load_property
from ratedesk.db.base import get_supabase
from ratedesk.engine.errors import EngineError
from ratedesk.engine.models import RoomType
from ratedesk.engine.reports import PerformanceSummary, summarize

router = APIRouter(prefix="/v1.0/properties/{property_id}/reports", tags=["reports"])

MAX_REPORT_DAYS = 366


@router.get("/summary", response_model=PerformanceSummary)
async def get_performance_summary(
    property_id: str,
    start: date = Query(...),
    end: date = Query(...),
    room_type: RoomType | None = Query(None),
    current_user: dict = Depends(deps.check_property_access),
    client: Client = Depends(get_supabase),
):
    """Revenue, occupancy and ADR over an inclusive date window."""
    if (end - start).days >= MAX_REPORT_DAYS:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Report window is limited to {MAX_REPORT_DAYS} days.",
        )

    snapshot = await load_property(client, property_id)
    rooms = snapshot.rooms
    reservations = snapshot.reservations
    if room_type:
        rooms = [room for room in rooms if room.type == room_type]
        room_ids = {room.id for room in rooms}
        reservations = [r for r in reservations if r.room_id in room_ids]

    try:
        return summarize(rooms, reservations, start, end)
    except EngineError as exc:
        raise http_error(exc)
