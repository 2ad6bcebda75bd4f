from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from supabase import Client

from ratedesk.api import deps
from ratedesk.api.errors import http_error
from ratedesk.core.config import get_settings
from ratedesk.crud.price_log import record_price_changes
from ratedesk.crud.property import StaleSnapshotError, load_property, mutate_property
from ratedesk.db.base import get_supabase
from ratedesk.engine.bulk import apply_bulk_update, apply_quick_action
from ratedesk.engine.conflicts import find_room
from ratedesk.engine.dates import dates_in_range
from ratedesk.engine.errors import EngineError
from ratedesk.engine.models import RateRules
from ratedesk.engine.rates import resolve_rate
from ratedesk.schemas.rates import (
    BulkRateUpdate,
    DatedRate,
    QuickActionRequest,
    RateChangeResponse,
    RoomRatesResponse,
)

router = APIRouter(prefix="/v1.0/properties/{property_id}", tags=["rates"])

MAX_RATE_WINDOW_DAYS = 366


def check_rate_window(start: date, end: date) -> None:
    if (end - start).days >= MAX_RATE_WINDOW_DAYS:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Date window is limited to {MAX_RATE_WINDOW_DAYS} days.",
        )


async def save_rate_change(client: Client, property_id: str, mutate) -> RateChangeResponse:
    """Run a rate mutation under the snapshot CAS loop and record its price log."""
    try:
        saved, result = await mutate_property(
            client,
            property_id,
            mutate,
            retries=get_settings().snapshot_save_retries,
        )
    except (EngineError, StaleSnapshotError, ValueError) as exc:
        raise http_error(exc)

    logged = await record_price_changes(client, property_id, result.change_logs)
    return RateChangeResponse(
        rooms=saved.rooms,
        change_logs=result.change_logs,
        logged=logged,
        version=saved.version,
    )


@router.get("/rooms/{room_id}/rates", response_model=RoomRatesResponse)
async def list_room_rates(
    property_id: str,
    room_id: str,
    start: date = Query(...),
    end: date = Query(...),
    current_user: dict = Depends(deps.check_property_access),
    client: Client = Depends(get_supabase),
    rules: RateRules = Depends(deps.rate_rules),
):
    """Effective rate per date for one room, defaults filled in."""
    check_rate_window(start, end)
    snapshot = await load_property(client, property_id)
    try:
        room = find_room(snapshot.rooms, room_id)
        days = list(dates_in_range(start, end))
    except EngineError as exc:
        raise http_error(exc)

    return RoomRatesResponse(
        room_id=room.id,
        room_type=room.type,
        items=[
            DatedRate(date=day, rate=resolve_rate(room, day, rules), stored=day in room.daily_rates)
            for day in days
        ],
    )


@router.post("/rates/bulk", response_model=RateChangeResponse)
async def bulk_update_rates(
    property_id: str,
    payload: BulkRateUpdate,
    current_user: dict = Depends(deps.check_property_access),
    client: Client = Depends(get_supabase),
    rules: RateRules = Depends(deps.rate_rules),
):
    """Apply a partial rate patch to a room type over a weekday-filtered range."""
    check_rate_window(payload.start, payload.end)

    def mutate(snapshot):
        result = apply_bulk_update(
            snapshot.rooms,
            payload.room_type,
            (payload.start, payload.end),
            payload.day_of_week_mask(),
            payload.patch,
            action=payload.action,
            user=current_user["email"],
            rules=rules,
        )
        return snapshot.model_copy(update={"rooms": result.updated_rooms}), result

    return await save_rate_change(client, property_id, mutate)


@router.post("/rates/quick-action", response_model=RateChangeResponse)
async def quick_rate_action(
    property_id: str,
    payload: QuickActionRequest,
    current_user: dict = Depends(deps.check_property_access),
    client: Client = Depends(get_supabase),
    rules: RateRules = Depends(deps.rate_rules),
):
    """Single-date stop sale / +10% / -10% / min stay from the calendar menu."""

    def mutate(snapshot):
        result = apply_quick_action(
            snapshot.rooms,
            payload.room_type,
            payload.date,
            payload.action,
            payload.value,
            user=current_user["email"],
            rules=rules,
        )
        return snapshot.model_copy(update={"rooms": result.updated_rooms}), result

    return await save_rate_change(client, property_id, mutate)
