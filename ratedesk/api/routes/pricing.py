import logging
from datetime import date, timedelta

from fastapi import APIRouter, Depends, HTTPException, status
from openai import OpenAIError
from supabase import Client

from ratedesk.api import deps
from ratedesk.api.routes.rates import check_rate_window, save_rate_change
from ratedesk.core.config import get_settings
from ratedesk.crud.ai_connection import get_pricing_api_key
from ratedesk.crud.property import load_property
from ratedesk.db.base import get_supabase
from ratedesk.engine.bulk import apply_suggested_adjustment
from ratedesk.engine.models import RateRules
from ratedesk.engine.rates import resolve_rate
from ratedesk.engine.reports import summarize
from ratedesk.schemas.rates import AdjustmentRequest, RateChangeResponse, SuggestionRequest
from ratedesk.services.pricing_advisor import PricingSuggestion, suggest_pricing

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1.0/properties/{property_id}", tags=["pricing"])


def _suggestion_window() -> tuple[date, date]:
    today = date.today()
    return today, today + timedelta(days=get_settings().suggestion_window_days)


@router.post("/pricing/suggestion", response_model=PricingSuggestion)
async def get_pricing_suggestion(
    property_id: str,
    payload: SuggestionRequest,
    current_user: dict = Depends(deps.check_property_access),
    client: Client = Depends(get_supabase),
    rules: RateRules = Depends(deps.rate_rules),
):
    """Ask the pricing model whether to raise, lower or hold a room type."""
    snapshot = await load_property(client, property_id)
    rooms = [room for room in snapshot.rooms if room.type == payload.room_type]
    if not rooms:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No {payload.room_type} rooms at this property",
        )

    start, end = _suggestion_window()
    room_ids = {room.id for room in rooms}
    occupancy = summarize(
        rooms,
        [r for r in snapshot.reservations if r.room_id in room_ids],
        start,
        end - timedelta(days=1),
    ).occupancy_rate
    current_price = resolve_rate(rooms[0], start, rules).price

    api_key = await get_pricing_api_key(client, property_id)
    try:
        return await suggest_pricing(
            api_key,
            payload.room_type,
            current_price,
            occupancy,
            competitor_avg=payload.competitor_avg,
            language=payload.language,
        )
    except OpenAIError as e:
        logger.error(f"Pricing suggestion failed for property {property_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Pricing assistant is unavailable",
        )


@router.post("/rates/adjust", response_model=RateChangeResponse)
async def apply_pricing_adjustment(
    property_id: str,
    payload: AdjustmentRequest,
    current_user: dict = Depends(deps.check_property_access),
    client: Client = Depends(get_supabase),
    rules: RateRules = Depends(deps.rate_rules),
):
    """Apply an accepted suggestion to every channel price over a window."""
    default_start, default_end = _suggestion_window()
    start = payload.start or default_start
    end = payload.end or default_end
    check_rate_window(start, end)

    def mutate(snapshot):
        result = apply_suggested_adjustment(
            snapshot.rooms,
            payload.room_type,
            payload.percentage,
            payload.action,
            (start, end),
            user=current_user["email"],
            rules=rules,
        )
        return snapshot.model_copy(update={"rooms": result.updated_rooms}), result

    return await save_rate_change(client, property_id, mutate)
