from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from supabase import Client

from ratedesk.api import deps
from ratedesk.crud.price_log import get_price_history
from ratedesk.db.base import get_supabase
from ratedesk.engine.models import RoomType
from ratedesk.schemas.rates import PriceHistoryResponse

router = APIRouter(prefix="/v1.0/properties/{property_id}/price-history", tags=["price-history"])


@router.get("", response_model=PriceHistoryResponse)
async def list_price_history(
    property_id: str,
    room_type: RoomType | None = Query(None),
    from_date: date | None = Query(None, alias="from"),
    to_date: date | None = Query(None, alias="to"),
    limit: int = Query(50, ge=1, le=100),
    cursor: str | None = None,
    current_user: dict = Depends(deps.check_property_access),
    client: Client = Depends(get_supabase),
):
    """Price change log for a property, newest first."""
    if from_date and to_date and from_date > to_date:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="'from' must be less than or equal to 'to'",
        )

    try:
        rows, next_cursor = await get_price_history(
            client,
            property_id,
            room_type=room_type,
            from_date=from_date.isoformat() if from_date else None,
            to_date=to_date.isoformat() if to_date else None,
            limit=limit,
            cursor=cursor,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
    return PriceHistoryResponse(items=rows, next_cursor=next_cursor)
