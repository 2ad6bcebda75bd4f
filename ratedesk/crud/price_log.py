from __future__ import annotations

import base64
import json
import logging
from collections.abc import Sequence

from supabase import Client

from ratedesk.engine.models import PriceChangeLog

logger = logging.getLogger(__name__)


async def get_price_history(
    client: Client,
    property_id: str,
    room_type: str | None = None,
    from_date: str | None = None,
    to_date: str | None = None,
    limit: int = 50,
    cursor: str | None = None,
) -> tuple[list[dict], str | None]:
    """Newest-first page of price changes, optionally narrowed by target date.

    Rows from one bulk edit share a timestamp, so paging walks the identity
    column rather than created_at.
    """
    query = (
        client.table("price_change_log")
        .select("*")
        .eq("property_id", property_id)
        .order("id", desc=True)
    )
    if room_type:
        query = query.eq("room_type", room_type)
    if from_date:
        query = query.gte("target_date", from_date)
    if to_date:
        query = query.lte("target_date", to_date)
    if cursor:
        try:
            decoded = json.loads(base64.b64decode(cursor))
            last_id = int(decoded["id"])
        except (ValueError, KeyError, TypeError) as exc:
            raise ValueError("Invalid cursor.") from exc
        query = query.lt("id", last_id)

    response = query.limit(limit + 1).execute()
    rows = response.data or []

    next_cursor = None
    if len(rows) > limit:
        rows = rows[:limit]
        last = rows[-1]
        next_cursor = base64.b64encode(
            json.dumps({"created_at": last["created_at"], "id": last["id"]}).encode()
        ).decode()

    return rows, next_cursor


async def record_price_changes(
    client: Client, property_id: str, logs: Sequence[PriceChangeLog]
) -> int:
    """Append change entries. Returns how many rows were written.

    The rate change itself is already saved when this runs, so a failed insert
    is logged and reported as zero rather than failing the request.
    """
    if not logs:
        return 0
    rows = [
        {
            "property_id": property_id,
            "room_id": log.room_id,
            "room_type": log.room_type,
            "target_date": log.target_date.isoformat(),
            "old_price": log.old_price,
            "new_price": log.new_price,
            "action": log.action,
            "user": log.user,
            "created_at": log.timestamp.isoformat(),
        }
        for log in logs
    ]
    try:
        response = client.table("price_change_log").insert(rows).execute()
    except Exception as e:
        logger.warning(f"Failed to record {len(rows)} price change(s): {e}")
        return 0
    return len(response.data or [])
