"""Property snapshot persistence.

Each property's rooms and reservations live in one ``property_snapshots`` row
as JSON, together with a ``version`` counter. Saves are compare-and-swap on
that counter so two staff members editing the same calendar cannot silently
overwrite each other.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any, TypeVar

from postgrest.exceptions import APIError
from pydantic import BaseModel
from supabase import Client

from ratedesk.engine.models import Reservation, Room

logger = logging.getLogger(__name__)

T = TypeVar("T")


class PropertySnapshot(BaseModel):
    property_id: str
    rooms: list[Room] = []
    reservations: list[Reservation] = []
    version: int = 0


class StaleSnapshotError(Exception):
    """Another writer saved the property since this snapshot was loaded."""

    def __init__(self, property_id: str, expected_version: int):
        self.property_id = property_id
        self.expected_version = expected_version
        super().__init__(
            f"Property {property_id} changed since version {expected_version}. "
            "Reload and try again."
        )


async def user_owns_property(client: Client, user_id: str, property_id: str) -> bool:
    """Check if user has access to this property via team membership."""
    prop = (
        client.table("properties").select("account_id").eq("id", property_id).execute()
    )
    if not prop.data:
        return False
    membership = (
        client.table("team_members")
        .select("id")
        .eq("account_id", prop.data[0]["account_id"])
        .eq("user_id", user_id)
        .is_("deleted_at", "null")
        .execute()
    )
    return bool(membership.data)


async def load_property(client: Client, property_id: str) -> PropertySnapshot:
    """Fetch the latest snapshot. A property never saved yet is empty at version 0."""
    response = (
        client.table("property_snapshots")
        .select("*")
        .eq("property_id", property_id)
        .execute()
    )
    if not response.data:
        return PropertySnapshot(property_id=property_id)
    row = response.data[0]
    return PropertySnapshot(
        property_id=property_id,
        rooms=row.get("rooms") or [],
        reservations=row.get("reservations") or [],
        version=row.get("version") or 0,
    )


def _snapshot_row(snapshot: PropertySnapshot, version: int) -> dict[str, Any]:
    return {
        "property_id": snapshot.property_id,
        "rooms": [room.model_dump(mode="json") for room in snapshot.rooms],
        "reservations": [
            reservation.model_dump(mode="json") for reservation in snapshot.reservations
        ],
        "version": version,
        "updated_at": datetime.now(timezone.utc).isoformat(),
    }


async def save_property(client: Client, snapshot: PropertySnapshot) -> PropertySnapshot:
    """Persist a snapshot that was derived from version ``snapshot.version``.

    Raises StaleSnapshotError when the stored version moved on in between.
    """
    expected = snapshot.version
    row = _snapshot_row(snapshot, expected + 1)

    if expected == 0:
        try:
            response = client.table("property_snapshots").insert(row).execute()
        except APIError as exc:
            # unique(property_id): someone created the row first
            raise StaleSnapshotError(snapshot.property_id, expected) from exc
    else:
        response = (
            client.table("property_snapshots")
            .update(row)
            .eq("property_id", snapshot.property_id)
            .eq("version", expected)
            .execute()
        )

    if not response.data:
        raise StaleSnapshotError(snapshot.property_id, expected)
    return snapshot.model_copy(update={"version": expected + 1})


async def mutate_property(
    client: Client,
    property_id: str,
    mutate: Callable[[PropertySnapshot], tuple[PropertySnapshot | None, T]],
    *,
    retries: int = 3,
) -> tuple[PropertySnapshot, T]:
    """Load, change and save a property, re-fetching on concurrent edits.

    ``mutate`` receives a fresh snapshot and returns the snapshot to save
    (or None to save nothing) plus a result for the caller. It is re-run
    against a newly loaded snapshot every time the save loses the race.
    """
    for attempt in range(1, retries + 1):
        snapshot = await load_property(client, property_id)
        updated, result = mutate(snapshot)
        if updated is None:
            return snapshot, result
        try:
            saved = await save_property(client, updated)
        except StaleSnapshotError:
            logger.warning(
                f"Snapshot conflict on property {property_id} "
                f"(attempt {attempt}/{retries}, version {snapshot.version})"
            )
            continue
        return saved, result
    raise StaleSnapshotError(property_id, snapshot.version)
