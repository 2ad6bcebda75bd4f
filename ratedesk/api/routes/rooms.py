from uuid import uuid4

from fastapi import APIRouter, Depends, status
from supabase import Client

from ratedesk.api import deps
from ratedesk.api.errors import http_error
from ratedesk.core.config import get_settings
from ratedesk.crud.property import StaleSnapshotError, load_property, mutate_property
from ratedesk.db.base import get_supabase
from ratedesk.engine.conflicts import find_room
from ratedesk.engine.errors import EngineError
from ratedesk.engine.models import Room
from ratedesk.engine.rooms import add_room, remove_room, update_room
from ratedesk.schemas.room import RoomCreate, RoomListResponse, RoomResponse, RoomUpdate

router = APIRouter(prefix="/v1.0/properties/{property_id}/rooms", tags=["rooms"])


async def _save_room_change(client: Client, property_id: str, mutate):
    try:
        return await mutate_property(
            client,
            property_id,
            mutate,
            retries=get_settings().snapshot_save_retries,
        )
    except (EngineError, StaleSnapshotError, ValueError) as exc:
        raise http_error(exc)


@router.get("", response_model=RoomListResponse)
async def list_rooms(
    property_id: str,
    current_user: dict = Depends(deps.check_property_access),
    client: Client = Depends(get_supabase),
):
    """List all rooms for a property."""
    snapshot = await load_property(client, property_id)
    return RoomListResponse(items=snapshot.rooms, version=snapshot.version)


@router.post("", response_model=RoomResponse, status_code=status.HTTP_201_CREATED)
async def create_new_room(
    property_id: str,
    payload: RoomCreate,
    current_user: dict = Depends(deps.check_property_access),
    client: Client = Depends(get_supabase),
):
    """Create a new room in a property."""
    room = Room(id=uuid4().hex, **payload.model_dump())

    def mutate(snapshot):
        return snapshot.model_copy(update={"rooms": add_room(snapshot.rooms, room)}), room

    saved, created = await _save_room_change(client, property_id, mutate)
    return RoomResponse(room=created, version=saved.version)


@router.get("/{room_id}", response_model=RoomResponse)
async def get_single_room(
    property_id: str,
    room_id: str,
    current_user: dict = Depends(deps.check_property_access),
    client: Client = Depends(get_supabase),
):
    """Get a single room with its stored rate calendar."""
    snapshot = await load_property(client, property_id)
    try:
        room = find_room(snapshot.rooms, room_id)
    except EngineError as exc:
        raise http_error(exc)
    return RoomResponse(room=room, version=snapshot.version)


@router.patch("/{room_id}", response_model=RoomResponse)
async def update_existing_room(
    property_id: str,
    room_id: str,
    payload: RoomUpdate,
    current_user: dict = Depends(deps.check_property_access),
    client: Client = Depends(get_supabase),
):
    """Update a room's number, type, base price or board types."""
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)

    def mutate(snapshot):
        rooms, updated = update_room(snapshot.rooms, room_id, changes)
        return snapshot.model_copy(update={"rooms": rooms}), updated

    saved, updated = await _save_room_change(client, property_id, mutate)
    return RoomResponse(room=updated, version=saved.version)


@router.delete("/{room_id}", status_code=status.HTTP_200_OK)
async def delete_existing_room(
    property_id: str,
    room_id: str,
    current_user: dict = Depends(deps.check_property_access),
    client: Client = Depends(get_supabase),
):
    """Delete a room. Rooms with reservations that are not cancelled are kept."""

    def mutate(snapshot):
        rooms = remove_room(snapshot.rooms, snapshot.reservations, room_id)
        return snapshot.model_copy(update={"rooms": rooms}), room_id

    saved, _ = await _save_room_change(client, property_id, mutate)
    return {"message": "Room deleted", "id": room_id, "version": saved.version}
