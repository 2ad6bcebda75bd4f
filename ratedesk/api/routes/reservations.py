from datetime import date
from uuid import uuid4

from fastapi import APIRouter, Depends, Query, status
from supabase import Client

from ratedesk.api import deps
from ratedesk.api.errors import http_error
from ratedesk.core.config import get_settings
from ratedesk.crud.property import StaleSnapshotError, load_property, mutate_property
from ratedesk.db.base import get_supabase
from ratedesk.engine.availability import available_rooms
from ratedesk.engine.conflicts import (
    NON_BLOCKING_STATUSES,
    find_reservation,
    find_room,
    validate_booking,
)
from ratedesk.engine.errors import BookingError, EngineError
from ratedesk.engine.lifecycle import transition
from ratedesk.engine.models import RateRules, Reservation, Room, RoomType
from ratedesk.engine.rates import quote_stay
from ratedesk.engine.relocation import relocate
from ratedesk.schemas.reservation import (
    QuoteRequest,
    QuoteResponse,
    ReservationCreate,
    ReservationListResponse,
    ReservationMove,
    ReservationResponse,
    ReservationStatusChange,
    ReservationUpdate,
)

router = APIRouter(prefix="/v1.0/properties/{property_id}", tags=["reservations"])

STAY_FIELDS = {"room_id", "check_in", "check_out"}


def _replace(reservations: list[Reservation], updated: Reservation) -> list[Reservation]:
    return [updated if r.id == updated.id else r for r in reservations]


async def _save_reservation_change(client: Client, property_id: str, mutate) -> ReservationResponse:
    try:
        saved, result = await mutate_property(
            client,
            property_id,
            mutate,
            retries=get_settings().snapshot_save_retries,
        )
    except (EngineError, StaleSnapshotError, ValueError) as exc:
        raise http_error(exc)
    if isinstance(result, BookingError):
        raise http_error(result)
    return ReservationResponse(reservation=result, version=saved.version)


@router.get("/reservations", response_model=ReservationListResponse)
async def list_reservations(
    property_id: str,
    status_filter: str | None = Query(None, alias="status"),
    room_id: str | None = None,
    current_user: dict = Depends(deps.check_property_access),
    client: Client = Depends(get_supabase),
):
    """List reservations for a property, optionally filtered by status or room."""
    snapshot = await load_property(client, property_id)
    items = [
        r
        for r in snapshot.reservations
        if (status_filter is None or r.status == status_filter)
        and (room_id is None or r.room_id == room_id)
    ]
    items.sort(key=lambda r: (r.check_in, r.room_id))
    return ReservationListResponse(items=items, version=snapshot.version)


@router.post(
    "/reservations", response_model=ReservationResponse, status_code=status.HTTP_201_CREATED
)
async def create_reservation(
    property_id: str,
    payload: ReservationCreate,
    current_user: dict = Depends(deps.check_property_access),
    client: Client = Depends(get_supabase),
    rules: RateRules = Depends(deps.rate_rules),
):
    """Create a reservation. Without an amount the stay is priced from the rate calendar."""

    def mutate(snapshot):
        room = find_room(snapshot.rooms, payload.room_id)
        amount = payload.amount
        if amount is None:
            amount = quote_stay(
                room,
                payload.check_in,
                payload.check_out,
                source=payload.source,
                board_type=payload.board_type,
                extras=payload.extras,
                rules=rules,
            ).total
        reservation = Reservation(
            id=uuid4().hex,
            **payload.model_dump(exclude={"amount"}),
            amount=amount,
        )
        error = validate_booking(snapshot.rooms, snapshot.reservations, reservation, rules)
        if error is not None:
            return None, error
        reservations = [*snapshot.reservations, reservation]
        return snapshot.model_copy(update={"reservations": reservations}), reservation

    return await _save_reservation_change(client, property_id, mutate)


@router.patch("/reservations/{reservation_id}", response_model=ReservationResponse)
async def update_reservation(
    property_id: str,
    reservation_id: str,
    payload: ReservationUpdate,
    current_user: dict = Depends(deps.check_property_access),
    client: Client = Depends(get_supabase),
    rules: RateRules = Depends(deps.rate_rules),
):
    """Edit reservation details. Room or date changes are re-checked for conflicts."""
    changes = payload.model_dump(exclude_unset=True)

    def mutate(snapshot):
        current = find_reservation(snapshot.reservations, reservation_id)
        updated = Reservation.model_validate({**current.model_dump(), **changes})
        if STAY_FIELDS & changes.keys() and updated.status not in NON_BLOCKING_STATUSES:
            error = validate_booking(snapshot.rooms, snapshot.reservations, updated, rules)
            if error is not None:
                return None, error
        reservations = _replace(snapshot.reservations, updated)
        return snapshot.model_copy(update={"reservations": reservations}), updated

    return await _save_reservation_change(client, property_id, mutate)


@router.post("/reservations/{reservation_id}/move", response_model=ReservationResponse)
async def move_reservation(
    property_id: str,
    reservation_id: str,
    payload: ReservationMove,
    current_user: dict = Depends(deps.check_property_access),
    client: Client = Depends(get_supabase),
    rules: RateRules = Depends(deps.rate_rules),
):
    """Drag-and-drop move on the calendar: new room and/or arrival, same length."""

    def mutate(snapshot):
        moved = relocate(
            snapshot.rooms,
            snapshot.reservations,
            reservation_id,
            payload.room_id,
            payload.check_in,
            rules,
        )
        if isinstance(moved, BookingError):
            return None, moved
        reservations = _replace(snapshot.reservations, moved)
        return snapshot.model_copy(update={"reservations": reservations}), moved

    return await _save_reservation_change(client, property_id, mutate)


@router.post("/reservations/{reservation_id}/status", response_model=ReservationResponse)
async def change_reservation_status(
    property_id: str,
    reservation_id: str,
    payload: ReservationStatusChange,
    current_user: dict = Depends(deps.check_property_access),
    client: Client = Depends(get_supabase),
):
    """Check in, check out, cancel or refund a reservation."""

    def mutate(snapshot):
        updated = transition(find_reservation(snapshot.reservations, reservation_id), payload.action)
        reservations = _replace(snapshot.reservations, updated)
        return snapshot.model_copy(update={"reservations": reservations}), updated

    return await _save_reservation_change(client, property_id, mutate)


@router.post("/quote", response_model=QuoteResponse)
async def quote_reservation(
    property_id: str,
    payload: QuoteRequest,
    current_user: dict = Depends(deps.check_property_access),
    client: Client = Depends(get_supabase),
    rules: RateRules = Depends(deps.rate_rules),
):
    """Price a stay on a room without booking it."""
    snapshot = await load_property(client, property_id)
    try:
        room = find_room(snapshot.rooms, payload.room_id)
        quote = quote_stay(
            room,
            payload.check_in,
            payload.check_out,
            source=payload.source,
            board_type=payload.board_type,
            extras=payload.extras,
            rules=rules,
        )
    except EngineError as exc:
        raise http_error(exc)
    return QuoteResponse(**quote.model_dump(), room_id=room.id, source=payload.source)


@router.get("/availability", response_model=list[Room])
async def list_available_rooms(
    property_id: str,
    check_in: date = Query(...),
    check_out: date = Query(...),
    room_type: RoomType | None = Query(None),
    current_user: dict = Depends(deps.check_property_access),
    client: Client = Depends(get_supabase),
):
    """Rooms free of stop sales and reservations for the whole stay."""
    snapshot = await load_property(client, property_id)
    try:
        return available_rooms(
            snapshot.rooms, snapshot.reservations, check_in, check_out, room_type=room_type
        )
    except EngineError as exc:
        raise http_error(exc)
