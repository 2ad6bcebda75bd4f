from fastapi import HTTPException, status
from pydantic import ValidationError

from ratedesk.crud.property import StaleSnapshotError
from ratedesk.engine.errors import (
    BookingError,
    DuplicateRoomError,
    EmptySelectionError,
    EngineError,
    InvalidRangeError,
    InvalidTransitionError,
    RestrictionError,
    RoomInUseError,
    UnknownReservationError,
    UnknownRoomError,
)


def http_error(exc: Exception) -> HTTPException:
    """Translate engine and persistence errors into API responses.

    Booking rejections keep their specific code so the calendar can tell a
    stop sale from an occupied room.
    """
    if isinstance(exc, RestrictionError):
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"message": exc.detail, "code": exc.code, "kind": exc.kind},
        )
    if isinstance(exc, (BookingError, DuplicateRoomError, RoomInUseError)):
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"message": exc.detail, "code": exc.code},
        )
    if isinstance(exc, (UnknownRoomError, UnknownReservationError)):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.detail)
    if isinstance(exc, (InvalidRangeError, EmptySelectionError, InvalidTransitionError)):
        return HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": exc.detail, "code": exc.code},
        )
    if isinstance(exc, StaleSnapshotError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    if isinstance(exc, EngineError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.detail)
    if isinstance(exc, ValidationError):
        # Model validators raise engine errors; pydantic wraps them.
        for error in exc.errors():
            cause = error.get("ctx", {}).get("error")
            if isinstance(cause, EngineError):
                return http_error(cause)
        return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
    if isinstance(exc, ValueError):
        return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
    raise exc
