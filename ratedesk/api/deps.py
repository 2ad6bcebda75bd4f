from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from supabase import Client

from ratedesk.core.config import get_rate_rules
from ratedesk.core.security import decode_access_token
from ratedesk.crud.property import user_owns_property
from ratedesk.db.base import get_supabase
from ratedesk.engine.models import RateRules

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token")


async def get_current_user(token: str = Depends(oauth2_scheme)) -> dict:
    """Resolve the staff member from the bearer token."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = decode_access_token(token)
        email: str | None = payload.get("sub")
        user_id: str | None = payload.get("uid")
        if email is None or user_id is None:
            raise credentials_exception
    except (JWTError, ValueError):
        raise credentials_exception

    return {"id": user_id, "email": email}


async def check_property_access(
    property_id: str,
    current_user: dict = Depends(get_current_user),
    client: Client = Depends(get_supabase),
) -> dict:
    if not await user_owns_property(client, current_user["id"], property_id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")
    return current_user


def rate_rules() -> RateRules:
    return get_rate_rules()
