from jose import jwt

from ratedesk.core.config import get_settings


def decode_access_token(token: str) -> dict:
    """Decode a bearer token issued by the auth service.

    Raises jose.JWTError on a bad signature or an expired token.
    """
    settings = get_settings()
    return jwt.decode(token, settings.jwt_secret, algorithms=[settings.algorithm])
