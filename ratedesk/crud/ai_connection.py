from __future__ import annotations

from cryptography.fernet import Fernet
from supabase import Client

from ratedesk.core.config import get_settings


def _get_fernet() -> Fernet:
    settings = get_settings()
    key = settings.encryption_key
    if not key:
        raise ValueError("ENCRYPTION_KEY env var is required for API key encryption")
    return Fernet(key.encode() if isinstance(key, str) else key)


def decrypt_api_key(encrypted: str) -> str:
    return _get_fernet().decrypt(encrypted.encode()).decode()


async def get_pricing_api_key(
    client: Client, property_id: str, provider: str = "openai"
) -> str | None:
    """API key for pricing suggestions.

    Prefers the property's own enabled connection; falls back to the
    deployment-wide OPENAI_API_KEY. None means suggestions are unavailable.
    """
    response = (
        client.table("ai_connections")
        .select("api_key_encrypted, enabled")
        .eq("property_id", property_id)
        .eq("provider", provider)
        .eq("enabled", True)
        .execute()
    )
    encrypted = response.data[0].get("api_key_encrypted") if response.data else None
    if encrypted:
        return decrypt_api_key(encrypted)
    return get_settings().openai_api_key
