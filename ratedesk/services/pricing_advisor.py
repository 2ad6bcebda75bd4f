"""One-shot LLM revenue-manager suggestion: raise, lower or hold a room type's price."""

from __future__ import annotations

import json
import logging
import math
from typing import Any, Literal

from openai import OpenAI
from pydantic import BaseModel, Field, ValidationError

from ratedesk.core.config import get_settings

logger = logging.getLogger(__name__)

LANGUAGE_NAMES = {
    "tr": "Turkish",
    "de": "German",
    "ru": "Russian",
    "sv": "Swedish",
    "en": "English",
}

SYSTEM_PROMPT = "You are a revenue manager for a boutique hotel. Reply with JSON only."


class PricingSuggestion(BaseModel):
    action: Literal["raise", "lower", "hold"]
    percentage: float = Field(0.0, ge=0)
    reasoning: str = ""


def build_prompt(
    room_type: str,
    current_price: float,
    occupancy_rate: float,
    competitor_avg: float | None,
    language: str = "en",
) -> str:
    language_name = LANGUAGE_NAMES.get(language, "English")
    competitor_line = (
        f"- Competitor Average Price: {competitor_avg:.2f}"
        if competitor_avg is not None
        else "- Competitor Average Price: unknown"
    )
    return "\n".join(
        [
            "Context:",
            f"- Room Type: {room_type}",
            f"- Current Price: {current_price:.2f}",
            f"- Current Occupancy for the coming days: {occupancy_rate:.0f}%",
            competitor_line,
            "",
            "Determine the best pricing strategy.",
            "- If occupancy is high (>80%) or price is significantly lower than "
            "competitors, suggest raising.",
            "- If occupancy is low (<40%) and price is higher than competitors, "
            "suggest lowering.",
            "- Otherwise hold.",
            "",
            f"The 'reasoning' field must be in {language_name} (max 15 words).",
            'Return {"action": "raise"|"lower"|"hold", '
            '"percentage": number (10 means 10%), "reasoning": string}',
        ]
    )


def parse_suggestion(payload: dict[str, Any]) -> PricingSuggestion:
    """Normalize the model's JSON; tolerates the legacy 'suggestedAction' key."""
    action = payload.get("action", payload.get("suggestedAction"))
    try:
        percentage = float(payload.get("percentage", 0) or 0)
    except (TypeError, ValueError):
        percentage = 0.0
    if math.isnan(percentage):
        percentage = 0.0
    return PricingSuggestion(
        action=str(action or "hold").strip().lower(),
        percentage=abs(percentage),
        reasoning=str(payload.get("reasoning", "")).strip(),
    )


async def suggest_pricing(
    api_key: str | None,
    room_type: str,
    current_price: float,
    occupancy_rate: float,
    competitor_avg: float | None = None,
    language: str = "en",
) -> PricingSuggestion:
    if not api_key:
        return PricingSuggestion(action="hold", percentage=0, reasoning="AI Config Missing")

    settings = get_settings()
    client = OpenAI(api_key=api_key)
    response = client.chat.completions.create(
        model=settings.pricing_model,
        messages=[
            {"role": "system", "content": SYSTEM_PROMPT},
            {
                "role": "user",
                "content": build_prompt(
                    room_type, current_price, occupancy_rate, competitor_avg, language
                ),
            },
        ],
        response_format={"type": "json_object"},
        temperature=0.2,
    )
    content = response.choices[0].message.content or ""
    try:
        payload = json.loads(content)
        if not isinstance(payload, dict):
            raise ValueError("expected a JSON object")
        return parse_suggestion(payload)
    except (ValueError, ValidationError) as e:
        logger.warning(f"Unreadable pricing suggestion for {room_type}: {e}")
        return PricingSuggestion(action="hold", percentage=0, reasoning="AI response unreadable")
