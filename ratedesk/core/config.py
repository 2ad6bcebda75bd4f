from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ratedesk.engine.models import DEFAULT_BOARD_SURCHARGES, RateRules


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "ratedesk"
    log_level: str = Field("INFO", env="LOG_LEVEL")

    # Supabase configuration (required)
    supabase_url: str = Field(..., env="SUPABASE_URL")
    supabase_service_key: str = Field(..., env="SUPABASE_SERVICE_KEY")

    # JWT configuration (tokens are issued by the auth service)
    jwt_secret: str = Field(..., env="JWT_SECRET")
    algorithm: str = "HS256"

    # AI pricing suggestions
    openai_api_key: str | None = Field(None, env="OPENAI_API_KEY")
    encryption_key: str | None = Field(None, env="ENCRYPTION_KEY")
    pricing_model: str = "gpt-4o-mini"

    # Rate calendar rules
    agency_discount: float = 0.15
    default_inventory: int = 5
    board_surcharges: dict[str, float] = Field(
        default_factory=lambda: dict(DEFAULT_BOARD_SURCHARGES)
    )
    max_adjustment_pct: float = 100.0
    suggestion_window_days: int = 7

    # Optimistic concurrency on property snapshots
    snapshot_save_retries: int = 3

    @model_validator(mode="after")
    def validate_settings(self):
        if not self.supabase_url or not self.supabase_service_key:
            raise ValueError(
                "SUPABASE_URL and SUPABASE_SERVICE_KEY are required. "
                "Get these from your Supabase project settings."
            )

        if not self.supabase_url.endswith(".supabase.co"):
            raise ValueError(
                "SUPABASE_URL must be a valid Supabase project URL "
                "(e.g., https://<project>.supabase.co)"
            )

        if not 0 <= self.agency_discount < 1:
            raise ValueError("AGENCY_DISCOUNT must be in [0, 1).")

        negative = sorted(name for name, value in self.board_surcharges.items() if value < 0)
        if negative:
            raise ValueError(
                "BOARD_SURCHARGES must be non-negative: " + ", ".join(negative)
            )

        if self.snapshot_save_retries < 1:
            raise ValueError("SNAPSHOT_SAVE_RETRIES must be at least 1.")

        return self

    def rate_rules(self) -> RateRules:
        return RateRules(
            agency_discount=self.agency_discount,
            default_inventory=self.default_inventory,
            board_surcharges=self.board_surcharges,
            max_adjustment_pct=self.max_adjustment_pct,
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()


def get_rate_rules() -> RateRules:
    return get_settings().rate_rules()
