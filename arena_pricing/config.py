"""Application configuration using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ProviderName = Literal["openrouter", "helicone", "litellm"]

SUPPORTED_TOKEN_UNITS: tuple[int, ...] = (1_000_000, 100_000)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "ArenaPricing"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    # Pricing providers
    default_provider: ProviderName = "openrouter"
    openrouter_models_url: str = "https://openrouter.ai/api/v1/models"
    helicone_costs_url: str = "https://www.helicone.ai/api/llm-costs"
    litellm_prices_url: str = (
        "https://raw.githubusercontent.com/BerriAI/litellm/main/"
        "model_prices_and_context_window.json"
    )
    provider_timeout_seconds: int = 20

    # Leaderboard
    arena_leaderboard_url: str = "https://lmarena.ai/leaderboard/text"

    # Display
    token_unit: int = 1_000_000

    # Value score
    value_elo_baseline: float = 1000.0
    value_rank_decay_base: float = 0.85

    def get_provider_url(self, provider: str) -> str:
        """Return the configured catalog URL for a pricing provider."""
        urls = {
            "openrouter": self.openrouter_models_url,
            "helicone": self.helicone_costs_url,
            "litellm": self.litellm_prices_url,
        }
        return urls[provider]

    @field_validator("token_unit")
    @classmethod
    def _validate_token_unit(cls, value: int) -> int:
        """Only per-1M and per-100K display units are supported."""
        if value not in SUPPORTED_TOKEN_UNITS:
            raise ValueError(f"TOKEN_UNIT must be one of {SUPPORTED_TOKEN_UNITS}")
        return value

    @field_validator("value_rank_decay_base")
    @classmethod
    def _validate_rank_decay_base(cls, value: float) -> float:
        if not 0.0 < value < 1.0:
            raise ValueError("VALUE_RANK_DECAY_BASE must be in (0, 1)")
        return value


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    settings = Settings()

    return settings


settings = get_settings()
