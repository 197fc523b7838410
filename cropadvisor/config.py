"""Application settings loaded from environment variables via pydantic-settings."""

from enum import StrEnum
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LogFormat(StrEnum):
    json = "json"
    console = "console"


class Settings(BaseSettings):
    """Central configuration; all values sourced from env vars or .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # ── Advisory service ────────────────────────────────────────────────────
    advisory_api_key: str = ""
    advisory_base_url: str = "https://openrouter.ai/api/v1/chat/completions"
    advisory_model: str = "openai/gpt-oss-20b:free"
    advisory_temperature: float = Field(default=0.0, ge=0.0, le=0.5)
    advisory_max_tokens: int = 1400
    advisory_timeout_seconds: float = Field(default=30.0, ge=20.0, le=60.0)
    advisory_referer: str = "http://localhost"
    advisory_title: str = "CropAdvisor Recommendation"

    # ── Engine ──────────────────────────────────────────────────────────────
    shortlist_limit: int = Field(default=7, ge=1)
    prompt_top_k: int = Field(default=7, ge=1)
    recommendation_count: int = Field(default=3, ge=1)

    # ── Field advisories ────────────────────────────────────────────────────
    rotation_option_count: int = Field(default=3, ge=1)
    market_price_tolerance: float = Field(default=0.25, ge=0.0, le=1.0)
    market_profit_comfort: int = 15000

    # ── Scoring calibration ─────────────────────────────────────────────────
    season_match_bonus: float = 10.0
    season_mismatch_penalty: float = -12.0
    out_of_range_penalty: float = -5.0
    optimum_reward: float = 5.0

    # ── Yield calibration ───────────────────────────────────────────────────
    yield_default_base: float = 2.0
    yield_temperature_optimum: float = 25.0
    yield_temperature_spread: float = Field(default=12.0, gt=0.0)
    yield_nutrient_default: float = 0.4
    yield_nutrient_min: float = 0.6
    yield_nutrient_max: float = 1.6
    yield_moisture_default: float = 0.5
    yield_moisture_min: float = 0.4
    yield_moisture_max: float = 1.4

    # ── Observability ───────────────────────────────────────────────────────
    log_level: str = "info"
    log_format: LogFormat = LogFormat.json


@lru_cache
def get_settings() -> Settings:
    """Singleton settings instance (cached after first call)."""
    return Settings()
