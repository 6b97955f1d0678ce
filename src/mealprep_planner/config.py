"""Application configuration."""

import os
from datetime import timedelta

from pydantic_settings import BaseSettings, SettingsConfigDict

from mealprep_planner.domain.rate_limits import (
    GENERATE_PLAN,
    SUBSTITUTE_INGREDIENT,
    SWAP_MEAL,
    RateLimitRule,
)

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    admin_token: str
    openai_api_key: str
    openai_model: str = "gpt-5.2"
    openai_skeleton_model: str = "gpt-5-mini"
    openai_substitute_model: str = "gpt-5-mini"
    openai_reasoning_effort: str | None = "low"
    openai_store: bool = False
    batch_max_tokens: int = 8000
    swap_max_tokens: int = 3000
    substitute_max_tokens: int = 1500
    skeleton_base_tokens: int = 1500
    skeleton_tokens_per_day: int = 200
    skeleton_max_tokens: int = 4000
    generate_plan_daily_limit: int = 50
    swap_meal_daily_limit: int = 100
    substitute_ingredient_daily_limit: int = 100
    rate_limit_window_hours: int = 24
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def rate_limit_rules(settings: Settings) -> dict[str, RateLimitRule]:
    """Build per-action quotas from settings."""
    window = timedelta(hours=settings.rate_limit_window_hours)
    return {
        GENERATE_PLAN: RateLimitRule(
            limit=settings.generate_plan_daily_limit, window=window
        ),
        SWAP_MEAL: RateLimitRule(limit=settings.swap_meal_daily_limit, window=window),
        SUBSTITUTE_INGREDIENT: RateLimitRule(
            limit=settings.substitute_ingredient_daily_limit, window=window
        ),
    }
