"""Application configuration."""

import os

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from macro_tracker.domain.goals import DailyGoals

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

ESTIMATE_PROVIDERS = {"mock", "openai"}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_key: str
    ledger_table: str = "daily_tracking"
    photo_bucket: str = "meal-photos"
    estimate_provider: str = "mock"
    openai_api_key: str | None = None
    openai_model: str = "gpt-5.2"
    openai_reasoning_effort: str = "high"
    openai_store: bool = False
    auto_commit_seconds: float = 10.0
    timezone: str = "UTC"
    log_level: str = "INFO"
    goal_calories: float = Field(default=2000.0, ge=0)
    goal_protein: float = Field(default=150.0, ge=0)
    goal_carbs: float = Field(default=200.0, ge=0)
    goal_fat: float = Field(default=65.0, ge=0)
    goal_fiber: float = Field(default=25.0, ge=0)
    goal_sugar: float = Field(default=50.0, ge=0)
    goal_sodium: float = Field(default=2300.0, ge=0)
    goal_vitamins: float = Field(default=100.0, ge=0)
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def resolve_estimate_provider(settings: Settings) -> str:
    """Return the estimate provider to use, falling back to the mock."""
    provider = settings.estimate_provider.strip().lower()
    if provider not in ESTIMATE_PROVIDERS:
        raise ValueError(f"Unknown estimate provider: {settings.estimate_provider}")
    if provider == "openai" and not settings.openai_api_key:
        return "mock"
    return provider


def daily_goals(settings: Settings) -> DailyGoals:
    """Return the configured daily goals."""
    return DailyGoals(
        calories=settings.goal_calories,
        protein=settings.goal_protein,
        carbs=settings.goal_carbs,
        fat=settings.goal_fat,
        fiber=settings.goal_fiber,
        sugar=settings.goal_sugar,
        sodium=settings.goal_sodium,
        vitamins=settings.goal_vitamins,
    )
