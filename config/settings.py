"""Application settings and configuration management."""
from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or defaults."""

    DB_PATH: str = Field(default="data/interview.db")
    APP_CONFIG_PATH: str = Field(default="app_config.json")

    GENERATION_MAX_RETRIES: int = Field(default=3, ge=0)
    GENERATION_BASE_DELAY_S: float = Field(default=20.0, ge=0.0)

    MIN_QUESTIONS: int = 4
    MAX_QUESTIONS: int = 12
    MINUTES_PER_QUESTION: float = 2.5

    RECENT_SESSIONS_LIMIT: int = 50

    model_config = SettingsConfigDict(env_file=".env", validate_assignment=True, extra="ignore")


settings = Settings()
