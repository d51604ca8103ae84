"""Generation endpoint configuration loaded from JSON."""
from __future__ import annotations

from pathlib import Path
from typing import Dict

from pydantic import BaseModel, Field


class LlmRoute(BaseModel):
    """Chat-completions endpoint configuration."""

    name: str
    base_url: str
    endpoint: str
    model: str
    timeout_s: float = Field(default=60.0, ge=0.1)
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    api_key_env: str | None = None
    extra_headers: Dict[str, str] = Field(default_factory=dict)


class AppConfig(BaseModel):
    """Application configuration root."""

    generation: LlmRoute


def load_config(path: Path) -> AppConfig:
    """Load configuration from disk."""

    data = path.read_text(encoding="utf-8")
    return AppConfig.model_validate_json(data)
