"""Configuration package for the interview orchestrator."""
from .registry import GENERATION_KEY, bind_model, get_model, is_bound, unbind_model
from .routes import AppConfig, LlmRoute, load_config
from .settings import Settings, settings

__all__ = [
    "AppConfig",
    "LlmRoute",
    "load_config",
    "GENERATION_KEY",
    "bind_model",
    "get_model",
    "is_bound",
    "unbind_model",
    "Settings",
    "settings",
]
