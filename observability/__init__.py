"""Observability utilities for the interview orchestrator."""
from .logger import EVENT_LOGGER, configure_logging, log_event
from .tracing import span

__all__ = ["EVENT_LOGGER", "configure_logging", "log_event", "span"]
