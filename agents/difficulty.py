"""Difficulty ladder used for adaptive question generation."""
from __future__ import annotations

from typing import Literal, Tuple

Difficulty = Literal["Junior", "Mid", "Senior", "Lead"]

LEVELS: Tuple[str, ...] = ("Junior", "Mid", "Senior", "Lead")


def is_level(value: object) -> bool:
    return isinstance(value, str) and value in LEVELS


def step_up(level: str) -> str:
    """Return the next harder level; ``Lead`` stays ``Lead``."""

    idx = LEVELS.index(level)
    return LEVELS[min(idx + 1, len(LEVELS) - 1)]


def step_down(level: str) -> str:
    """Return the next easier level; ``Junior`` stays ``Junior``."""

    idx = LEVELS.index(level)
    return LEVELS[max(idx - 1, 0)]


__all__ = ["Difficulty", "LEVELS", "is_level", "step_down", "step_up"]
