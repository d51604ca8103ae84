"""Retrying gateway in front of the generation capability.

Every generation request made by the orchestrator goes through
:class:`GenerationGateway`. Rate-limit signals (HTTP 429, or a ``429`` /
``RESOURCE_EXHAUSTED`` marker in the error text) are retried with a linear
backoff that honours any delay the service suggests; everything else fails
fast as :class:`GenerationFailure`.
"""
from __future__ import annotations

import logging
import re
import time
from typing import Any, Callable, Mapping, Optional

from agents.prompts import render_prompt
from config.registry import GENERATION_KEY, get_model
from config.settings import settings

logger = logging.getLogger(__name__)

RATE_LIMITED_MESSAGE = "AI service is temporarily rate-limited. Please wait a minute and try again."

_RATE_LIMIT_MARKERS = ("429", "RESOURCE_EXHAUSTED")
_RETRY_DELAY_PATTERN = re.compile(r"retryDelay.*?(\d+(?:\.\d+)?)s")


class GenerationFailure(RuntimeError):
    """The generation capability failed with a non-retryable error."""


class RateLimited(GenerationFailure):
    """Rate-limit retries were exhausted."""

    def __init__(self, message: str = RATE_LIMITED_MESSAGE) -> None:
        super().__init__(message)


def is_rate_limited(exc: BaseException) -> bool:
    """Return True when ``exc`` carries a rate-limit signal."""

    for attr in ("status_code", "status"):
        if getattr(exc, attr, None) == 429:
            return True
    text = str(exc)
    return any(marker in text for marker in _RATE_LIMIT_MARKERS)


def suggested_delay(exc: BaseException) -> float:
    """Extract the service-suggested retry delay in seconds, or 0."""

    retry_after = getattr(exc, "retry_after", None)
    if isinstance(retry_after, (int, float)) and retry_after > 0:
        return float(retry_after)
    match = _RETRY_DELAY_PATTERN.search(str(exc))
    if match:
        return float(match.group(1))
    return 0.0


def backoff_delay(attempt: int, base_delay: float, hint: float = 0.0) -> float:
    """Delay before retry number ``attempt + 1``."""

    return max(hint, (attempt + 1) * base_delay)


class GenerationGateway:
    """Render prompts, call the capability and retry on throttling."""

    def __init__(
        self,
        capability: Optional[Callable[..., Any]] = None,
        *,
        max_retries: Optional[int] = None,
        base_delay_s: Optional[float] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._capability = capability
        self._max_retries = settings.GENERATION_MAX_RETRIES if max_retries is None else max_retries
        self._base_delay = settings.GENERATION_BASE_DELAY_S if base_delay_s is None else base_delay_s
        self._sleep = sleep

    def generate(self, prompt_kind: str, params: Mapping[str, Any]) -> str:
        """Return the raw text produced for ``prompt_kind``.

        Raises:
            RateLimited: If the service kept throttling after every retry.
            GenerationFailure: On any other capability error.
        """

        messages = render_prompt(prompt_kind, params)
        capability = self._resolve()
        for attempt in range(self._max_retries + 1):
            try:
                raw = capability(kind=prompt_kind, messages=messages, inputs=dict(params))
            except Exception as exc:  # noqa: BLE001
                if not is_rate_limited(exc):
                    logger.error("Generation failed kind=%s: %s", prompt_kind, exc)
                    raise GenerationFailure(str(exc) or exc.__class__.__name__) from exc
                if attempt >= self._max_retries:
                    logger.error("Generation rate-limited kind=%s, retries exhausted", prompt_kind)
                    raise RateLimited() from exc
                delay = backoff_delay(attempt, self._base_delay, suggested_delay(exc))
                logger.warning(
                    "Rate limited kind=%s. Retrying in %.1fs (attempt %d/%d)",
                    prompt_kind,
                    delay,
                    attempt + 1,
                    self._max_retries,
                )
                self._sleep(delay)
                continue
            return str(raw).strip()
        raise RateLimited()  # pragma: no cover - loop always returns or raises

    def _resolve(self) -> Callable[..., Any]:
        if self._capability is not None:
            return self._capability
        try:
            return get_model(GENERATION_KEY)
        except KeyError as exc:
            raise GenerationFailure("No generation capability configured") from exc


__all__ = [
    "GenerationFailure",
    "GenerationGateway",
    "RATE_LIMITED_MESSAGE",
    "RateLimited",
    "backoff_delay",
    "is_rate_limited",
    "suggested_delay",
]
