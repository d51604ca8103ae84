from __future__ import annotations  # HTTP transport for the generation capability

import logging
import os
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, Mapping, Optional, Protocol, Sequence

import httpx

from config import LlmRoute


logger = logging.getLogger(__name__)  # Module logger setup

PREVIEW_CHARS = 120
ERROR_BODY_CHARS = 500


class HttpClient(Protocol):  # Minimal HTTP client protocol
    def post(self, url: str, *, json: Dict[str, Any], headers: Dict[str, str], timeout: float) -> "HttpResponse": ...


class HttpResponse(Protocol):  # Minimal HTTP response protocol
    @property
    def status_code(self) -> int: ...

    @property
    def headers(self) -> Mapping[str, str]: ...

    def json(self) -> Any: ...

    @property
    def text(self) -> str: ...


class LlmGatewayError(RuntimeError):  # Transport or endpoint failure; carries the HTTP status when there is one
    def __init__(self, message: str, *, status_code: Optional[int] = None, retry_after: Optional[float] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.retry_after = retry_after


def complete(
    messages: Sequence[Dict[str, str]],
    *,
    cfg: LlmRoute,
    client: Optional[HttpClient] = None,
    options: Optional[Dict[str, Any]] = None,
) -> str:
    """POST one chat-completions request and return the reply text.

    Raises:
        LlmGatewayError: On transport failure, an HTTP error status (with
            ``status_code`` and any ``Retry-After`` hint attached) or a reply
            without message content.
    """

    payload: Dict[str, Any] = {
        "model": cfg.model,
        "messages": _normalize_messages(messages),
        "temperature": cfg.temperature,
        **(options or {}),
    }
    url = f"{cfg.base_url.rstrip('/')}{cfg.endpoint}"
    logger.info("LLM request send route=%s model=%s preview=%s", cfg.name, cfg.model, _preview(payload["messages"]))
    with _session(client) as http:
        try:
            response = http.post(url, json=payload, headers=_headers(cfg), timeout=cfg.timeout_s)
        except httpx.HTTPError as exc:
            logger.error("LLM transport failure route=%s: %s", cfg.name, exc)
            raise LlmGatewayError(f"LLM transport failed: {exc}") from exc
        content = _read_reply(response)
    logger.info("LLM request done route=%s model=%s chars=%d", cfg.name, cfg.model, len(content))
    return content


def http_capability(cfg: LlmRoute, *, client: Optional[HttpClient] = None) -> Callable[..., str]:  # Registry-compatible callable
    def _invoke(*, messages: Sequence[Dict[str, str]], **_: Any) -> str:
        return complete(messages, cfg=cfg, client=client)

    return _invoke


@contextmanager
def _session(client: Optional[HttpClient]) -> Iterator[HttpClient]:  # Caller-owned client, or a short-lived httpx client
    if client is not None:
        yield client
        return
    with httpx.Client() as owned:
        yield owned


def _headers(cfg: LlmRoute) -> Dict[str, str]:
    headers = {"Content-Type": "application/json"}
    api_key = os.getenv(cfg.api_key_env) if cfg.api_key_env else None
    if api_key:
        headers["Authorization"] = f"Bearer {api_key}"
    headers.update(cfg.extra_headers)
    return headers


def _read_reply(response: HttpResponse) -> str:
    if response.status_code >= 400:
        logger.error("LLM error status: %s", response.status_code)
        raise LlmGatewayError(
            f"LLM returned status {response.status_code}: {_clip(response.text)}",
            status_code=response.status_code,
            retry_after=_retry_after(response.headers),
        )
    try:
        data = response.json()
    except ValueError as exc:
        logger.error("Invalid JSON payload from LLM: %s", exc)
        raise LlmGatewayError("LLM payload was not JSON") from exc
    return _extract_content(data)


def _normalize_messages(messages: Sequence[Dict[str, str]]) -> list[Dict[str, str]]:  # Ensure message payload shape
    normalized: list[Dict[str, str]] = []
    for item in messages:
        if not isinstance(item, dict):
            raise TypeError("Each chat message must be a dict with role/content")
        role = str(item.get("role", "")).strip()
        if not role:
            raise ValueError("Chat message missing role")
        normalized.append({"role": role, "content": str(item.get("content", ""))})
    return normalized


def _preview(messages: Sequence[Dict[str, str]]) -> str:  # First non-empty line of the last message
    for message in reversed(messages):
        text = message.get("content", "").strip()
        if text:
            return _clip(text.splitlines()[0], PREVIEW_CHARS)
    return ""


def _extract_content(data: Any) -> str:  # OpenAI-compatible choices[0].message.content
    choices = data.get("choices") if isinstance(data, dict) else None
    if isinstance(choices, list) and choices and isinstance(choices[0], dict):
        message = choices[0].get("message")
        content = message.get("content") if isinstance(message, dict) else None
        if isinstance(content, str):
            return content
    raise LlmGatewayError("LLM response missing content")


def _retry_after(headers: Mapping[str, str]) -> Optional[float]:  # Retry-After in seconds, when numeric
    raw = headers.get("retry-after") if headers is not None else None
    if not raw:
        return None
    try:
        return max(0.0, float(raw))
    except ValueError:
        return None


def _clip(text: str, limit: int = ERROR_BODY_CHARS) -> str:
    compact = " ".join((text or "").split())
    if len(compact) <= limit:
        return compact
    return compact[: limit - 3] + "..."


__all__ = ["HttpClient", "HttpResponse", "LlmGatewayError", "complete", "http_capability"]
