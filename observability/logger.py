"""Structured session event logging.

``log_event`` writes one human-readable line per event to stdout and, when
``ENABLE_FILE_LOGS`` is set, the same event as a JSON line to a rotating file.
``configure_logging`` sets up the root logger used by module-level loggers.
"""
from __future__ import annotations

import json
import logging
import logging.handlers
import os
import sys
import time
import uuid
from typing import Any, Optional


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes")


LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
ENABLE_FILE_LOGS = _env_flag("ENABLE_FILE_LOGS", "0")
LOG_FILE = os.getenv("LOG_FILE", "logs/interview-events.jsonl")
LOG_MAX_BYTES = int(os.getenv("LOG_MAX_BYTES", "5242880"))
LOG_BACKUP_COUNT = int(os.getenv("LOG_BACKUP_COUNT", "5"))

HUMAN_FORMAT = "[%(asctime)s] %(levelname)s %(name)s :: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

EVENT_LOGGER = "interview.events"
_HUMAN_KEYS = ("node", "action", "phase", "score", "question_number", "ms", "outcome", "reason")

_events = logging.getLogger(EVENT_LOGGER)
_events.setLevel(LOG_LEVEL)
_events.propagate = False
_installed = False


def configure_logging(level: Optional[str] = None) -> None:
    """Route module loggers to stdout in the same format as session events."""

    logging.basicConfig(level=(level or LOG_LEVEL), format=HUMAN_FORMAT, datefmt=DATE_FORMAT, stream=sys.stdout)


def _is_json(record: logging.LogRecord) -> bool:
    return getattr(record, "is_json", False) is True


def _install_handlers() -> None:
    global _installed
    if _installed:
        return
    _installed = True
    console = logging.StreamHandler(stream=sys.stdout)
    console.setFormatter(logging.Formatter(HUMAN_FORMAT, datefmt=DATE_FORMAT))
    console.addFilter(lambda record: not _is_json(record))
    _events.addHandler(console)

    if ENABLE_FILE_LOGS:
        log_dir = os.path.dirname(LOG_FILE)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        json_file = logging.handlers.RotatingFileHandler(LOG_FILE, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUP_COUNT)
        json_file.setFormatter(logging.Formatter("%(message)s"))
        json_file.addFilter(_is_json)
        _events.addHandler(json_file)


def _format_human(evt: dict[str, Any]) -> str:
    extras = " ".join(f"{key}={evt[key]}" for key in _HUMAN_KEYS if key in evt)
    base = f"session={evt.get('session_id')} kind={evt.get('kind')}"
    return f"{base} {extras}" if extras else base


def _handle(message: str, *, is_json: bool) -> None:
    record = _events.makeRecord(_events.name, logging.INFO, "", 0, message, (), None)
    record.is_json = is_json  # type: ignore[attr-defined]
    _events.handle(record)


def log_event(kind: str, session_id: str, **fields: Any) -> None:
    _install_handlers()
    payload: dict[str, Any] = {"ts": time.time(), "trace": str(uuid.uuid4()), "kind": kind, "session_id": session_id}
    payload.update(fields)
    _handle(_format_human(payload), is_json=False)
    if ENABLE_FILE_LOGS:
        _handle(json.dumps(payload, ensure_ascii=False, default=str), is_json=True)


__all__ = ["EVENT_LOGGER", "configure_logging", "log_event"]
