"""Simple span helper for recording step timings."""
from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Any, Iterator

from .logger import log_event


@contextmanager
def span(session_id: str, name: str, **fields: Any) -> Iterator[None]:
    start = time.time()
    outcome = "error"
    try:
        yield
        outcome = "ok"
    finally:
        elapsed_ms = int((time.time() - start) * 1000)
        log_event("span", session_id, node=name, ms=elapsed_ms, outcome=outcome, **fields)


__all__ = ["span"]
