"""Error taxonomy for the session orchestrator."""
from __future__ import annotations


class OrchestratorError(Exception):
    """Base class for user-actionable orchestrator errors."""


class InputValidationError(OrchestratorError, ValueError):
    """A request field is missing or malformed."""


class SessionNotFound(OrchestratorError, LookupError):
    """No persisted session matches the identifier."""

    def __init__(self, session_id: str) -> None:
        super().__init__("Session not found")
        self.session_id = session_id


class SessionNotActive(OrchestratorError):
    """The session has no live decision state for the requested operation."""

    def __init__(self, session_id: str, message: str = "Session not active") -> None:
        super().__init__(message)
        self.session_id = session_id


class PersistenceError(RuntimeError):
    """The session store failed; not retried at this layer."""


__all__ = [
    "InputValidationError",
    "OrchestratorError",
    "PersistenceError",
    "SessionNotActive",
    "SessionNotFound",
]
