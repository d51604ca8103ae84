"""Interview session domain: models, errors and ephemeral state stores.

The lifecycle driver lives in :mod:`interview_session.machine`.
"""
from .errors import (
    InputValidationError,
    OrchestratorError,
    PersistenceError,
    SessionNotActive,
    SessionNotFound,
)
from .models import QuestionRecord, Session, SessionPhase, SessionState
from .state_store import InMemorySessionStateStore, SessionStateStore

__all__ = [
    "InMemorySessionStateStore",
    "InputValidationError",
    "OrchestratorError",
    "PersistenceError",
    "QuestionRecord",
    "Session",
    "SessionNotActive",
    "SessionNotFound",
    "SessionPhase",
    "SessionState",
    "SessionStateStore",
]
