from __future__ import annotations  # Ephemeral session-state stores

from threading import Lock
from typing import Dict, Optional, Protocol

from .models import SessionState


class SessionStateStore(Protocol):  # Keyed store for live decision state
    def get(self, session_id: str) -> Optional[SessionState]: ...

    def put(self, session_id: str, state: SessionState) -> None: ...

    def delete(self, session_id: str) -> None: ...


class InMemorySessionStateStore:  # Process-local store; contents are lost on restart
    def __init__(self) -> None:
        self._states: Dict[str, SessionState] = {}
        self._guard = Lock()

    def get(self, session_id: str) -> Optional[SessionState]:
        with self._guard:
            state = self._states.get(session_id)
        return state.model_copy() if state is not None else None

    def put(self, session_id: str, state: SessionState) -> None:
        with self._guard:
            self._states[session_id] = state.model_copy()

    def delete(self, session_id: str) -> None:
        with self._guard:
            self._states.pop(session_id, None)

    def __len__(self) -> int:
        with self._guard:
            return len(self._states)


__all__ = ["InMemorySessionStateStore", "SessionStateStore"]
