"""Session-keyed store of SessionState."""

from typing import Any

from loguru import logger

from trimwire.messages import find_last_compaction
from trimwire.state.persistence import StatePersistence
from trimwire.state.session import SessionState
from trimwire.state.sync import sync_tool_cache


class SessionStore:
    """Owns one SessionState per host session id."""

    def __init__(self, persistence: StatePersistence | None = None):
        self.persistence = persistence
        self._states: dict[str, SessionState] = {}

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._states

    def get(self, session_id: str) -> SessionState | None:
        return self._states.get(session_id)

    def get_or_create(self, session_id: str) -> SessionState:
        """Return the cached state, loading a persisted copy or creating a new one."""
        state = self._states.get(session_id)
        if state is not None:
            return state

        if self.persistence:
            state = self.persistence.load(session_id)
            if state:
                logger.info(f"Restored state for session {session_id}")
        if state is None:
            state = SessionState(session_id=session_id)

        self._states[session_id] = state
        return state

    def discard(self, session_id: str) -> None:
        """Drop a finished session."""
        self._states.pop(session_id, None)


def ensure_session_initialized(
    store: SessionStore,
    session_id: str,
    messages: list[dict[str, Any]],
    protected_tools: list[str],
) -> SessionState:
    """Fetch the session's state and bring it up to date with ``messages``."""
    state = store.get_or_create(session_id)
    state.last_compaction = find_last_compaction(messages)
    sync_tool_cache(state, messages, protected_tools)
    return state
