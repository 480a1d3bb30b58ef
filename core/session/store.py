"""In-memory session store.

Holds one :class:`~core.session.state.SessionState` per session key with an
idle TTL, so a conversation nobody touched for a while is dropped on the
next access or sweep.

Usage::

    store = SessionStore(ttl_seconds=3600)
    state = store.get_or_create("chat-42", language="it")
    store.delete("chat-42")
"""

from __future__ import annotations

import logging
import time

from config import DEFAULT_LANGUAGE, SESSION_TTL_SECONDS
from core.session.state import SessionState

__all__ = ["SessionStore"]

logger = logging.getLogger(__name__)


class SessionStore:
    """Session-keyed registry of :class:`SessionState` objects.

    Parameters
    ----------
    ttl_seconds:
        Idle time in seconds after which a session is expired and removed
        on the next access.
    default_language:
        Language assigned to sessions created without an explicit one.
    """

    def __init__(
        self,
        ttl_seconds: float = SESSION_TTL_SECONDS,
        default_language: str = DEFAULT_LANGUAGE,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self.default_language = default_language
        self._sessions: dict[str, SessionState] = {}

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    def get(self, session_id: str) -> SessionState | None:
        self._evict_if_expired(session_id)
        return self._sessions.get(session_id)

    def put(self, state: SessionState) -> None:
        state.touch()
        self._sessions[state.session_id] = state

    def delete(self, session_id: str) -> SessionState | None:
        """Drop all state for *session_id* and return what was removed."""
        state = self._sessions.pop(session_id, None)
        if state is not None:
            logger.info("Session state dropped for session=%s", session_id)
        return state

    def get_or_create(self, session_id: str, language: str | None = None) -> SessionState:
        state = self.get(session_id)
        if state is None:
            state = SessionState(session_id=session_id, language=language or self.default_language)
            self._sessions[session_id] = state
            logger.debug("Session state created for session=%s", session_id)
        elif language:
            state.language = language
        state.touch()
        return state

    def holds(self, state: SessionState) -> bool:
        """Whether *state* is still the live state for its session key."""
        return self._sessions.get(state.session_id) is state

    def evict_expired(self) -> list[str]:
        """Remove every idle session and return the evicted keys."""
        now = time.monotonic()
        expired = [
            session_id
            for session_id, state in self._sessions.items()
            if now - state.last_active > self.ttl_seconds
        ]
        for session_id in expired:
            del self._sessions[session_id]
        if expired:
            logger.info("Evicted %d idle session(s)", len(expired))
        return expired

    def teardown(self) -> None:
        """Drop every session (process shutdown)."""
        self._sessions.clear()

    def session_ids(self) -> list[str]:
        return list(self._sessions)

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _evict_if_expired(self, session_id: str) -> None:
        state = self._sessions.get(session_id)
        if state is None:
            return
        if time.monotonic() - state.last_active > self.ttl_seconds:
            del self._sessions[session_id]
            logger.debug("Session expired: session=%s", session_id)
