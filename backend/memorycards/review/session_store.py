"""TTL-based store for server-side review sessions."""

from __future__ import annotations

import threading

from cachetools import TTLCache

from memorycards.config import get_app_settings

from .session import ReviewSession


class SessionNotFoundError(Exception):
    """Raised when a session is unknown, expired, or owned by someone else."""

    pass


class SessionStore:
    """Thread-safe TTL-based session store.

    Stores ReviewSession objects keyed by session ID. Sessions expire after TTL
    seconds of inactivity (sliding window), which is how abandoned sessions are
    discarded.
    """

    # Default TTL: 30 minutes
    DEFAULT_TTL_SECONDS = 30 * 60
    # Max sessions to cache
    MAX_SESSIONS = 10000

    def __init__(self, ttl_seconds: int = DEFAULT_TTL_SECONDS, maxsize: int = MAX_SESSIONS):
        self._cache: TTLCache[str, ReviewSession] = TTLCache(maxsize=maxsize, ttl=ttl_seconds)
        self._lock = threading.Lock()

    def add(self, session: ReviewSession) -> ReviewSession:
        with self._lock:
            self._cache[session.session_id] = session
        return session

    def get(self, session_id: str, user_id: str) -> ReviewSession:
        """Return a user's session and refresh its TTL."""
        with self._lock:
            session = self._cache.get(session_id)
            if session is None or session.user_id != user_id:
                raise SessionNotFoundError(f"Review session {session_id} not found")
            # Re-set to refresh TTL (sliding window)
            self._cache[session_id] = session
            return session

    def remove(self, session_id: str, user_id: str) -> ReviewSession:
        """Drop a user's session and mark it closed."""
        with self._lock:
            session = self._cache.get(session_id)
            if session is None or session.user_id != user_id:
                raise SessionNotFoundError(f"Review session {session_id} not found")
            del self._cache[session_id]
        session.close()
        return session

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    def clear(self) -> None:
        """Clear all sessions (for testing)."""
        with self._lock:
            self._cache.clear()


# Singleton instance
_session_store: SessionStore | None = None


def get_session_store() -> SessionStore:
    """Get the singleton session store instance."""
    global _session_store
    if _session_store is None:
        settings = get_app_settings()
        _session_store = SessionStore(
            ttl_seconds=settings.review_session_ttl_seconds,
            maxsize=settings.review_session_max,
        )
    return _session_store


def reset_session_store() -> None:
    """Reset the session store (for testing)."""
    global _session_store
    _session_store = None
