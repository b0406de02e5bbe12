"""Thread-safe in-memory registry of wizard sessions.

Sessions live only as long as the process. Idle sessions are dropped after
SESSION_TTL_MINUTES.
"""

import logging
import os
import threading
from datetime import datetime, timedelta, timezone

from fastapi import HTTPException, Request

from app.wizard.session import WizardSession

logger = logging.getLogger(__name__)

DEFAULT_TTL_MINUTES = 120


def _ttl_from_env() -> timedelta:
    raw = os.getenv("SESSION_TTL_MINUTES", str(DEFAULT_TTL_MINUTES))
    try:
        minutes = int(raw)
    except ValueError:
        logger.warning("Invalid SESSION_TTL_MINUTES=%r, using %d", raw, DEFAULT_TTL_MINUTES)
        minutes = DEFAULT_TTL_MINUTES
    return timedelta(minutes=max(1, minutes))


class SessionStore:
    def __init__(self, ttl: timedelta | None = None):
        self.ttl = ttl or _ttl_from_env()
        self._lock = threading.Lock()
        self._sessions: dict[str, WizardSession] = {}

    def create(self) -> WizardSession:
        session = WizardSession()
        with self._lock:
            self._purge_expired()
            self._sessions[session.session_id] = session
        logger.info("Created session %s", session.session_id)
        return session

    def get(self, session_id: str) -> WizardSession | None:
        with self._lock:
            self._purge_expired()
            session = self._sessions.get(session_id)
            if session is not None:
                session.touch()
            return session

    def delete(self, session_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def _purge_expired(self) -> None:
        # caller holds the lock; sessions with a request in flight are kept
        cutoff = datetime.now(timezone.utc) - self.ttl
        expired = [
            sid for sid, s in self._sessions.items()
            if s.touched_at < cutoff and not (s.loading or s.parsing)
        ]
        for sid in expired:
            del self._sessions[sid]
        if expired:
            logger.info("Expired %d idle session(s)", len(expired))


def get_store(request: Request) -> SessionStore:
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise RuntimeError("Session store not initialised")
    return store


def get_session(session_id: str, request: Request) -> WizardSession:
    session = get_store(request).get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found or expired")
    return session
