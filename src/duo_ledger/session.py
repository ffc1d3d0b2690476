"""Per-user conversation state with expiry."""

import logging
from collections.abc import Callable
from datetime import datetime, timedelta
from enum import Enum

from pydantic import BaseModel

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    """What the dispatcher is waiting for from a user."""

    AWAITING_NAME = "awaiting_name"


class Session(BaseModel):
    state: SessionState
    expires_at: datetime


class SessionStore:
    """
    Explicit store of pending conversation state, keyed by user id.

    Sessions expire after ``ttl`` and are cleared by the dispatcher whenever
    the user sends any command.
    """

    def __init__(
        self,
        ttl: timedelta = timedelta(minutes=5),
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.ttl = ttl
        self.clock = clock
        self._sessions: dict[str, Session] = {}

    def begin(self, user_id: str, state: SessionState) -> Session:
        """Start (or restart) a session for a user."""
        session = Session(state=state, expires_at=self.clock() + self.ttl)
        self._sessions[user_id] = session
        logger.debug(f"Session {state.value} started for user {user_id}")
        return session

    def get(self, user_id: str) -> SessionState | None:
        """Return the user's current state, dropping it if expired."""
        session = self._sessions.get(user_id)
        if session is None:
            return None
        if session.expires_at <= self.clock():
            del self._sessions[user_id]
            logger.debug(f"Session expired for user {user_id}")
            return None
        return session.state

    def clear(self, user_id: str) -> bool:
        """Remove a user's session. Returns True if one existed."""
        return self._sessions.pop(user_id, None) is not None

    def purge_expired(self) -> int:
        """Drop every expired session and return how many were removed."""
        now = self.clock()
        expired = [
            user_id
            for user_id, session in self._sessions.items()
            if session.expires_at <= now
        ]
        for user_id in expired:
            del self._sessions[user_id]
        return len(expired)

    def __len__(self) -> int:
        return len(self._sessions)
