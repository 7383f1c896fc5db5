# app/services/session_service.py
"""
In-memory login sessions. A token is issued on login and dropped on logout,
when a staff member declines the usage terms, when it outlives
SESSION_TTL_SECONDS, or when an admin edits or deletes the account.
"""

import secrets
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional

from app.config import settings
from app.services.auth_service import LoginResult
from app.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class Session:
    token: str
    username: str
    is_admin: bool
    unrestricted: bool
    device_id: str
    expires_at: float
    terms_accepted: bool = False
    created_at: datetime = field(default_factory=datetime.utcnow)


class SessionStore:
    def __init__(self, ttl_seconds: Optional[int] = None, clock: Callable[[], float] = time.time):
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else settings.SESSION_TTL_SECONDS
        self.clock = clock
        self._sessions: dict[str, Session] = {}
        self._lock = threading.Lock()

    def create(self, result: LoginResult, device_id: str) -> Session:
        now = self.clock()
        session = Session(
            token=secrets.token_urlsafe(32),
            username=result.username,
            is_admin=result.is_admin,
            unrestricted=result.unrestricted,
            device_id=device_id,
            expires_at=now + self.ttl_seconds,
            terms_accepted=result.is_admin,   # admins skip the terms screen
        )
        with self._lock:
            self._purge_expired(now)
            self._sessions[session.token] = session
        return session

    def get(self, token: str) -> Optional[Session]:
        with self._lock:
            self._purge_expired(self.clock())
            return self._sessions.get(token)

    def drop(self, token: str):
        with self._lock:
            self._sessions.pop(token, None)

    def drop_user(self, username: str) -> int:
        """End every session of one account. Returns how many were dropped."""
        with self._lock:
            tokens = [t for t, s in self._sessions.items() if s.username == username]
            for token in tokens:
                del self._sessions[token]
        if tokens:
            logger.info(f"Ended {len(tokens)} session(s) of '{username}'")
        return len(tokens)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def _purge_expired(self, now: float):
        expired = [t for t, s in self._sessions.items() if s.expires_at <= now]
        for token in expired:
            del self._sessions[token]


sessions = SessionStore()
