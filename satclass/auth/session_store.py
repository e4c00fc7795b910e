"""
Demo session store.

Checks a fixed credential map and keeps one expiring session. This is a
login stub for the dashboard, not a security boundary.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from satclass.core.exceptions import AuthenticationError
from satclass.utils.config_loader import SessionConfig
from satclass.utils.logging_config import get_logger

logger = get_logger("auth")


@dataclass(frozen=True)
class Session:
    username: str
    login_time: datetime
    remember_me: bool = False


@dataclass
class LoginResult:
    success: bool
    message: str
    user: Optional[str] = None


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SessionStore:
    """Holds at most one active session."""

    def __init__(
        self,
        config: Optional[SessionConfig] = None,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self.config = config or SessionConfig()
        self._clock = clock
        self._session: Optional[Session] = None

    @property
    def expiry(self) -> timedelta:
        return timedelta(hours=self.config.expiry_hours)

    def login(self, username: str, password: str, remember_me: bool = False) -> LoginResult:
        if not username or not password:
            return LoginResult(False, "Username and password are required")

        expected = self.config.credentials.get(username)
        if expected is None or expected != password:
            logger.info(f"Rejected login for '{username}'")
            return LoginResult(False, "Invalid username or password")

        self._session = Session(username=username, login_time=self._clock(), remember_me=remember_me)
        logger.info(f"Login successful: {username}")
        return LoginResult(True, "Login successful", user=username)

    def check_auth(self) -> Optional[Session]:
        """Active session, or None; an expired session is cleared."""
        session = self._session
        if session is None:
            return None

        if self._clock() - session.login_time > self.expiry:
            logger.info(f"Session expired for {session.username}")
            self.clear_session()
            return None
        return session

    def require_auth(self) -> Session:
        session = self.check_auth()
        if session is None:
            raise AuthenticationError("Not authenticated; please log in.")
        return session

    def current_user(self) -> Optional[dict]:
        session = self.check_auth()
        if session is None:
            return None
        return {"username": session.username, "login_time": session.login_time.isoformat()}

    def logout(self):
        if self._session is not None:
            logger.info(f"Logging out {self._session.username}")
        self.clear_session()

    def clear_session(self):
        self._session = None
