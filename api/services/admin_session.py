"""
Admin sessions for the truck API.

A session is created at login and discarded at logout. Sessions live in a
SessionManager owned by the application instead of module-level state.
"""

import hmac
import logging
import secrets
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Optional

from fastapi import HTTPException, Request, Security, status
from fastapi.security import APIKeyHeader

from config import settings
from errors import InvalidCredentialsError, NotAuthenticatedError

logger = logging.getLogger(__name__)

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)
session_token_header = APIKeyHeader(name="X-Session-Token", auto_error=False)


@dataclass
class AdminSession:
    """An authenticated administrator."""

    username: str
    token: str = field(default_factory=lambda: secrets.token_urlsafe(32))
    role: str = "admin"
    full_name: str = "Administrator"
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_user(self) -> Dict:
        return {
            "id": self.username,
            "full_name": self.full_name,
            "role": self.role
        }


class SessionManager:
    """Issues and tracks admin sessions for a single configured credential."""

    def __init__(self, username: str, password: Optional[str]):
        self.username = username
        self.password = password
        self._sessions: Dict[str, AdminSession] = {}
        self._lock = threading.Lock()

    @property
    def enabled(self) -> bool:
        """Whether logins are possible at all."""
        return bool(self.password)

    def login(self, username: str, password: str) -> AdminSession:
        """Start a session.

        Raises:
            InvalidCredentialsError: If the credentials do not match
        """
        valid = (
            self.enabled
            and hmac.compare_digest(username or "", self.username)
            and hmac.compare_digest(password or "", self.password)
        )
        if not valid:
            logger.warning(f"Rejected admin login for '{username}'")
            raise InvalidCredentialsError("Invalid credentials")

        session = AdminSession(username=username)
        with self._lock:
            self._sessions[session.token] = session
        logger.info(f"Admin '{username}' logged in")
        return session

    def logout(self, token: Optional[str]) -> bool:
        """End a session. Returns False if there was none."""
        with self._lock:
            session = self._sessions.pop(token or "", None)
        if session:
            logger.info(f"Admin '{session.username}' logged out")
        return session is not None

    def get(self, token: Optional[str]) -> Optional[AdminSession]:
        if not token:
            return None
        with self._lock:
            return self._sessions.get(token)

    def me(self, token: Optional[str]) -> AdminSession:
        """Return the session for a token.

        Raises:
            NotAuthenticatedError: If the token has no session
        """
        session = self.get(token)
        if session is None:
            raise NotAuthenticatedError("Not authenticated")
        return session


def get_session_manager(request: Request) -> SessionManager:
    """Session manager of the running application."""
    return request.app.state.session_manager


async def require_admin(
    request: Request,
    api_key: Optional[str] = Security(api_key_header),
    session_token: Optional[str] = Security(session_token_header)
) -> bool:
    """Verify the caller is an administrator.

    Accepts a valid X-API-Key or X-Session-Token. When neither an API key nor
    an admin password is configured every caller is accepted (dev mode).

    Raises:
        HTTPException: If the caller is not authenticated
    """
    sessions = get_session_manager(request)
    if not settings.api_key and not sessions.enabled:
        return True
    if settings.api_key and api_key and hmac.compare_digest(api_key, settings.api_key):
        return True
    if sessions.get(session_token) is not None:
        return True
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Admin access required. Please log in as administrator."
    )
