"""Stateless cookie sessions.

The whole session lives in the cookie as a sealed blob; the server keeps no
registry of issued sessions. A session therefore ends only when its cookie
expires (absolute, counted from the last save) or the secret is rotated.
There is no way to list or remotely revoke sessions.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from starlette.requests import HTTPConnection
from starlette.responses import Response

from .config import Settings
from .errors import SessionDecodeError
from .security import SessionSerializer

logger = logging.getLogger(__name__)


@dataclass
class SessionData:
    """Identity carried by the session cookie.

    ``user_id`` being set is the only authentication signal. ``email`` and
    ``role`` are copied from the user row at login and are not re-synced, so a
    role change takes effect at the next login.
    """

    user_id: int | None = None
    email: str | None = None
    role: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    def clear(self) -> None:
        self.user_id = None
        self.email = None
        self.role = None

    def to_payload(self) -> dict[str, Any]:
        return {"userId": self.user_id, "email": self.email, "role": self.role}

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "SessionData":
        user_id = payload.get("userId")
        # bool is an int subclass; neither it nor anything else counts as an id
        if not isinstance(user_id, int) or isinstance(user_id, bool):
            return cls()
        email = payload.get("email")
        role = payload.get("role")
        return cls(
            user_id=user_id,
            email=email if isinstance(email, str) else None,
            role=role if isinstance(role, str) else None,
        )


class SessionManager:
    """Load, save and destroy sessions carried in a signed, encrypted cookie."""

    def __init__(self, settings: Settings) -> None:
        self.cookie_name = settings.session_cookie_name
        self.max_age = settings.session_max_age_seconds
        self.secure = settings.cookie_secure
        self._serializer = SessionSerializer(settings.session_secret)

    def load(self, connection: HTTPConnection) -> SessionData:
        """Return the request's session; anonymous when the cookie is missing or bad."""
        return self.decode(connection.cookies.get(self.cookie_name))

    def decode(self, token: str | None) -> SessionData:
        if not token:
            return SessionData()
        try:
            payload = self._serializer.loads(token, max_age=self.max_age)
        except SessionDecodeError:
            logger.debug("Discarding invalid or expired session cookie")
            return SessionData()
        return SessionData.from_payload(payload)

    def encode(self, session: SessionData) -> str:
        return self._serializer.dumps(session.to_payload())

    def save(self, response: Response, session: SessionData) -> None:
        response.set_cookie(
            key=self.cookie_name,
            value=self.encode(session),
            max_age=self.max_age,
            path="/",
            httponly=True,
            secure=self.secure,
            samesite="lax",
        )

    def destroy(self, response: Response, session: SessionData) -> None:
        session.clear()
        response.delete_cookie(
            key=self.cookie_name,
            path="/",
            httponly=True,
            secure=self.secure,
            samesite="lax",
        )
