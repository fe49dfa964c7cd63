"""Security helpers for password hashing and session cookie sealing."""
from __future__ import annotations

import base64
import hashlib
import logging
from typing import Any

from cryptography.fernet import Fernet, InvalidToken
from itsdangerous import BadData, URLSafeTimedSerializer
from passlib.context import CryptContext

from .errors import SessionDecodeError

logger = logging.getLogger(__name__)


class PasswordHasher:
    """Hash and verify user passwords using Argon2id.

    The salt is generated per call and embedded in the digest, so hashing the
    same password twice yields different strings. Verification is delegated to
    the argon2 primitive, which compares digests in constant time.
    """

    def __init__(self, time_cost: int = 3, memory_cost: int = 65536) -> None:
        self._context = CryptContext(
            schemes=["argon2"],
            deprecated="auto",
            argon2__time_cost=time_cost,
            argon2__memory_cost=memory_cost,
        )

    def hash(self, password: str) -> str:
        return self._context.hash(password)

    def verify(self, password: str, hashed: str) -> bool:
        try:
            return self._context.verify(password, hashed)
        except (ValueError, TypeError):
            logger.warning("Stored password hash could not be parsed")
            return False

    def dummy_verify(self) -> None:
        """Spend one verification's worth of time without a real digest."""
        self._context.dummy_verify()


def _derive_fernet_key(secret: str) -> bytes:
    digest = hashlib.sha256(secret.encode("utf-8")).digest()
    return base64.urlsafe_b64encode(digest)


class SessionSerializer:
    """Seal session payloads: signed and timestamped, then encrypted.

    itsdangerous provides the signature and issue time used for absolute
    expiry; Fernet keeps the payload unreadable to the client.
    """

    def __init__(self, secret: str, salt: str = "secure-app-session") -> None:
        self._signer = URLSafeTimedSerializer(secret, salt=salt)
        self._fernet = Fernet(_derive_fernet_key(secret))

    def dumps(self, data: dict[str, Any]) -> str:
        signed = self._signer.dumps(data)
        return self._fernet.encrypt(signed.encode("utf-8")).decode("ascii")

    def loads(self, token: str, max_age: int | None = None) -> dict[str, Any]:
        try:
            signed = self._fernet.decrypt(token.encode("ascii")).decode("utf-8")
            data = self._signer.loads(signed, max_age=max_age)
        except (InvalidToken, BadData, ValueError) as exc:
            raise SessionDecodeError("Invalid or expired session token") from exc
        if not isinstance(data, dict):
            raise SessionDecodeError("Session payload is not a mapping")
        return data
