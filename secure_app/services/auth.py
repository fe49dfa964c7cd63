"""Registration and login flows."""
from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from secure_app.core.errors import AuthenticationError, ConflictError, ValidationError
from secure_app.core.security import PasswordHasher
from secure_app.models.user import Role, User
from secure_app.schemas.auth import LoginRequest, RegisterRequest
from secure_app.services import users as user_store
from secure_app.services.validation import validate

logger = logging.getLogger(__name__)


async def register_user(session: AsyncSession, hasher: PasswordHasher, payload: Any) -> User:
    """Create a ``user``-role account and commit it.

    The existence check only saves a hash on the common path; two concurrent
    registrations are settled by the unique index, surfaced as ConflictError.
    """
    result = validate("register", payload)
    if not result.success:
        raise ValidationError(result.field_errors)
    form: RegisterRequest = result.data
    email = user_store.normalize_email(form.email)

    if await user_store.get_user_by_email(session, email) is not None:
        logger.info("Registration rejected, email already in use")
        raise ConflictError()

    password_hash = await run_in_threadpool(hasher.hash, form.password)
    user = await user_store.create_user(session, email, password_hash, role=Role.USER)
    await session.commit()
    logger.info("Registered user %s", user.id)
    return user


async def authenticate_user(session: AsyncSession, hasher: PasswordHasher, payload: Any) -> User:
    """Return the user matching the credentials or raise AuthenticationError.

    Unknown email and wrong password are indistinguishable to the caller.
    """
    result = validate("login", payload)
    if not result.success:
        raise ValidationError(result.field_errors)
    form: LoginRequest = result.data

    user = await user_store.get_user_by_email(session, form.email)
    if user is None:
        await run_in_threadpool(hasher.dummy_verify)
        raise AuthenticationError()
    if not await run_in_threadpool(hasher.verify, form.password, user.password_hash):
        raise AuthenticationError()
    return user
