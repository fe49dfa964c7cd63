"""User store: lookups and inserts against the users table."""
from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from secure_app.core.errors import ConflictError
from secure_app.models.user import Role, User

logger = logging.getLogger(__name__)

RECENT_USERS_LIMIT = 50


def normalize_email(email: str) -> str:
    return email.strip().lower()


async def get_user_by_email(session: AsyncSession, email: str) -> User | None:
    result = await session.execute(select(User).where(User.email == normalize_email(email)).limit(1))
    return result.scalar_one_or_none()


async def create_user(
    session: AsyncSession,
    email: str,
    password_hash: str,
    role: Role = Role.USER,
) -> User:
    """Insert a user. The unique index on email is the authoritative duplicate check."""
    user = User(email=normalize_email(email), password_hash=password_hash, role=role.value)
    session.add(user)
    try:
        await session.flush()
    except IntegrityError as exc:
        await session.rollback()
        raise ConflictError() from exc
    return user


async def list_recent_users(session: AsyncSession, limit: int = RECENT_USERS_LIMIT) -> list[User]:
    result = await session.execute(
        select(User).order_by(User.created_at.desc(), User.id.desc()).limit(limit)
    )
    return list(result.scalars().all())


async def upsert_admin(session: AsyncSession, email: str, password_hash: str) -> User:
    """Create the account as admin, or promote an existing one and reset its password."""
    user = await get_user_by_email(session, email)
    if user is None:
        user = await create_user(session, email, password_hash, role=Role.ADMIN)
        logger.info("Created admin user %s", user.email)
        return user
    user.password_hash = password_hash
    user.role = Role.ADMIN.value
    await session.flush()
    logger.info("Updated admin user %s", user.email)
    return user
