"""Reusable dependencies for FastAPI routes."""
from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from secure_app.core.errors import RedirectRequired
from secure_app.core.security import PasswordHasher
from secure_app.core.session import SessionData, SessionManager
from secure_app.db.session import Database
from secure_app.models.user import Role


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    database: Database = request.app.state.database
    async with database.session() as session:
        yield session


def get_password_hasher(request: Request) -> PasswordHasher:
    return request.app.state.password_hasher


def get_session_manager(request: Request) -> SessionManager:
    return request.app.state.session_manager


def get_current_session(
    request: Request,
    manager: SessionManager = Depends(get_session_manager),
) -> SessionData:
    """Decrypt and verify the session cookie. Never raises."""
    return manager.load(request)


def require_user(session: SessionData = Depends(get_current_session)) -> SessionData:
    # The access gate only checks that a cookie exists; a forged one ends up here.
    if not session.is_authenticated:
        raise RedirectRequired("/login", clear_session=True)
    return session


def require_admin(session: SessionData = Depends(require_user)) -> SessionData:
    if session.role != Role.ADMIN.value:
        raise RedirectRequired("/dashboard")
    return session
