"""Authentication endpoints."""
from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from secure_app.core.dependencies import (
    get_current_session,
    get_db,
    get_password_hasher,
    get_session_manager,
)
from secure_app.core.errors import AppError, UnexpectedError, ValidationError
from secure_app.core.security import PasswordHasher
from secure_app.core.session import SessionData, SessionManager
from secure_app.models.user import User
from secure_app.schemas.auth import AuthSuccess, LogoutResponse, SessionUser, WhoAmI
from secure_app.services import auth as auth_service
from secure_app.services.validation import FORM_ERROR_KEY

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


async def _read_json(request: Request) -> Any:
    try:
        return await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ValidationError({FORM_ERROR_KEY: ["Request body must be valid JSON"]}) from exc


def _start_session(response: Response, manager: SessionManager, user: User) -> None:
    session = SessionData(user_id=user.id, email=user.email, role=user.role)
    manager.save(response, session)


@router.post("/register", response_model=AuthSuccess)
async def register(
    request: Request,
    response: Response,
    session: AsyncSession = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher),
    manager: SessionManager = Depends(get_session_manager),
) -> AuthSuccess:
    try:
        payload = await _read_json(request)
        user = await auth_service.register_user(session, hasher, payload)
    except AppError:
        raise
    except Exception as exc:
        logger.exception("Registration failed")
        raise UnexpectedError("Registration failed.") from exc

    _start_session(response, manager, user)
    return AuthSuccess(role=user.role)


@router.post("/login", response_model=AuthSuccess)
async def login(
    request: Request,
    response: Response,
    session: AsyncSession = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher),
    manager: SessionManager = Depends(get_session_manager),
) -> AuthSuccess:
    try:
        payload = await _read_json(request)
        user = await auth_service.authenticate_user(session, hasher, payload)
    except AppError:
        raise
    except Exception as exc:
        logger.exception("Login failed")
        raise UnexpectedError("Login failed.") from exc

    _start_session(response, manager, user)
    return AuthSuccess(role=user.role)


@router.post("/logout", response_model=LogoutResponse)
async def logout(
    request: Request,
    response: Response,
    manager: SessionManager = Depends(get_session_manager),
) -> LogoutResponse:
    # Always reports success, even with no session or an internal failure.
    try:
        manager.destroy(response, manager.load(request))
    except Exception:
        logger.exception("Logout failed")
    return LogoutResponse()


@router.get("/me", response_model=WhoAmI)
async def whoami(current: SessionData = Depends(get_current_session)) -> WhoAmI:
    if not current.is_authenticated:
        return WhoAmI(user=None)
    return WhoAmI(user=SessionUser(id=current.user_id, email=current.email, role=current.role))
