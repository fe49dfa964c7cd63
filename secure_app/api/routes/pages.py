"""Server-rendered HTML pages."""
from __future__ import annotations

from pathlib import Path
from urllib.parse import urlsplit

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.ext.asyncio import AsyncSession

from secure_app.core.dependencies import get_current_session, get_db, require_admin, require_user
from secure_app.core.session import SessionData
from secure_app.services import users as user_store

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parents[2] / "templates"))

router = APIRouter(tags=["pages"], default_response_class=HTMLResponse)


def _safe_return_path(value: str | None) -> str:
    """Only allow same-site absolute paths as post-login targets.

    Browsers drop tab, CR and LF from URLs and read ``\\`` as ``/``, so any
    control character or backslash could turn the path into ``//host``.
    """
    if not value or not value.startswith("/") or value.startswith("//"):
        return "/dashboard"
    if "\\" in value or any(ch < " " or ch == "\x7f" for ch in value):
        return "/dashboard"
    parts = urlsplit(value)
    if parts.scheme or parts.netloc:
        return "/dashboard"
    return value


@router.get("/")
async def home(request: Request, current: SessionData = Depends(get_current_session)) -> HTMLResponse:
    return templates.TemplateResponse(request, "index.html", {"user": current if current.is_authenticated else None})


@router.get("/login")
async def login_page(request: Request) -> HTMLResponse:
    return templates.TemplateResponse(
        request, "login.html", {"user": None, "return_to": _safe_return_path(request.query_params.get("from"))}
    )


@router.get("/register")
async def register_page(request: Request) -> HTMLResponse:
    return templates.TemplateResponse(request, "register.html", {"user": None})


@router.get("/dashboard")
async def dashboard(request: Request, current: SessionData = Depends(require_user)) -> HTMLResponse:
    return templates.TemplateResponse(request, "dashboard.html", {"user": current})


@router.get("/admin")
async def admin(
    request: Request,
    current: SessionData = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
) -> HTMLResponse:
    users = await user_store.list_recent_users(session)
    return templates.TemplateResponse(request, "admin.html", {"user": current, "users": users})
