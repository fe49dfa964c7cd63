"""FastAPI application entrypoint."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, RedirectResponse

from secure_app.api import api_router
from secure_app.api.routes import pages
from secure_app.core.config import Settings, get_settings
from secure_app.core.errors import AppError, RedirectRequired, ValidationError
from secure_app.core.security import PasswordHasher
from secure_app.core.session import SessionData, SessionManager
from secure_app.db.session import Database
from secure_app.middleware.access_gate import AccessGateMiddleware

logger = logging.getLogger(__name__)


async def _app_error_handler(_: Request, exc: AppError) -> JSONResponse:
    content: dict = {"error": exc.message}
    if isinstance(exc, ValidationError):
        content["details"] = exc.field_errors
    return JSONResponse(status_code=exc.status_code, content=content)


async def _redirect_handler(request: Request, exc: RedirectRequired) -> RedirectResponse:
    response = RedirectResponse(url=exc.location, status_code=302)
    if exc.clear_session:
        # Drop an unreadable cookie so the gate stops treating the browser as signed in.
        manager: SessionManager = request.app.state.session_manager
        manager.destroy(response, SessionData())
    return response


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        database = Database(settings.sqlalchemy_url, pool_size=settings.database_pool_size)
        await database.create_all()
        app.state.database = database
        logger.info("Database ready")
        try:
            yield
        finally:
            await database.dispose()

    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.state.password_hasher = PasswordHasher(
        time_cost=settings.password_time_cost,
        memory_cost=settings.password_memory_cost,
    )
    app.state.session_manager = SessionManager(settings)

    app.add_middleware(AccessGateMiddleware, cookie_name=settings.session_cookie_name)
    app.add_exception_handler(AppError, _app_error_handler)
    app.add_exception_handler(RedirectRequired, _redirect_handler)

    app.include_router(api_router)
    app.include_router(pages.router)
    return app


app = create_app()
