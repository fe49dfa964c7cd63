"""Middleware that routes browsers by session cookie presence."""
from __future__ import annotations

from collections.abc import Iterable
from urllib.parse import quote

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import RedirectResponse

DEFAULT_PROTECTED_PREFIXES = ("/dashboard", "/admin")
DEFAULT_AUTH_PAGES = ("/login", "/register")


def _under_prefix(path: str, prefix: str) -> bool:
    return path == prefix or path.startswith(prefix + "/")


class AccessGateMiddleware(BaseHTTPMiddleware):
    """Coarse pre-route access check.

    Only the presence of the session cookie is looked at, not its contents.
    Handlers behind protected paths must still verify the session and role.
    """

    def __init__(
        self,
        app,
        cookie_name: str,
        protected_prefixes: Iterable[str] = DEFAULT_PROTECTED_PREFIXES,
        auth_pages: Iterable[str] = DEFAULT_AUTH_PAGES,
        login_path: str = "/login",
        landing_path: str = "/dashboard",
    ):
        super().__init__(app)
        self.cookie_name = cookie_name
        self.protected_prefixes = tuple(protected_prefixes)
        self.auth_pages = frozenset(auth_pages)
        self.login_path = login_path
        self.landing_path = landing_path

    def is_protected(self, path: str) -> bool:
        return any(_under_prefix(path, prefix) for prefix in self.protected_prefixes)

    def is_auth_page(self, path: str) -> bool:
        return path in self.auth_pages

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        has_session = self.cookie_name in request.cookies

        if self.is_protected(path) and not has_session:
            target = f"{self.login_path}?from={quote(path, safe='/')}"
            return RedirectResponse(url=target, status_code=302)

        if self.is_auth_page(path) and has_session:
            return RedirectResponse(url=self.landing_path, status_code=302)

        return await call_next(request)
