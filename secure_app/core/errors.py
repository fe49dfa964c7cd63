"""Error taxonomy shared by services, routes and exception handlers."""
from __future__ import annotations


class AppError(Exception):
    """Base error with an HTTP status and a message that is safe to show callers."""

    status_code = 500
    message = "Something went wrong."

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


class ValidationError(AppError):
    """Structural input rule violated."""

    status_code = 400
    message = "Validation failed"

    def __init__(self, field_errors: dict[str, list[str]]) -> None:
        super().__init__()
        self.field_errors = field_errors


class AuthenticationError(AppError):
    """Unknown email or wrong password. Deliberately does not say which."""

    status_code = 401
    message = "Invalid email or password."


class ConflictError(AppError):
    """An account with the same normalized email already exists."""

    status_code = 409
    message = "An account with this email already exists."


class UnexpectedError(AppError):
    """Infrastructure failure reduced to a generic message."""

    status_code = 500


class SessionDecodeError(ValueError):
    """Session cookie is tampered, unsigned or expired."""


class RedirectRequired(Exception):
    """Raised by page guards to send the browser elsewhere."""

    def __init__(self, location: str, clear_session: bool = False) -> None:
        super().__init__(location)
        self.location = location
        self.clear_session = clear_session
