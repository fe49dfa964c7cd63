"""Authentication request and response schemas."""
from __future__ import annotations

import re
from typing import Any

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic_core import PydanticCustomError

# email-validator refuses whole addresses over 254 characters (RFC 5321 path limit).
EMAIL_MAX_LENGTH = 254
PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 128

_PASSWORD_CHARACTER_RULES = (
    (re.compile(r"[a-z]"), "password_lowercase", "Password must contain a lowercase letter"),
    (re.compile(r"[A-Z]"), "password_uppercase", "Password must contain an uppercase letter"),
    (re.compile(r"[0-9]"), "password_digit", "Password must contain a number"),
    (re.compile(r"[^a-zA-Z0-9]"), "password_symbol", "Password must contain a special character"),
)


def _none_to_empty(value: Any) -> Any:
    return "" if value is None else value


def _check_email(value: str) -> str:
    value = value.strip()
    if not value:
        raise PydanticCustomError("email_required", "Email is required")
    if len(value) > EMAIL_MAX_LENGTH:
        raise PydanticCustomError("email_too_long", f"Email must be at most {EMAIL_MAX_LENGTH} characters")
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        raise PydanticCustomError("email_invalid", "Invalid email") from None
    return value


def _check_max_password_length(value: str) -> None:
    if len(value) > PASSWORD_MAX_LENGTH:
        raise PydanticCustomError(
            "password_too_long", f"Password must be at most {PASSWORD_MAX_LENGTH} characters"
        )


class _AuthRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, validate_default=True, extra="ignore")

    email: str = ""
    password: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def _missing_as_empty(cls, value: Any) -> Any:
        return _none_to_empty(value)

    @field_validator("email")
    @classmethod
    def _validate_email(cls, value: str) -> str:
        return _check_email(value)


class RegisterRequest(_AuthRequest):
    """Registration form. Enforces the full password strength policy."""

    confirm_password: str = Field(default="", alias="confirmPassword")

    @field_validator("password")
    @classmethod
    def _validate_password(cls, value: str) -> str:
        if len(value) < PASSWORD_MIN_LENGTH:
            raise PydanticCustomError(
                "password_too_short", f"Password must be at least {PASSWORD_MIN_LENGTH} characters"
            )
        _check_max_password_length(value)
        for pattern, error_type, message in _PASSWORD_CHARACTER_RULES:
            if not pattern.search(value):
                raise PydanticCustomError(error_type, message)
        return value

    @field_validator("confirm_password")
    @classmethod
    def _validate_confirmation(cls, value: str, info: ValidationInfo) -> str:
        if not value:
            raise PydanticCustomError("confirm_required", "Please confirm password")
        password = info.data.get("password")
        # Skipped when the password itself failed; that error is reported on its own field.
        if password is not None and value != password:
            raise PydanticCustomError("password_mismatch", "Passwords do not match")
        return value


class LoginRequest(_AuthRequest):
    """Login form. Only presence and length are checked so older passwords still work."""

    @field_validator("password")
    @classmethod
    def _validate_password(cls, value: str) -> str:
        if not value:
            raise PydanticCustomError("password_required", "Password is required")
        _check_max_password_length(value)
        return value


class AuthSuccess(BaseModel):
    success: bool = True
    role: str


class LogoutResponse(BaseModel):
    success: bool = True


class SessionUser(BaseModel):
    id: int
    email: str | None
    role: str | None


class WhoAmI(BaseModel):
    user: SessionUser | None
