"""Pure pass/fail classification of auth form payloads."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from secure_app.schemas.auth import LoginRequest, RegisterRequest

FORM_ERROR_KEY = "form"

_SCHEMAS: dict[str, type[BaseModel]] = {
    "register": RegisterRequest,
    "login": LoginRequest,
}


@dataclass
class ValidationResult:
    success: bool
    data: BaseModel | None = None
    field_errors: dict[str, list[str]] = field(default_factory=dict)


def flatten_errors(exc: PydanticValidationError) -> dict[str, list[str]]:
    """Group error messages by field name, keeping their order."""
    errors: dict[str, list[str]] = {}
    for error in exc.errors():
        key = str(error["loc"][0]) if error["loc"] else FORM_ERROR_KEY
        errors.setdefault(key, []).append(error["msg"])
    return errors


def validate(kind: str, payload: Any) -> ValidationResult:
    """Validate ``payload`` against the ``register`` or ``login`` rules."""
    try:
        schema = _SCHEMAS[kind]
    except KeyError:
        raise ValueError(f"Unknown form kind: {kind!r}") from None

    if not isinstance(payload, dict):
        return ValidationResult(success=False, field_errors={FORM_ERROR_KEY: ["Expected a JSON object"]})
    try:
        data = schema.model_validate(payload)
    except PydanticValidationError as exc:
        return ValidationResult(success=False, field_errors=flatten_errors(exc))
    return ValidationResult(success=True, data=data)
