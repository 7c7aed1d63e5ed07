"""Field validators shared by request schemas, and the validate() entry point.

Every inbound payload goes through a pydantic schema before it reaches a
store. `validate` never raises for malformed input; it returns a
`ValidationResult` holding either the normalized model or the field-level
error messages.
"""

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Annotated, Any, Generic, TypeVar

from pydantic import AfterValidator, BaseModel, BeforeValidator, EmailStr
from pydantic import ValidationError as PydanticValidationError

EMAIL_MAX_LENGTH = 255
PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 128
PUSH_TOKEN_PREFIXES = ("ExponentPushToken[", "ExpoPushToken[")

_PASSWORD_CLASSES = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)")

ModelT = TypeVar("ModelT", bound=BaseModel)


def normalize_email(value: Any) -> Any:
    if not isinstance(value, str):
        return value
    value = value.strip().lower()
    if not value:
        raise ValueError("Email is required")
    if len(value) > EMAIL_MAX_LENGTH:
        raise ValueError("Email is too long")
    return value


def check_password_strength(value: str) -> str:
    if len(value) < PASSWORD_MIN_LENGTH:
        raise ValueError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters")
    if len(value) > PASSWORD_MAX_LENGTH:
        raise ValueError("Password is too long")
    if not _PASSWORD_CLASSES.match(value):
        raise ValueError(
            "Password must contain at least one uppercase letter, one lowercase letter and a number"
        )
    return value


def check_push_token(value: str) -> str:
    if not value.startswith(PUSH_TOKEN_PREFIXES):
        raise ValueError("Invalid Expo push token format")
    return value


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def parse_iso_datetime(value: Any) -> Any:
    """Accept only ISO-8601 date-time strings, normalized to UTC.

    Naive values are taken as UTC. Offsets are converted, since not every
    database column keeps them.
    """
    if isinstance(value, datetime):
        return _as_utc(value)
    if not isinstance(value, str) or "T" not in value:
        raise ValueError("Invalid date-time, expected ISO-8601")
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError as e:
        raise ValueError("Invalid date-time, expected ISO-8601") from e
    return _as_utc(parsed)


NormalizedEmail = Annotated[EmailStr, BeforeValidator(normalize_email)]
StrongPassword = Annotated[str, AfterValidator(check_password_strength)]
ExpoPushTokenStr = Annotated[str, AfterValidator(check_push_token)]
IsoDateTime = Annotated[datetime, BeforeValidator(parse_iso_datetime)]


@dataclass
class ValidationResult(Generic[ModelT]):
    """Outcome of validating one payload."""

    value: ModelT | None = None
    errors: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.value is not None and not self.errors

    @property
    def first_error(self) -> str | None:
        return self.errors[0] if self.errors else None


def _field_name(loc: Iterable[Any]) -> str:
    parts = [str(part) for part in loc if part not in ("body", "query", "path")]
    return ".".join(parts)


def format_errors(errors: Iterable[Mapping[str, Any]]) -> list[str]:
    """Turn pydantic error dicts into `"<field>: <reason>"` messages."""
    messages = []
    for error in errors:
        reason = str(error.get("msg", "Invalid value")).removeprefix("Value error, ")
        name = _field_name(error.get("loc", ()))
        messages.append(f"{name}: {reason}" if name else reason)
    return messages


def validate(schema: type[ModelT], data: Any) -> ValidationResult[ModelT]:
    """Validate raw input against a schema without raising."""
    try:
        return ValidationResult(value=schema.model_validate(data))
    except PydanticValidationError as e:
        return ValidationResult(errors=format_errors(e.errors()))
