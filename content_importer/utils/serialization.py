"""Helpers for the ``to_array``/``from_array`` serialized forms."""

from datetime import datetime, timezone
from typing import Any, Iterable, Optional, TypeVar

import pydantic
from pydantic import BaseModel

from content_importer.core.exceptions import (
    ErrorSet,
    MissingRequiredFieldError,
    ValidationError,
)

ModelT = TypeVar("ModelT", bound=BaseModel)


def require_fields(model: str, data: Any, fields: Iterable[str]) -> None:
    """Fail fast when identity-bearing keys are absent or null.

    Raises:
        MissingRequiredFieldError: Listing every missing key.
    """
    if not isinstance(data, dict):
        raise MissingRequiredFieldError(model, list(fields))
    missing = [name for name in fields if data.get(name) is None]
    if missing:
        raise MissingRequiredFieldError(model, missing)


def format_datetime(value: Optional[datetime]) -> Optional[str]:
    """Render a timestamp as ISO-8601, keeping its offset."""
    return value.isoformat() if value is not None else None


def ensure_aware(value: datetime) -> datetime:
    """Treat naive timestamps as UTC so all stored datetimes compare."""
    if value.tzinfo is None or value.utcoffset() is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def parse_datetime(value: Any, field: str) -> datetime:
    """Accept a datetime or an ISO-8601 string. Naive values are read as UTC.

    Raises:
        ValidationError: When the value is not an ISO-8601 timestamp.
    """
    if isinstance(value, datetime):
        return ensure_aware(value)
    if isinstance(value, str):
        try:
            return ensure_aware(datetime.fromisoformat(value))
        except ValueError:
            pass
    errors = ErrorSet()
    errors.add(field, "invalid_datetime", f"{field} must be an ISO-8601 timestamp.")
    raise ValidationError(errors)


def to_validation_error(error: pydantic.ValidationError, model: str) -> ValidationError:
    """Translate a pydantic failure into the package's ValidationError."""
    errors = ErrorSet()
    for detail in error.errors():
        field = ".".join(str(part) for part in detail["loc"]) or model
        errors.add(field, detail["type"], detail["msg"])
    first = errors.messages()[0] if errors else "invalid value"
    return ValidationError(errors, f"{model}: {first}")


def build_model(model_cls: type[ModelT], values: dict[str, Any]) -> ModelT:
    """Construct a pydantic model, reporting failures as a ValidationError."""
    try:
        return model_cls(**values)
    except pydantic.ValidationError as e:
        raise to_validation_error(e, model_cls.__name__) from e
