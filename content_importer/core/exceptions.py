"""
Core exception hierarchy for the content importer.

Provides standardized exception types with categorization for retry logic.
All components should use these exceptions instead of generic Exception.
"""

from dataclasses import dataclass
from typing import Any, Iterator, Optional


# =============================================================================
# Base Exceptions
# =============================================================================


class ImporterError(Exception):
    """Base exception for all content importer errors."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class RetryableError(ImporterError):
    """
    Transient errors that may succeed when retried.

    Examples: Timeouts, dropped connections.
    """

    pass


class PermanentError(ImporterError):
    """
    Errors that won't be fixed by retrying.

    Examples: Invalid input, missing required data, authentication failures.
    """

    pass


# =============================================================================
# Schema Errors
# =============================================================================


class ConfigurationError(PermanentError):
    """Raised when a settings schema field definition is invalid."""

    def __init__(self, message: str, config_key: Optional[str] = None):
        self.config_key = config_key
        details = {"config_key": config_key} if config_key else None
        super().__init__(message, details)


@dataclass(frozen=True)
class FieldError:
    """A single field-scoped validation failure."""

    field: str
    code: str
    message: str

    def to_array(self) -> dict[str, str]:
        return {"field": self.field, "code": self.code, "message": self.message}


class ErrorSet:
    """Ordered collection of field errors.

    Validation accumulates every failure here so a caller can report all
    invalid fields in one pass.
    """

    def __init__(self, errors: Optional[list[FieldError]] = None):
        self._errors: list[FieldError] = list(errors or [])

    def add(self, field: str, code: str, message: str) -> None:
        self._errors.append(FieldError(field=field, code=code, message=message))

    def has_errors(self) -> bool:
        return bool(self._errors)

    def for_field(self, field: str) -> list[FieldError]:
        return [error for error in self._errors if error.field == field]

    def codes(self) -> list[str]:
        return [error.code for error in self._errors]

    def messages(self) -> list[str]:
        return [error.message for error in self._errors]

    def to_array(self) -> list[dict[str, str]]:
        return [error.to_array() for error in self._errors]

    def __iter__(self) -> Iterator[FieldError]:
        return iter(self._errors)

    def __len__(self) -> int:
        return len(self._errors)

    def __bool__(self) -> bool:
        return bool(self._errors)

    def __repr__(self) -> str:
        return f"ErrorSet({self._errors!r})"


class ValidationError(PermanentError):
    """Raised when user-supplied or serialized values fail validation."""

    def __init__(self, errors: ErrorSet, message: Optional[str] = None):
        self.errors = errors
        if message is None:
            message = "; ".join(errors.messages()) or "Validation failed"
        super().__init__(message, {"errors": errors.to_array()})


class MissingRequiredFieldError(ValidationError):
    """Raised when serialized data lacks an identity-bearing field."""

    def __init__(self, model: str, fields: list[str]):
        self.model = model
        self.fields = fields
        errors = ErrorSet()
        for name in fields:
            errors.add(name, "missing_field", f"Missing required field: {name}")
        super().__init__(
            errors,
            f"{model}: missing required field(s): {', '.join(fields)}",
        )


# =============================================================================
# Adapter Errors
# =============================================================================


class AdapterError(ImporterError):
    """Base exception for adapter errors."""

    def __init__(
        self,
        adapter_id: str,
        message: str,
        details: Optional[dict[str, Any]] = None,
    ):
        self.adapter_id = adapter_id
        super().__init__(f"[{adapter_id}] {message}", details)


class AuthenticationRequiredError(AdapterError, PermanentError):
    """Raised when an adapter operation runs before authentication."""

    pass


class DuplicateAdapterError(AdapterError, PermanentError):
    """Raised when an adapter id is registered twice."""

    pass


class AdapterNotFoundError(AdapterError, PermanentError):
    """Raised when an adapter id or item is unknown."""

    pass


class ExportFileError(PermanentError):
    """Raised when an export file cannot be read or decoded."""

    pass


# =============================================================================
# Normalization Errors
# =============================================================================


class ParseError(PermanentError):
    """Raised when a date or relative date string cannot be parsed."""

    def __init__(self, message: str, raw_value: Optional[str] = None):
        self.raw_value = raw_value
        details = {"raw_value": raw_value} if raw_value is not None else None
        super().__init__(message, details)


class NormalizerNotFoundError(PermanentError):
    """Raised when no normalizer handles an adapter id."""

    def __init__(self, adapter_id: str):
        self.adapter_id = adapter_id
        super().__init__(
            f"No normalizer registered for adapter: {adapter_id}",
            {"adapter_id": adapter_id},
        )


class MediaAlreadyImportedError(PermanentError):
    """Raised when a media reference is marked imported a second time."""

    pass


# =============================================================================
# HTTP Errors
# =============================================================================


class HttpRequestError(PermanentError):
    """Raised for non-2xx responses or undecodable response bodies."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
        url: Optional[str] = None,
    ):
        self.status_code = status_code
        self.body = body
        self.url = url
        super().__init__(
            message,
            {"status": status_code, "body": body, "url": url},
        )


class HttpTransportError(RetryableError):
    """Raised when a request fails before a response arrives."""

    def __init__(self, message: str, url: Optional[str] = None):
        self.url = url
        super().__init__(message, {"url": url} if url else None)
