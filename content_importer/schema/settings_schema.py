"""
Declarative adapter settings schema.

Each adapter describes its configurable fields as a SettingsSchema. The schema
drives validation of user-supplied values (and, outside this package, form
rendering). Field descriptors are pydantic models discriminated on ``type``,
so every field type carries its own coercion rules.

Usage:
    schema = (
        SettingsSchema()
        .add_field("instance_url", {"type": "url", "label": "Instance URL", "required": True})
        .add_field("limit", {"type": "number", "min": 1, "max": 200, "default": 40})
    )

    result = schema.validate({"instance_url": "https://mastodon.social"})
    if isinstance(result, ErrorSet):
        ...
"""

import re
from datetime import date, datetime
from typing import Annotated, Any, Literal, Optional, Union

import pydantic
from dateutil import parser as date_parser
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

from content_importer.core.exceptions import (
    ConfigurationError,
    ErrorSet,
    ValidationError,
)
from content_importer.utils.urls import is_valid_url

FIELD_TYPES = (
    "text",
    "password",
    "textarea",
    "file",
    "select",
    "checkbox",
    "date",
    "date_range",
    "number",
    "url",
)

_TAG_RE = re.compile(r"<[^>]*>")
_SCRIPT_STYLE_RE = re.compile(r"<(script|style)\b[^>]*>.*?</\1>", re.IGNORECASE | re.DOTALL)
_CONTROL_RE = re.compile(r"[\x00-\x1f\x7f]")
_CONTROL_KEEP_NEWLINES_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_FALSE_STRINGS = frozenset({"0", "false", "off", "no"})


def _strip_tags(value: str) -> str:
    value = _SCRIPT_STYLE_RE.sub("", value)
    return _TAG_RE.sub("", value)


def sanitize_text(value: Any) -> str:
    """Reduce a value to a single-line plain string."""
    text = _strip_tags(str(value))
    text = _CONTROL_RE.sub(" ", text)
    return " ".join(text.split())


def sanitize_textarea(value: Any) -> str:
    """Reduce a value to plain text, keeping line breaks."""
    text = str(value).replace("\r\n", "\n").replace("\r", "\n")
    text = _strip_tags(text)
    text = _CONTROL_KEEP_NEWLINES_RE.sub("", text)
    return text.strip()


def is_empty_value(value: Any) -> bool:
    """Values treated as "not supplied": None, empty string, empty list or dict."""
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (list, tuple, dict)):
        return len(value) == 0
    return False


class FieldValueError(Exception):
    """One or more coercion failures for a single field value."""

    def __init__(self, *errors: tuple[str, str]):
        self.errors = list(errors)
        super().__init__("; ".join(message for _, message in errors))


# =============================================================================
# Field Descriptors
# =============================================================================


class BaseField(BaseModel):
    """Common attributes of every field descriptor.

    Unknown keys are kept so a schema serializes back exactly as it was
    declared.
    """

    model_config = ConfigDict(extra="allow")

    type: str
    label: str
    description: str = ""
    required: bool = False
    default: Any = None
    placeholder: str = ""
    options: dict[str, Any] = Field(default_factory=dict)
    accept: str = ""
    min: Optional[Union[int, float]] = None
    max: Optional[Union[int, float]] = None

    @field_validator("options", mode="before")
    @classmethod
    def options_from_list(cls, value: Any) -> Any:
        """Accept a plain list of choices as ``{choice: choice}``."""
        if isinstance(value, (list, tuple)):
            return {str(item): item for item in value}
        return value

    def coerce(self, value: Any) -> Any:
        """Convert a supplied (non-empty) value. Raises FieldValueError."""
        return value

    def to_array(self) -> dict[str, Any]:
        return self.model_dump()


class TextField(BaseField):
    type: Literal["text"] = "text"

    def coerce(self, value: Any) -> str:
        return sanitize_text(value)


class PasswordField(BaseField):
    type: Literal["password"] = "password"

    def coerce(self, value: Any) -> str:
        return sanitize_text(value)


class TextareaField(BaseField):
    type: Literal["textarea"] = "textarea"

    def coerce(self, value: Any) -> str:
        return sanitize_textarea(value)


class FileField(BaseField):
    """Upload handling happens outside the schema; values pass through."""

    type: Literal["file"] = "file"


class UrlField(BaseField):
    type: Literal["url"] = "url"

    def coerce(self, value: Any) -> str:
        url = str(value).strip() if isinstance(value, str) else ""
        if not is_valid_url(url):
            raise FieldValueError(("invalid_url", f"{self.label} must be a valid URL."))
        return url


class NumberField(BaseField):
    type: Literal["number"] = "number"

    def coerce(self, value: Any) -> Union[int, float]:
        number = self._to_number(value)
        if number is None:
            raise FieldValueError(("invalid_number", f"{self.label} must be a number."))

        errors = []
        if self.min is not None and number < self.min:
            errors.append(("number_too_low", f"{self.label} must be at least {self.min}."))
        if self.max is not None and number > self.max:
            errors.append(("number_too_high", f"{self.label} must be at most {self.max}."))
        if errors:
            raise FieldValueError(*errors)

        return number

    @staticmethod
    def _to_number(value: Any) -> Optional[Union[int, float]]:
        if isinstance(value, bool):
            return None
        if isinstance(value, int):
            return value
        if isinstance(value, float):
            if value != value or value in (float("inf"), float("-inf")):
                return None
            return int(value) if value.is_integer() else value
        if isinstance(value, str):
            text = value.strip()
            try:
                return int(text)
            except ValueError:
                pass
            try:
                number = float(text)
            except ValueError:
                return None
            if number != number or number in (float("inf"), float("-inf")):
                return None
            return int(number) if number.is_integer() else number
        return None


class CheckboxField(BaseField):
    type: Literal["checkbox"] = "checkbox"

    def coerce(self, value: Any) -> bool:
        if isinstance(value, str):
            return value.strip().lower() not in _FALSE_STRINGS
        return bool(value)


class SelectField(BaseField):
    type: Literal["select"] = "select"

    @field_validator("options")
    @classmethod
    def options_not_empty(cls, value: dict[str, Any]) -> dict[str, Any]:
        if not value:
            raise ValueError("select fields must have options")
        return value

    def coerce(self, value: Any) -> Any:
        if not isinstance(value, str) or value not in self.options:
            raise FieldValueError(
                ("invalid_option", f"Invalid option selected for {self.label}.")
            )
        return value


def parse_calendar_date(value: Any) -> str:
    """Parse a free-form date into ``YYYY-MM-DD``.

    Raises:
        ValueError: When the value is not a recognizable date.
    """
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"not a date: {value!r}")
    try:
        return date_parser.parse(value.strip()).date().isoformat()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"not a date: {value!r}") from e


class DateField(BaseField):
    type: Literal["date"] = "date"

    def coerce(self, value: Any) -> str:
        try:
            return parse_calendar_date(value)
        except ValueError:
            raise FieldValueError(("invalid_date", "Invalid date format.")) from None


class DateRangeField(BaseField):
    type: Literal["date_range"] = "date_range"

    def coerce(self, value: Any) -> dict[str, str]:
        if (
            not isinstance(value, dict)
            or value.get("start") is None
            or value.get("end") is None
        ):
            raise FieldValueError(
                ("invalid_date_range", "Date range must include start and end dates.")
            )
        try:
            start = parse_calendar_date(value["start"])
            end = parse_calendar_date(value["end"])
        except ValueError:
            raise FieldValueError(
                ("invalid_date_range", "Invalid date format in date range.")
            ) from None
        return {"start": start, "end": end}


FieldDescriptor = Annotated[
    Union[
        TextField,
        PasswordField,
        TextareaField,
        FileField,
        SelectField,
        CheckboxField,
        DateField,
        DateRangeField,
        NumberField,
        UrlField,
    ],
    Field(discriminator="type"),
]

_descriptor_adapter: TypeAdapter[FieldDescriptor] = TypeAdapter(FieldDescriptor)


# =============================================================================
# Schema
# =============================================================================


class SettingsSchema:
    """Ordered set of field descriptors keyed by field name."""

    def __init__(self) -> None:
        self._fields: dict[str, BaseField] = {}

    def add_field(self, key: str, config: dict[str, Any]) -> "SettingsSchema":
        """Add or replace a field.

        Args:
            key: Field key, used as the label when none is given.
            config: Descriptor attributes merged over the defaults.

        Returns:
            The schema, for chaining.

        Raises:
            ConfigurationError: On an unknown type or a select without options.
        """
        merged = {"type": "text", "label": key, **config}
        field_type = merged["type"]

        if field_type not in FIELD_TYPES:
            raise ConfigurationError(
                f'Invalid field type "{field_type}" for field "{key}". '
                f"Valid types: {', '.join(FIELD_TYPES)}",
                config_key=key,
            )
        if field_type == "select" and not merged.get("options"):
            raise ConfigurationError(
                f'Select field "{key}" must have options.',
                config_key=key,
            )

        try:
            descriptor = _descriptor_adapter.validate_python(merged)
        except pydantic.ValidationError as e:
            raise ConfigurationError(
                f'Invalid configuration for field "{key}": {e.errors()[0]["msg"]}',
                config_key=key,
            ) from e

        self._fields[key] = descriptor
        return self

    def remove_field(self, key: str) -> "SettingsSchema":
        self._fields.pop(key, None)
        return self

    def get_field(self, key: str) -> Optional[BaseField]:
        return self._fields.get(key)

    def get_fields(self) -> dict[str, BaseField]:
        return dict(self._fields)

    def has_field(self, key: str) -> bool:
        return key in self._fields

    def __len__(self) -> int:
        return len(self._fields)

    def __contains__(self, key: object) -> bool:
        return key in self._fields

    def validate(self, values: dict[str, Any]) -> Union[dict[str, Any], ErrorSet]:
        """Validate and coerce values against every declared field.

        All fields are checked; every failure is collected.

        Returns:
            The sanitized values, or an ErrorSet when any field failed.
        """
        sanitized: dict[str, Any] = {}
        errors = ErrorSet()

        for key, descriptor in self._fields.items():
            value = values.get(key)

            if is_empty_value(value):
                if descriptor.required:
                    errors.add(key, "required_field", f"{descriptor.label} is required.")
                else:
                    sanitized[key] = descriptor.default
                continue

            try:
                sanitized[key] = descriptor.coerce(value)
            except FieldValueError as e:
                for code, message in e.errors:
                    errors.add(key, code, message)

        if errors:
            return errors
        return sanitized

    def validate_or_raise(self, values: dict[str, Any]) -> dict[str, Any]:
        """Validate values, raising instead of returning an ErrorSet.

        Raises:
            ValidationError: Carrying the full ErrorSet.
        """
        result = self.validate(values)
        if isinstance(result, ErrorSet):
            raise ValidationError(result)
        return result

    def to_array(self) -> dict[str, Any]:
        return {"fields": {key: field.to_array() for key, field in self._fields.items()}}

    @classmethod
    def from_array(cls, data: dict[str, Any]) -> "SettingsSchema":
        """Rebuild a schema, re-validating every field definition."""
        schema = cls()
        fields = data.get("fields")
        if isinstance(fields, dict):
            for key, config in fields.items():
                schema.add_field(key, dict(config))
        return schema
