"""
Date parsing for platform payloads.

Platforms report timestamps as epoch seconds, epoch milliseconds, ISO-8601
variants or their own formats (Twitter's ``Wed Oct 10 20:19:24 +0000 2018``).
DateConverter tries the known formats in a fixed order, then falls back to
dateutil's free-form parser. Results are always timezone-aware.

Usage:
    converter = DateConverter(timezone_string="Europe/Berlin")
    published = converter.convert("Mon Jan 15 10:30:00 +0000 2024")
    local = converter.to_site_timezone(published)
"""

import re
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Callable, Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

from content_importer.core.exceptions import ConfigurationError, ParseError

TWITTER_FORMAT = "%a %b %d %H:%M:%S %z %Y"
MEDIUM_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"
WORDPRESS_FORMAT = "%Y-%m-%d %H:%M:%S"

# (strptime format, literal "Z" suffix meaning UTC)
AUTO_DETECT_FORMATS: tuple[tuple[str, bool], ...] = (
    ("%Y-%m-%dT%H:%M:%S.%f%z", False),
    ("%Y-%m-%dT%H:%M:%S%z", False),
    (MEDIUM_FORMAT, True),
    ("%Y-%m-%dT%H:%M:%SZ", True),
    (TWITTER_FORMAT, False),
    (WORDPRESS_FORMAT, False),
    ("%Y-%m-%d", False),
)

# Epoch seconds are matched before the formats above; 13+ digits means milliseconds
MILLISECOND_DIGITS = 13

_NUMERIC_RE = re.compile(r"-?(\d+)(?:\.\d+)?")
_RELATIVE_AGO_RE = re.compile(
    r"(\d+)\s+(second|minute|hour|day|week|month|year)s?\s+ago",
    re.IGNORECASE,
)


class DateConverter:
    """Parse and convert timestamps.

    Args:
        timezone_string: IANA name of the site timezone.
        gmt_offset: Site offset in hours, used when no timezone name is set.
        default_timezone: Zone attached to parsed values that carry none.
        now: Clock returning an aware datetime, replaceable in tests.
    """

    def __init__(
        self,
        timezone_string: Optional[str] = None,
        gmt_offset: float = 0.0,
        default_timezone: tzinfo = timezone.utc,
        now: Optional[Callable[[], datetime]] = None,
    ):
        self.timezone_string = timezone_string
        self.gmt_offset = gmt_offset
        self.default_timezone = default_timezone
        self._now = now or (lambda: datetime.now(self.default_timezone))

    # -------------------------------------------------------------------------
    # Parsing
    # -------------------------------------------------------------------------

    def convert(self, date_string: str, fmt: Optional[str] = None) -> datetime:
        """Parse a date string.

        Args:
            date_string: Epoch seconds/milliseconds or a formatted date.
            fmt: strptime format the value must match exactly.

        Returns:
            Timezone-aware datetime.

        Raises:
            ParseError: If the value is empty, not a string or number, or
                matches no known format.
        """
        if isinstance(date_string, (int, float)) and not isinstance(date_string, bool):
            date_string = str(date_string)
        elif date_string is not None and not isinstance(date_string, str):
            raise ParseError(
                f"Date value must be a string, got {type(date_string).__name__}.",
                raw_value=repr(date_string),
            )
        date_string = (date_string or "").strip()
        if not date_string:
            raise ParseError("Date string cannot be empty.", raw_value=date_string)

        if _NUMERIC_RE.fullmatch(date_string):
            return self._convert_timestamp(date_string)

        if fmt is not None:
            try:
                parsed = datetime.strptime(date_string, fmt)
            except ValueError:
                raise ParseError(
                    f'Could not parse date "{date_string}" with format "{fmt}".',
                    raw_value=date_string,
                ) from None
            return self._localize(parsed, utc=fmt.endswith("Z"))

        for candidate, is_utc in AUTO_DETECT_FORMATS:
            try:
                parsed = datetime.strptime(date_string, candidate)
            except ValueError:
                continue
            return self._localize(parsed, utc=is_utc)

        try:
            parsed = date_parser.parse(date_string)
        except (ValueError, OverflowError):
            raise ParseError(
                f"Could not parse date string: {date_string}",
                raw_value=date_string,
            ) from None
        return self._localize(parsed)

    def _convert_timestamp(self, value: str) -> datetime:
        match = _NUMERIC_RE.fullmatch(value)
        seconds = int(value) if "." not in value else int(float(value))
        if len(match.group(1)) >= MILLISECOND_DIGITS:
            seconds = int(seconds / 1000)
        try:
            return datetime.fromtimestamp(seconds, tz=self.default_timezone)
        except (OverflowError, OSError, ValueError):
            raise ParseError(
                f"Timestamp out of range: {value}",
                raw_value=value,
            ) from None

    def _localize(self, value: datetime, utc: bool = False) -> datetime:
        if value.tzinfo is not None:
            return value
        return value.replace(tzinfo=timezone.utc if utc else self.default_timezone)

    def parse_relative(self, relative: str) -> datetime:
        """Parse ``now``, ``today``, ``yesterday``, ``tomorrow`` or ``<N> <unit>s ago``.

        Anything else goes to the free-form parser.

        Raises:
            ParseError: If the text is empty or not understood.
        """
        text = " ".join((relative or "").lower().split())
        if not text:
            raise ParseError("Relative date string cannot be empty.", raw_value=relative)

        now = self._now()
        midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)

        if text == "now":
            return now
        if text == "today":
            return midnight
        if text == "yesterday":
            return midnight - timedelta(days=1)
        if text == "tomorrow":
            return midnight + timedelta(days=1)

        match = _RELATIVE_AGO_RE.fullmatch(text)
        if match:
            amount = int(match.group(1))
            unit = match.group(2) + "s"
            try:
                return now - relativedelta(**{unit: amount})
            except (ValueError, OverflowError):
                raise ParseError(
                    f"Relative date out of range: {text}",
                    raw_value=relative,
                ) from None

        try:
            parsed = date_parser.parse(text, default=midnight.replace(tzinfo=None))
        except (ValueError, OverflowError):
            raise ParseError(
                f"Could not parse relative date: {text}",
                raw_value=relative,
            ) from None
        return self._localize(parsed)

    # -------------------------------------------------------------------------
    # Conversion
    # -------------------------------------------------------------------------

    def to_wordpress_format(self, value: datetime) -> str:
        """Format as ``YYYY-MM-DD HH:MM:SS`` in the value's own timezone."""
        return value.strftime(WORDPRESS_FORMAT)

    def to_gmt(self, value: datetime) -> datetime:
        return self._localize(value).astimezone(timezone.utc)

    def to_timezone(self, value: datetime, zone: Union[str, tzinfo]) -> datetime:
        """Convert to a named zone or tzinfo."""
        if isinstance(zone, str):
            zone = self._zone_from_name(zone)
        return self._localize(value).astimezone(zone)

    def to_site_timezone(self, value: datetime) -> datetime:
        return self._localize(value).astimezone(self.get_site_timezone())

    def get_site_timezone(self) -> tzinfo:
        """The configured IANA zone, or a fixed offset built from ``gmt_offset``."""
        if self.timezone_string:
            return self._zone_from_name(self.timezone_string)

        offset = float(self.gmt_offset or 0)
        hours = int(offset)
        minutes = int(round(abs((offset - hours) * 60)))
        sign = 1 if offset >= 0 else -1
        return timezone(sign * timedelta(hours=abs(hours), minutes=minutes))

    @staticmethod
    def _zone_from_name(name: str) -> tzinfo:
        if name.upper() in ("UTC", "GMT", "Z"):
            return timezone.utc
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ConfigurationError(f"Unknown timezone: {name}", config_key="timezone_string") from e
