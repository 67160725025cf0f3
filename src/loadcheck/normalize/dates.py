"""Normalization of free-text dates and times to canonical UTC timestamps."""

import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Optional

from dateutil import parser as date_parser

CANONICAL_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

_CANONICAL_RE = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}Z$")
_FRACTIONAL_RE = re.compile(r"^(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})\.\d+Z$")
_RELAXED_ISO_RE = re.compile(r"^(\d{4}-\d{2}-\d{2})T(\d{2}:\d{2})(:\d{2})?(\.\d+)?Z?$")
_TRAILING_ABBR_RE = re.compile(r"\b([A-Z]{2,4})\s*$")
_NUMERIC_OFFSET_RE = re.compile(r"^[+-]\d{2}:\d{2}$")
_YEAR_FIRST_RE = re.compile(r"^\s*\d{4}[-/.]\d{1,2}[-/.]\d{1,2}")

# US abbreviations generic parsers do not reliably understand.
TZ_ABBREVIATION_OFFSETS = {
    "PST": "-08:00", "PDT": "-07:00",
    "MST": "-07:00", "MDT": "-06:00",
    "CST": "-06:00", "CDT": "-05:00",
    "EST": "-05:00", "EDT": "-04:00",
}

# Fixed offsets for assumed zones; daylight saving is not applied.
TIMEZONE_OFFSETS = {
    "Asia/Kuala_Lumpur": "+08:00",
    "Asia/Singapore": "+08:00",
    "America/New_York": "-05:00",
    "America/Chicago": "-06:00",
    "America/Denver": "-07:00",
    "America/Los_Angeles": "-08:00",
    "Europe/London": "+00:00",
}
DEFAULT_OFFSET = "+00:00"

PLACEHOLDER_ERROR = "Cannot parse TBD or similar placeholders"

# Two defaults that differ in every date component; a parse that depends on
# the default was missing part of the date.
_PROBE_DEFAULTS = (datetime(2000, 1, 1), datetime(2001, 2, 2))


@dataclass
class DateNormalization:
    """Result of normalizing one date/time value."""

    success: bool
    iso_string: Optional[str] = None
    was_normalized: bool = False
    error: Optional[str] = None


def to_canonical(text: str) -> str:
    """Strip fractional seconds from a canonical-pattern timestamp."""
    return _FRACTIONAL_RE.sub(r"\1Z", text)


def is_canonical_timestamp(text: Optional[str]) -> bool:
    """True when text matches the canonical UTC pattern and is a real instant."""
    if not text or not _CANONICAL_RE.match(text):
        return False
    try:
        datetime.strptime(text[:19], "%Y-%m-%dT%H:%M:%S")
    except ValueError:
        return False
    return True


def _format_utc(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime(CANONICAL_FORMAT)


def _assumed_tzinfo(assume_timezone: str) -> tzinfo:
    """Resolve "UTC", a numeric offset or a known zone name to a fixed offset."""
    if assume_timezone == "UTC":
        return timezone.utc
    offset = assume_timezone
    if not _NUMERIC_OFFSET_RE.match(offset):
        offset = TIMEZONE_OFFSETS.get(assume_timezone, DEFAULT_OFFSET)
    sign = -1 if offset.startswith("-") else 1
    hours, minutes = offset[1:].split(":")
    return timezone(sign * timedelta(hours=int(hours), minutes=int(minutes)))


def _parse_relaxed_iso(text: str) -> Optional[str]:
    match = _RELAXED_ISO_RE.match(text)
    if not match:
        return None
    date_part, hour_minute, seconds, _fraction = match.groups()
    try:
        parsed = datetime.strptime(
            f"{date_part}T{hour_minute}{seconds or ':00'}", "%Y-%m-%dT%H:%M:%S"
        )
    except ValueError:
        return None
    return _format_utc(parsed)


def _parse_generic(text: str, day_first: bool) -> Optional[datetime]:
    results = []
    for default in _PROBE_DEFAULTS:
        try:
            results.append(date_parser.parse(text, dayfirst=day_first, default=default))
        except (ValueError, OverflowError):
            return None
    first, second = results
    if (first.year, first.month, first.day) != (second.year, second.month, second.day):
        return None
    return first


def normalize_datetime(
    date_text: Optional[str],
    time_text: Optional[str] = None,
    assume_timezone: str = "UTC",
    day_first: bool = False,
) -> DateNormalization:
    """
    Normalize date (and optional separate time) text to ``YYYY-MM-DDTHH:MM:SSZ``.

    Already-canonical input is returned untouched; ISO-like input is tidied;
    anything else goes through generic calendar parsing, with the assumed
    timezone applied when the text carries no zone of its own. Relaxed ISO
    text without a zone marker is read as UTC.

    Args:
        date_text: Date, or full date-time, text
        time_text: Optional time text from a separate column
        assume_timezone: "UTC", a numeric offset like "+05:30", or a zone name
            from ``TIMEZONE_OFFSETS`` (fixed offset, no DST). Ignored for
            relaxed ISO text such as "2025-09-20T10:00", which is always UTC
        day_first: Read ambiguous numeric dates such as 03/04/2025 as day/month

    Returns:
        DateNormalization with the canonical string or an error description
    """
    if not date_text or "tbd" in date_text.lower():
        return DateNormalization(success=False, error=PLACEHOLDER_ERROR)

    combined = date_text.strip()
    if time_text and time_text.strip():
        combined = f"{combined} {time_text.strip()}"
    if "tbd" in combined.lower():
        return DateNormalization(success=False, error=PLACEHOLDER_ERROR)

    text = combined
    abbr = _TRAILING_ABBR_RE.search(text)
    if abbr and abbr.group(1) in TZ_ABBREVIATION_OFFSETS:
        text = text[: abbr.start()] + TZ_ABBREVIATION_OFFSETS[abbr.group(1)]

    if is_canonical_timestamp(text):
        return DateNormalization(success=True, iso_string=text)

    canonical = to_canonical(text)
    if canonical != text and is_canonical_timestamp(canonical):
        return DateNormalization(success=True, iso_string=canonical, was_normalized=True)

    relaxed = _parse_relaxed_iso(text)
    if relaxed is not None:
        return DateNormalization(
            success=True, iso_string=relaxed, was_normalized=relaxed != text
        )

    parsed = _parse_generic(text, day_first and not _YEAR_FIRST_RE.match(text))
    if parsed is None:
        return DateNormalization(success=False, error=f"Invalid date format: {combined}")

    # No zone in the text: the assumed timezone applies.
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=_assumed_tzinfo(assume_timezone))

    return DateNormalization(success=True, iso_string=_format_utc(parsed), was_normalized=True)
