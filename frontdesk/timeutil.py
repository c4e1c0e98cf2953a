"""Date and time helpers for the front-desk text formats.

Every timestamp the check-in engine stores is a string in the
``dd-MM-yyyy HH:mm:ss`` layout. Appointment dates and times arrive as
separate ``dd-MM-yyyy`` and ``HH:mm`` strings, often typed by hand, so input
is sanitized before parsing: look-alike unicode dashes, colons and spaces are
folded to their ASCII forms and everything else is dropped.
"""
from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta
from typing import Optional

DATE_FORMAT = "%d-%m-%Y"
TIME_FORMAT = "%H:%M"
TIME_SECONDS_FORMAT = "%H:%M:%S"
DATETIME_FORMAT = f"{DATE_FORMAT} {TIME_FORMAT}"
DATETIME_SECONDS_FORMAT = f"{DATE_FORMAT} {TIME_SECONDS_FORMAT}"

_TRANSLATIONS = str.maketrans(
    {
        "\u00a0": " ",
        "\u202f": " ",
        "\u2007": " ",
        "\u2010": "-",
        "\u2011": "-",
        "\u2012": "-",
        "\u2013": "-",
        "\u2014": "-",
        "\u2212": "-",
        "\uff1a": ":",
        "\u2236": ":",
        "\u02d0": ":",
        "\ua789": ":",
        "\ufeff": None,
        "\u200b": None,
        "\u200c": None,
        "\u200d": None,
        "\u2060": None,
        "\u200e": None,
        "\u200f": None,
    }
)
_WHITESPACE = re.compile(r"\s+")
_HAS_SECONDS = re.compile(r".*:.*:.*")


def sanitize_for_parsing(value: str) -> str:
    """Fold look-alike characters and keep only digits, ``-``, ``:`` and spaces."""

    translated = value.translate(_TRANSLATIONS)
    kept = []
    for char in translated:
        if char.isdigit():
            # Non-ASCII digits (e.g. Arabic-Indic) collapse to their ASCII value.
            kept.append(str(int(char)) if char.isdecimal() else "")
        elif char in " -:":
            kept.append(char)
        elif char.isspace():
            kept.append(" ")
    return _WHITESPACE.sub(" ", "".join(kept)).strip()


def _require_text(value: Optional[str], label: str) -> str:
    if value is None or not str(value).strip():
        raise ValueError(f"{label} cannot be empty")
    return sanitize_for_parsing(str(value))


def parse_date(value: str) -> date:
    text = _require_text(value, "Date")
    try:
        return datetime.strptime(text, DATE_FORMAT).date()
    except ValueError as exc:
        raise ValueError(f"Invalid date '{value}', expected dd-MM-yyyy") from exc


def parse_time(value: str) -> time:
    """Parse ``HH:mm`` or ``HH:mm:ss``."""

    text = _require_text(value, "Time")
    layout = TIME_SECONDS_FORMAT if _HAS_SECONDS.match(text) else TIME_FORMAT
    try:
        return datetime.strptime(text, layout).time()
    except ValueError as exc:
        raise ValueError(f"Invalid time '{value}', expected HH:mm or HH:mm:ss") from exc


def parse_datetime(value: str) -> datetime:
    """Parse ``dd-MM-yyyy HH:mm`` or ``dd-MM-yyyy HH:mm:ss``."""

    text = _require_text(value, "Date-time")
    layout = DATETIME_SECONDS_FORMAT if _HAS_SECONDS.match(text) else DATETIME_FORMAT
    try:
        return datetime.strptime(text, layout)
    except ValueError as exc:
        raise ValueError(
            f"Invalid date-time '{value}', expected dd-MM-yyyy HH:mm[:ss]"
        ) from exc


def format_date(value: date) -> str:
    return value.strftime(DATE_FORMAT)


def format_time(value: time) -> str:
    return value.strftime(TIME_FORMAT)


def format_time_seconds(value: time) -> str:
    return value.strftime(TIME_SECONDS_FORMAT)


def format_datetime(value: datetime) -> str:
    return value.strftime(DATETIME_FORMAT)


def format_datetime_seconds(value: datetime) -> str:
    return value.strftime(DATETIME_SECONDS_FORMAT)


def now() -> datetime:
    return datetime.now().replace(microsecond=0)


def now_string_seconds() -> str:
    return format_datetime_seconds(now())


def combine(date_text: str, time_text: str) -> datetime:
    """Join an appointment date and time into a single datetime."""

    return datetime.combine(parse_date(date_text), parse_time(time_text))


def normalize_date(value: str) -> str:
    return format_date(parse_date(value))


def normalize_time(value: str) -> str:
    parsed = parse_time(value)
    if _HAS_SECONDS.match(value.strip()):
        return format_time_seconds(parsed)
    return format_time(parsed)


def normalize_datetime(value: str) -> str:
    parsed = parse_datetime(value)
    if _HAS_SECONDS.match(value.strip()):
        return format_datetime_seconds(parsed)
    return format_datetime(parsed)


def parse_duration_to_minutes(value: str) -> int:
    """Convert an ``HH:mm`` duration into minutes; zero is rejected."""

    text = _require_text(value, "Duration")
    match = re.fullmatch(r"(\d{1,2}):(\d{2})", text)
    if not match:
        raise ValueError(f"Invalid duration '{value}', expected HH:mm")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if minutes > 59:
        raise ValueError(f"Invalid duration '{value}', minutes must be below 60")
    total = hours * 60 + minutes
    if total <= 0:
        raise ValueError("Duration must be positive")
    return total


def format_duration_from_minutes(minutes: int) -> str:
    if minutes <= 0:
        raise ValueError(f"Duration must be positive, got: {minutes}")
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def compute_end(start: datetime, duration_minutes: int) -> datetime:
    if duration_minutes <= 0:
        raise ValueError(f"Duration must be positive, got: {duration_minutes}")
    return start + timedelta(minutes=duration_minutes)


def overlaps(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    """Half-open interval overlap: ``[a_start, a_end)`` against ``[b_start, b_end)``."""

    if a_end <= a_start or b_end <= b_start:
        raise ValueError("End time must be after start time")
    return a_start < b_end and b_start < a_end


def compare_datetimes(left: str, right: str) -> int:
    """Return -1, 0 or 1 comparing two stored timestamps; raises ``ValueError``."""

    a = parse_datetime(left)
    b = parse_datetime(right)
    return (a > b) - (a < b)
