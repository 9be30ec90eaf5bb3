"""
Time-of-day / duration helpers shared by the clock, schemas and reports.

Durations are plain integer seconds internally and ``HH:MM:SS`` strings on
the wire.  UTC offsets are ``±HH:MM`` strings, as stored in the settings row.
"""

from __future__ import annotations

import re
from datetime import datetime, time, timedelta, timezone

SECONDS_PER_DAY = 24 * 3600

_OFFSET_RE = re.compile(r"^([+-])(\d{2}):(\d{2})$")
_CLOCK_RE = re.compile(r"^(\d{2}):(\d{2})(?::(\d{2}))?$")


def seconds_of_day(value: time) -> int:
    return value.hour * 3600 + value.minute * 60 + value.second


def parse_clock(value: str) -> time:
    """Parse ``HH:MM:SS`` (or ``HH:MM``) into a :class:`datetime.time`."""
    match = _CLOCK_RE.match(value.strip())
    if match is None:
        raise ValueError(f"Invalid time of day: {value!r} (expected HH:MM:SS)")
    hour, minute, second = (int(g) if g else 0 for g in match.groups())
    if hour > 23 or minute > 59 or second > 59:
        raise ValueError(f"Invalid time of day: {value!r}")
    return time(hour, minute, second)


def format_clock(value: time | None) -> str | None:
    if value is None:
        return None
    return value.strftime("%H:%M:%S")


def format_duration(seconds: int) -> str:
    """Render a non-negative duration as ``HH:MM:SS`` (hours may exceed 23)."""
    seconds = max(0, int(seconds))
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def format_hours_minutes(seconds: int) -> str:
    """Render a duration as ``HH:MM`` (used by aggregate reports)."""
    minutes = max(0, int(seconds)) // 60
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def parse_duration(value: str) -> int:
    """Parse ``HH:MM:SS`` into seconds, allowing at most 24 hours."""
    parts = value.strip().split(":")
    if len(parts) != 3 or not all(p.isdigit() for p in parts):
        raise ValueError(f"Invalid duration: {value!r} (expected HH:MM:SS)")
    hours, minutes, secs = (int(p) for p in parts)
    if minutes > 59 or secs > 59:
        raise ValueError(f"Invalid duration: {value!r}")
    total = hours * 3600 + minutes * 60 + secs
    if total > SECONDS_PER_DAY:
        raise ValueError("Duration must not exceed 24:00:00")
    return total


def parse_offset(value: str) -> timezone:
    """Turn ``+05:00`` / ``-03:30`` into a fixed-offset :class:`timezone`."""
    match = _OFFSET_RE.match(value.strip())
    if match is None:
        raise ValueError(f"Invalid UTC offset: {value!r} (expected ±HH:MM)")
    sign, hours, minutes = match.groups()
    if int(hours) > 14 or int(minutes) > 59:
        raise ValueError(f"Invalid UTC offset: {value!r}")
    delta = timedelta(hours=int(hours), minutes=int(minutes))
    return timezone(-delta if sign == "-" else delta)


def to_local(now: datetime, tz: timezone) -> datetime:
    """Convert an instant to local wall-clock time; naive input is taken as UTC."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(tz)
