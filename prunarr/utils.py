"""
Miscellaneous utilities
"""

import logging
import re
from datetime import datetime, timedelta, timezone

from dateutil import parser as date_parser

_DURATION_UNITS = {
    "s": 1,
    "sec": 1,
    "secs": 1,
    "second": 1,
    "seconds": 1,
    "m": 60,
    "min": 60,
    "mins": 60,
    "minute": 60,
    "minutes": 60,
    "h": 3600,
    "hr": 3600,
    "hrs": 3600,
    "hour": 3600,
    "hours": 3600,
    "d": 86400,
    "day": 86400,
    "days": 86400,
    "w": 604800,
    "week": 604800,
    "weeks": 604800,
    "month": 2630016,
    "months": 2630016,
    "M": 2630016,
    "y": 31557600,
    "year": 31557600,
    "years": 31557600,
}

_DURATION_PART = re.compile(r"(\d+)\s*([A-Za-z]+)")

_BYTE_UNITS = ["B", "KiB", "MiB", "GiB", "TiB", "PiB"]


def setup_logging(log_level: str = "INFO"):
    """Configure logging system"""
    numeric_level = getattr(logging, log_level.upper(), None)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    # urllib3 logs every connection at DEBUG, which drowns the skip reasons
    logging.getLogger("urllib3").setLevel(max(numeric_level, logging.INFO))


def parse_duration(value: str | int | float | timedelta | None) -> timedelta:
    """
    Parse a human-readable time span such as "12 days" or "1w 3d 4h"

    Bare numbers are taken as seconds. Empty values mean zero.

    Raises:
        ValueError: if the value can't be understood or is negative
    """
    if value is None:
        return timedelta(0)
    if isinstance(value, timedelta):
        if value < timedelta(0):
            raise ValueError(f"Duration must not be negative: {value}")
        return value
    if isinstance(value, (int, float)):
        if value < 0:
            raise ValueError(f"Duration must not be negative: {value}")
        return timedelta(seconds=value)

    text = value.strip()
    if not text:
        return timedelta(0)
    if text.isdigit():
        return timedelta(seconds=int(text))

    total = 0
    position = 0
    for match in _DURATION_PART.finditer(text):
        gap = text[position : match.start()]
        if gap.strip(" ,"):
            raise ValueError(f"Invalid duration: {value!r}")
        number, unit = match.groups()
        # "M" is months, "m" is minutes; everything else is case-insensitive
        seconds = _DURATION_UNITS.get(unit) or _DURATION_UNITS.get(unit.lower())
        if seconds is None:
            raise ValueError(f"Unknown time unit {unit!r} in duration {value!r}")
        total += int(number) * seconds
        position = match.end()

    if position == 0 or text[position:].strip(" ,"):
        raise ValueError(f"Invalid duration: {value!r}")

    return timedelta(seconds=total)


def format_duration(duration: timedelta) -> str:
    """Format a time span as e.g. "12days 3h 5m" (negative spans show as 0s)"""
    seconds = int(duration.total_seconds())
    if seconds <= 0:
        return "0s"

    parts = []
    for label, size in (("days", 86400), ("h", 3600), ("m", 60), ("s", 1)):
        amount, seconds = divmod(seconds, size)
        if amount:
            parts.append(f"{amount}{label}")
    return " ".join(parts)


def format_size(size: int) -> str:
    """Format a byte count using binary units, e.g. "4.66 GiB" """
    if size < 1024:
        return f"{size} B"

    value = float(size)
    unit = _BYTE_UNITS[0]
    for unit in _BYTE_UNITS[1:]:
        value /= 1024
        if value < 1024:
            break
    return f"{value:.2f} {unit}"


def season_label(season_number: int) -> str:
    """Label a media server uses for a season, e.g. "Season 3" """
    return f"Season {season_number}"


def format_season_info(series_title: str, season_number: int) -> str:
    """Format season information for display"""
    return f"{series_title} S{season_number:02d}"


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO-8601 timestamp from an API into an aware UTC datetime"""
    if not value:
        return None
    # isoparse keeps the first six fraction digits of .NET style timestamps
    parsed = date_parser.isoparse(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)
