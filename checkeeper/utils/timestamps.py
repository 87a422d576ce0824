"""
Timestamp and boolean conversions for Checkeeper's wire format.
"""

import re
from datetime import datetime, timezone
from typing import Union
from zoneinfo import ZoneInfo

from ..types import CheckeeperBoolean, EasternTimeTimestamp, ISO8601Instant

EASTERN = ZoneInfo("America/New_York")
EASTERN_FORMAT = "%Y-%m-%d %H:%M:%S"

# Fractional seconds of any length; fromisoformat before 3.11 needs 3 or 6 digits
_FRACTION = re.compile(r"(?<=:\d\d)[.,](\d+)")


def parse_instant(value: Union[datetime, ISO8601Instant]) -> datetime:
    """
    Parse a datetime or ISO 8601 instant into an aware datetime.

    A trailing "Z" is accepted, as are fractional seconds of any length.
    Values without an offset are taken as UTC.
    """
    if isinstance(value, datetime):
        instant = value
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        text = _FRACTION.sub(lambda m: "." + (m.group(1) + "000000")[:6], text, count=1)
        instant = datetime.fromisoformat(text)
    else:
        raise TypeError(f"Expected datetime or ISO 8601 string, got {type(value).__name__}")

    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant


def to_eastern_time(value: Union[datetime, ISO8601Instant]) -> EasternTimeTimestamp:
    """
    Convert an instant to Checkeeper's Eastern Time timestamp.

    Examples:
        >>> to_eastern_time("2023-01-19T19:00:00Z")
        '2023-01-19 14:00:00'
        >>> to_eastern_time("2023-07-01T03:30:00Z")
        '2023-06-30 23:30:00'
    """
    return parse_instant(value).astimezone(EASTERN).strftime(EASTERN_FORMAT)


def to_checkeeper_boolean(flag) -> CheckeeperBoolean:
    """Checkeeper encodes booleans as the strings "1" and "0"."""
    return "1" if flag else "0"
