"""
Timestamp helpers.

New records carry timezone-aware UTC datetimes; legacy rows and provider
payloads may carry ISO-8601 strings (with or without offset) or millisecond
epochs. Readers go through to_epoch_ms() so all of them compare on one axis.
"""
from datetime import datetime, timezone
from typing import Any, Optional, Union

from roombridge.shared.core.constants import WATI_TIMEZONE


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def isoformat_utc(value: Optional[datetime]) -> Optional[str]:
    """Format as `2024-01-01T12:00:00.000Z` (millisecond precision). None passes through."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse any accepted timestamp representation into an aware datetime.

    Naive values (no offset) are read as UTC. Numbers and digit strings are
    millisecond epochs. Returns None for empty or unparseable input.
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)

    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)

    if isinstance(value, str):
        text = value.strip()
        if text.lstrip("-").isdigit():
            return datetime.fromtimestamp(int(text) / 1000, tz=timezone.utc)
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)

    return None


def to_epoch_ms(value: Any) -> Optional[int]:
    """Milliseconds since epoch for any accepted timestamp representation."""
    parsed = parse_timestamp(value)
    if parsed is None:
        return None
    return int(parsed.timestamp() * 1000)


def wati_timestamp_to_iso(unix_seconds: Union[str, int, float, None]) -> str:
    """
    Convert a WATI `timestamp` (Unix seconds) into the stored `date` format:
    ISO-8601 wall-clock time at UTC-3 with no offset suffix,
    e.g. 1700000000 -> "2023-11-14T19:13:20.000".

    Missing or malformed timestamps fall back to the current time.
    """
    try:
        seconds = float(unix_seconds)
        moment = datetime.fromtimestamp(seconds, tz=WATI_TIMEZONE)
    except (TypeError, ValueError, OverflowError, OSError):
        moment = utc_now().astimezone(WATI_TIMEZONE)

    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}"
