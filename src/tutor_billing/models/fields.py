"""
Field conversion helpers for records crossing the storage boundary.

The record store hands dates as ``YYYY-MM-DD`` strings and timestamps as
ISO 8601 strings; the core works with ``date`` and ``datetime`` objects.
"""

from datetime import date, datetime
from typing import Any, Optional

from dateutil import parser as date_parser


def parse_date(value: Any, field_name: str = "date") -> date:
    """
    Convert a ``YYYY-MM-DD`` string (or date/datetime) to a ``date``.

    Raises:
        ValueError: If the value is missing or not a calendar date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value:
        raise ValueError(f"{field_name} must be a YYYY-MM-DD string, got {value!r}")
    try:
        return date.fromisoformat(value[:10])
    except ValueError as e:
        raise ValueError(f"Invalid {field_name}: {value} ({e})") from e


def parse_timestamp(value: Any, field_name: str = "timestamp") -> Optional[datetime]:
    """
    Convert an ISO 8601 string to ``datetime``; ``None`` and empty strings stay ``None``.

    Raises:
        ValueError: If the value cannot be parsed
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    try:
        return date_parser.isoparse(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid {field_name}: {value!r} ({e})") from e


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    """Serialize a timestamp to ISO 8601 (``None`` passes through)."""
    return value.isoformat() if value else None


def align_timestamp(value: datetime, like: datetime) -> datetime:
    """
    Return ``value`` with the same tz-awareness as ``like``.

    A naive timestamp is read as wall-clock time in the zone of the aware
    one, so records written with an offset compare against a naive
    reference time (and the reverse) without raising ``TypeError``.
    """
    if (value.tzinfo is None) == (like.tzinfo is None):
        return value
    if value.tzinfo is None:
        return value.replace(tzinfo=like.tzinfo)
    return value.replace(tzinfo=None)
