"""
Pricing and makeup-time helpers.

Lesson fees, durations and the Japanese display strings used on the
invoice and the makeup credit pages.
"""

import math
from datetime import datetime, timedelta
from typing import Optional

from ..models.fields import align_timestamp
from ..models.lesson import MINUTES_PER_HOUR
from ..utils.config import config


SECONDS_PER_DAY = 24 * 60 * 60


def calculate_hours(start_time: str, end_time: str) -> float:
    """
    Duration in hours between two HH:MM times.

    Examples:
        >>> calculate_hours("17:00", "18:30")
        1.5

    Raises:
        ValueError: If a time is malformed or end is not after start
    """
    def to_minutes(value: str) -> int:
        try:
            hour, minute = value[:5].split(":")
            return int(hour) * 60 + int(minute)
        except (AttributeError, ValueError):
            raise ValueError(f"Invalid time: {value!r} (expected HH:MM)")

    start = to_minutes(start_time)
    end = to_minutes(end_time)
    if end <= start:
        raise ValueError(f"End time {end_time} must be after start time {start_time}")
    return (end - start) / MINUTES_PER_HOUR


def calculate_lesson_amount(hours: float, hourly_rate: Optional[int] = None) -> int:
    """Lesson fee in yen, rounded half up to a whole yen."""
    rate = hourly_rate if hourly_rate is not None else config.hourly_rate
    return int(math.floor(hours * rate + 0.5))


def lesson_fee_for(hours: float, hourly_rate: Optional[int] = None, is_makeup: bool = False) -> int:
    """Fee for a new lesson; makeup lessons are free."""
    if is_makeup:
        return 0
    return calculate_lesson_amount(hours, hourly_rate)


def hours_to_minutes(hours: float) -> int:
    return int(round(hours * MINUTES_PER_HOUR))


def minutes_to_hours(minutes: int) -> float:
    return minutes / MINUTES_PER_HOUR


def format_currency(amount: int) -> str:
    """
    Format yen for display.

    Examples:
        >>> format_currency(3500)
        '¥3,500'
        >>> format_currency(-800)
        '-¥800'
    """
    sign = "-" if amount < 0 else ""
    return f"{sign}¥{abs(amount):,}"


def format_makeup_time(minutes: int) -> str:
    """
    Format banked minutes for display.

    Examples:
        >>> format_makeup_time(120)
        '2時間'
        >>> format_makeup_time(90)
        '1時間30分'
        >>> format_makeup_time(45)
        '45分'
    """
    hours, remaining = divmod(minutes, MINUTES_PER_HOUR)
    if remaining == 0:
        return f"{hours}時間"
    if hours == 0:
        return f"{remaining}分"
    return f"{hours}時間{remaining}分"


def days_until_expiration(expires_at: datetime, now: datetime) -> int:
    """Whole days left before expiry, rounded up (negative once expired)."""
    seconds = (align_timestamp(expires_at, now) - now).total_seconds()
    return math.ceil(seconds / SECONDS_PER_DAY)


def format_expiration_status(expires_at: datetime, now: datetime) -> str:
    """
    Describe how soon a credit expires.

    Counted in calendar days up to the last day the credit can be used.

    Examples:
        >>> format_expiration_status(datetime(2024, 5, 1), datetime(2024, 4, 26, 9))
        'あと4日'
        >>> format_expiration_status(datetime(2024, 5, 1), datetime(2024, 4, 30, 21))
        '本日期限'
    """
    expires_at = align_timestamp(expires_at, now)
    if expires_at <= now:
        return "期限切れ"

    last_usable_day = (expires_at - timedelta(microseconds=1)).date()
    days = (last_usable_day - now.date()).days

    if days == 0:
        return "本日期限"
    if days == 1:
        return "明日期限"
    if days <= 7:
        return f"あと{days}日"
    return f"{last_usable_day.month}月{last_usable_day.day}日まで"
