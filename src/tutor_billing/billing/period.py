"""
Billing calendar.

A billing period is one calendar month. Its invoice is fixed on the
confirmation day of the previous month and paid by the due day of the
month itself. All functions are pure; the reference time is always
passed in by the caller.
"""

import re
from datetime import date, datetime, time
from typing import Any, Optional, Tuple

from dateutil.relativedelta import relativedelta

from ..errors import InvalidPeriodError
from ..utils.config import BillingSettings, default_settings


YEAR_MONTH_PATTERN = re.compile(r'^(\d{4})-(\d{2})$')


def _settings(settings: Optional[BillingSettings]) -> BillingSettings:
    return settings if settings is not None else default_settings()


def normalize_month(value: Any) -> date:
    """
    Return the first day of the month containing ``value``.

    Args:
        value: A date or datetime anywhere in the month

    Raises:
        InvalidPeriodError: If value is not a date
    """
    if isinstance(value, datetime):
        return date(value.year, value.month, 1)
    if isinstance(value, date):
        return value.replace(day=1)
    raise InvalidPeriodError(
        f"Target month must be a date, got {type(value).__name__}: {value!r}"
    )


def normalize_now(value: Any) -> datetime:
    """
    Validate the reference time.

    A bare date is read as midnight of that day.

    Raises:
        InvalidPeriodError: If value is not a date or datetime
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    raise InvalidPeriodError(
        f"Reference time must be a datetime, got {type(value).__name__}: {value!r}"
    )


def parse_year_month(value: str) -> date:
    """
    Parse a ``YYYY-MM`` string.

    Examples:
        >>> parse_year_month("2024-01")
        datetime.date(2024, 1, 1)

    Raises:
        InvalidPeriodError: If the format or month number is invalid
    """
    match = YEAR_MONTH_PATTERN.match(value) if isinstance(value, str) else None
    if not match:
        raise InvalidPeriodError(f"Invalid month format: {value!r} (expected YYYY-MM)")

    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise InvalidPeriodError(f"Month must be between 1 and 12, got {month}")
    if year < 1:
        raise InvalidPeriodError(f"Year must be positive, got {year}")
    return date(year, month, 1)


def format_year_month(target_month: Any) -> str:
    """Format a month as ``YYYY-MM``."""
    return normalize_month(target_month).strftime("%Y-%m")


def previous_month(target_month: Any) -> date:
    """First day of the month before ``target_month``."""
    return normalize_month(target_month) - relativedelta(months=1)


def next_month(target_month: Any) -> date:
    """First day of the month after ``target_month``."""
    return normalize_month(target_month) + relativedelta(months=1)


def billing_period_for(target_month: Any) -> Tuple[date, date]:
    """
    First and last calendar day of the billing month, inclusive.

    Examples:
        >>> billing_period_for(date(2024, 2, 14))
        (datetime.date(2024, 2, 1), datetime.date(2024, 2, 29))
    """
    start = normalize_month(target_month)
    end = start + relativedelta(months=1, days=-1)
    return start, end


def confirmation_date_for(
    target_month: Any,
    settings: Optional[BillingSettings] = None
) -> date:
    """
    Date on which the invoice for ``target_month`` is fixed.

    Falls in the month before the billing month, so January's invoice
    is fixed in December of the previous year.
    """
    prior = previous_month(target_month)
    return prior.replace(day=_settings(settings).confirmation_day)


def payment_due_date_for(
    target_month: Any,
    settings: Optional[BillingSettings] = None
) -> date:
    """Transfer deadline inside the billing month."""
    return normalize_month(target_month).replace(day=_settings(settings).payment_due_day)


def start_of_day(day: date, like: Optional[datetime] = None) -> datetime:
    """
    Midnight of ``day``, carrying the tzinfo of ``like``.

    Used to compare calendar dates against aware or naive timestamps.
    """
    tzinfo = like.tzinfo if like is not None else None
    return datetime.combine(day, time.min, tzinfo=tzinfo)


def confirmation_instant_for(
    target_month: Any,
    like: Optional[datetime] = None,
    settings: Optional[BillingSettings] = None
) -> datetime:
    """Midnight of the confirmation date, comparable with ``like``."""
    return start_of_day(confirmation_date_for(target_month, settings), like)


def is_confirmed(
    target_month: Any,
    now: Any,
    settings: Optional[BillingSettings] = None
) -> bool:
    """
    Check whether the invoice for ``target_month`` is fixed at ``now``.

    Raises:
        InvalidPeriodError: If target_month or now is malformed
    """
    now = normalize_now(now)
    return now >= confirmation_instant_for(target_month, now, settings)
