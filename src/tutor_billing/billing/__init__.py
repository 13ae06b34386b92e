"""
Invoice computation: billing calendar, calculator and adjustment resolver.
"""

from .period import (
    billing_period_for,
    confirmation_date_for,
    payment_due_date_for,
    is_confirmed,
    parse_year_month,
    format_year_month,
    previous_month,
    next_month,
)
from .adjustments import resolve_adjustments
from .calculator import calculate_billing_info, get_next_month_billing_info

__all__ = [
    "billing_period_for",
    "confirmation_date_for",
    "payment_due_date_for",
    "is_confirmed",
    "parse_year_month",
    "format_year_month",
    "previous_month",
    "next_month",
    "resolve_adjustments",
    "calculate_billing_info",
    "get_next_month_billing_info",
]
