"""
Monthly invoice calculator.

Builds the invoice for one student and month:

- ① prepayment: planned lessons of the month that existed when the
  invoice was fixed (makeup lessons carry transport only),
- ② adjustments for the previous month (see ``adjustments``),
- ③ other charges entered by the teacher, passed through unchanged.

The calculation is pure: identical inputs and ``now`` give an identical
``BillingInfo``.
"""

import logging
from datetime import datetime
from typing import Iterable, List, Optional

from .adjustments import resolve_adjustments
from .period import (
    billing_period_for,
    confirmation_date_for,
    confirmation_instant_for,
    is_confirmed,
    next_month,
    normalize_month,
    normalize_now,
    payment_due_date_for,
    previous_month,
)
from ..models.invoice import BillingInfo, OtherCharge, OtherChargesSummary
from ..models.lesson import Lesson, LessonStatus
from ..models.payment import PaymentStatus
from ..utils.config import BillingSettings


logger = logging.getLogger(__name__)


def _lesson_sort_key(lesson: Lesson):
    return (lesson.date, lesson.start_time, lesson.id)


def select_prepayment_lessons(
    lessons: Iterable[Lesson],
    target_month,
    settings: Optional[BillingSettings] = None
) -> List[Lesson]:
    """
    Lessons billed in advance on the invoice for ``target_month``.

    A lesson qualifies when it falls inside the billing month, is still
    planned, and was created no later than the confirmation instant.
    Lessons created later are charged on the next invoice as additions.
    """
    start, end = billing_period_for(target_month)
    selected = []

    for lesson in lessons:
        if not start <= lesson.date <= end:
            continue
        if lesson.status != LessonStatus.PLANNED:
            continue
        if lesson.created_at is not None:
            cutoff = confirmation_instant_for(target_month, lesson.created_at, settings)
            if lesson.created_at > cutoff:
                logger.debug(
                    f"Lesson {lesson.id} created after confirmation; "
                    f"billed as an addition next month"
                )
                continue
        if lesson.is_makeup and lesson.fee:
            logger.warning(
                f"Makeup lesson {lesson.id} carries fee {lesson.fee}; billed as 0"
            )
        selected.append(lesson)

    selected.sort(key=_lesson_sort_key)
    return selected


def calculate_billing_info(
    lessons: Iterable[Lesson],
    target_month,
    now: datetime,
    prior_month_lessons: Iterable[Lesson] = (),
    other_charges: Iterable[OtherCharge] = (),
    settings: Optional[BillingSettings] = None,
    payment_status: PaymentStatus = PaymentStatus.UNPAID
) -> BillingInfo:
    """
    Calculate the invoice for one student and month.

    Args:
        lessons: The student's lessons (already filtered by student)
        target_month: Any date within the billing month
        now: Reference time for the confirmation flag
        prior_month_lessons: The student's lessons for the previous month
        other_charges: Other charges stored for the student and month
        settings: Billing constants (defaults to process configuration)
        payment_status: Current state from the payment tracker

    Returns:
        BillingInfo for the month

    Raises:
        InvalidPeriodError: If target_month or now is malformed

    Examples:
        >>> info = calculate_billing_info(
        ...     lessons, date(2024, 4, 1), datetime(2024, 3, 25),
        ...     prior_month_lessons=march_lessons,
        ...     other_charges=charges,
        ... )
        >>> info.grand_total
        12300
    """
    target = normalize_month(target_month)
    now = normalize_now(now)

    included = select_prepayment_lessons(lessons, target, settings)
    lesson_fee_total = sum(l.billable_fee for l in included)
    transport_fee_total = sum(l.transport_fee for l in included)

    prior_start, prior_end = billing_period_for(previous_month(target))
    prior = []
    for lesson in prior_month_lessons:
        if prior_start <= lesson.date <= prior_end:
            prior.append(lesson)
        else:
            logger.debug(f"Ignoring lesson {lesson.id} outside the previous month")
    adjustments = resolve_adjustments(prior, now, settings)

    charges = tuple(other_charges)
    other = OtherChargesSummary(items=charges, total=sum(c.amount for c in charges))

    grand_total = (
        lesson_fee_total
        + transport_fee_total
        + adjustments.total
        + other.total
    )

    info = BillingInfo(
        target_month=target,
        lesson_count=len(included),
        lesson_fee_total=lesson_fee_total,
        transport_fee_total=transport_fee_total,
        adjustments=adjustments,
        other_charges=other,
        grand_total=grand_total,
        is_confirmed=is_confirmed(target, now, settings),
        confirmation_date=confirmation_date_for(target, settings),
        payment_due_date=payment_due_date_for(target, settings),
        lessons=tuple(included),
        payment_status=payment_status,
    )

    logger.debug(
        f"Invoice {info.year_month}: {info.lesson_count} lessons, "
        f"total {info.grand_total} (confirmed={info.is_confirmed})"
    )
    return info


def get_next_month_billing_info(
    lessons: Iterable[Lesson],
    now: datetime,
    prior_month_lessons: Iterable[Lesson] = (),
    other_charges: Iterable[OtherCharge] = (),
    settings: Optional[BillingSettings] = None,
    payment_status: PaymentStatus = PaymentStatus.UNPAID
) -> BillingInfo:
    """Invoice for the month after the one containing ``now``."""
    now = normalize_now(now)
    return calculate_billing_info(
        lessons,
        next_month(now),
        now,
        prior_month_lessons=prior_month_lessons,
        other_charges=other_charges,
        settings=settings,
        payment_status=payment_status,
    )
