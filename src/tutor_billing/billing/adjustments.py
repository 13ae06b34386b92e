"""
Prior-month adjustment resolver.

The invoice for a month is fixed before the month starts, so changes
made afterwards are settled on the following invoice ("②"):

- lessons added after their own month's confirmation date are charged
  (fee + transport),
- teacher-caused cancellations of invoiced lessons refund fee + transport,
- student-caused cancellations refund transport only, because the fee is
  returned as makeup credit instead,
- cancelled makeup lessons refund nothing.

Lines are derived from the lessons' current state on every call.
"""

import logging
from datetime import datetime
from typing import Iterable, List, Optional

from .period import confirmation_instant_for, normalize_now
from ..models.invoice import AdjustmentDetail, AdjustmentSummary, AdjustmentType
from ..models.fields import align_timestamp
from ..models.lesson import Approved, CancellationCause, Lesson
from ..utils.config import BillingSettings


logger = logging.getLogger(__name__)


REASON_ADDED_LESSON = "追加レッスン"
REASON_TEACHER_CANCELLATION = "キャンセル返金（先生都合）"
REASON_STUDENT_CANCELLATION = "キャンセル返金（生徒都合・交通費のみ）"


def was_invoiced_on_time(
    lesson: Lesson,
    settings: Optional[BillingSettings] = None
) -> bool:
    """
    Check whether a lesson existed when its own month's invoice was fixed.

    Lessons without a creation timestamp are treated as invoiced on time.
    """
    if lesson.created_at is None:
        return True
    billing_instant = confirmation_instant_for(lesson.date, lesson.created_at, settings)
    return lesson.created_at <= billing_instant


def _existed_at(lesson: Lesson, now: datetime) -> bool:
    return lesson.created_at is None or align_timestamp(lesson.created_at, now) <= now


def _cancellation_line(lesson: Lesson, warnings: List[str]) -> Optional[AdjustmentDetail]:
    """Refund line for an invoiced, cancelled lesson (None if nothing is owed)."""
    if lesson.is_makeup:
        # Makeup right is forfeited.
        return None

    cancellation = lesson.cancellation
    if not isinstance(cancellation, Approved) or cancellation.caused_by is None:
        message = (
            f"Lesson {lesson.id} ({lesson.date.isoformat()}) is cancelled without an "
            f"approved cancellation cause (state: {cancellation.state}); "
            f"excluded from adjustments"
        )
        logger.warning(message)
        warnings.append(message)
        return None

    if cancellation.caused_by == CancellationCause.TEACHER:
        amount = lesson.fee + lesson.transport_fee
        reason = REASON_TEACHER_CANCELLATION
    else:
        amount = lesson.transport_fee
        reason = REASON_STUDENT_CANCELLATION

    if amount <= 0:
        return None

    return AdjustmentDetail(
        date=lesson.date,
        lesson_id=lesson.id,
        reason=reason,
        amount=amount,
        type=AdjustmentType.REFUND,
    )


def resolve_adjustments(
    prior_month_lessons: Iterable[Lesson],
    now: datetime,
    settings: Optional[BillingSettings] = None
) -> AdjustmentSummary:
    """
    Derive adjustment lines from lessons of the month preceding the invoice.

    Args:
        prior_month_lessons: Lessons of the prior month for one student
        now: Reference time; lessons created after it are ignored
        settings: Billing constants (defaults to process configuration)

    Returns:
        AdjustmentSummary whose total is charges minus refunds

    Examples:
        >>> summary = resolve_adjustments(march_lessons, datetime(2024, 3, 25))
        >>> for line in summary.details:
        ...     print(line.date, line.reason, line.signed_amount)
    """
    now = normalize_now(now)
    details: List[AdjustmentDetail] = []
    warnings: List[str] = []

    for lesson in prior_month_lessons:
        if not _existed_at(lesson, now):
            logger.debug(f"Skipping lesson {lesson.id}: created after reference time")
            continue

        on_time = was_invoiced_on_time(lesson, settings)

        if not lesson.is_cancelled:
            if not on_time and lesson.billable_amount > 0:
                details.append(AdjustmentDetail(
                    date=lesson.date,
                    lesson_id=lesson.id,
                    reason=REASON_ADDED_LESSON,
                    amount=lesson.billable_amount,
                    type=AdjustmentType.CHARGE,
                ))
            continue

        if not on_time:
            # Added and cancelled after the invoice was fixed: never charged.
            continue

        line = _cancellation_line(lesson, warnings)
        if line is not None:
            details.append(line)

    details.sort(key=lambda d: (d.date, d.lesson_id))

    added = sum(d.amount for d in details if d.type == AdjustmentType.CHARGE)
    refunded = sum(d.amount for d in details if d.type == AdjustmentType.REFUND)

    logger.debug(
        f"Resolved {len(details)} adjustment lines: +{added} / -{refunded}"
    )

    return AdjustmentSummary(
        added_lessons_fee=added,
        cancellation_refund=refunded,
        total=added - refunded,
        details=tuple(details),
        warnings=tuple(warnings),
    )
