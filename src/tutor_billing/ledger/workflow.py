"""
Lesson status workflow.

Cancellation requests and approvals, and makeup bookings. This is the
only code that writes to the makeup credit ledger: a credit is granted
when a student-caused cancellation of a regular lesson is approved, and
consumed when a makeup lesson is booked.
"""

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Optional

from .makeup_credits import MakeupCreditLedger
from .pricing import calculate_hours, hours_to_minutes
from ..errors import CancellationStateError
from ..models.credit import ConsumptionReceipt, MakeupCredit
from ..models.lesson import (
    Approved,
    CancellationCause,
    Lesson,
    LessonStatus,
    NotRequested,
    Pending,
    Rejected,
)
from ..models.result import Result


logger = logging.getLogger(__name__)


@dataclass
class CancellationOutcome:
    """Cancelled lesson and the makeup credit granted for it, if any."""

    lesson: Lesson
    credit: Optional[MakeupCredit] = None


@dataclass
class MakeupBooking:
    """Newly created makeup lesson and the credit consumption that paid for it."""

    lesson: Lesson
    receipt: ConsumptionReceipt


def _refuse(message: str) -> Result:
    error = CancellationStateError(message)
    logger.warning(message)
    return Result.failure(message, error)


def request_cancellation(
    lesson: Lesson,
    reason: Optional[str],
    now: datetime,
    caused_by: Optional[CancellationCause] = None
) -> Result[Lesson]:
    """
    Guardian asks to cancel a lesson.

    Returns:
        Result with the lesson in the pending state
    """
    if lesson.status != LessonStatus.PLANNED:
        return _refuse(f"Lesson {lesson.id} is {lesson.status.value}; cannot request cancellation")
    if isinstance(lesson.cancellation, Pending):
        return _refuse(f"Lesson {lesson.id} already has a pending cancellation request")

    updated = replace(
        lesson,
        cancellation=Pending(requested_at=now, reason=reason, caused_by=caused_by),
    )
    logger.info(f"Cancellation requested for lesson {lesson.id}")
    return Result.success(updated, "Cancellation requested")


def approve_cancellation(
    lesson: Lesson,
    caused_by: CancellationCause,
    now: datetime,
    ledger: MakeupCreditLedger,
    reason: Optional[str] = None
) -> Result[CancellationOutcome]:
    """
    Teacher cancels a lesson (directly or by approving a request).

    A student-caused cancellation of a regular lesson grants a makeup
    credit equal to the lesson's duration. Cancelling a makeup lesson
    never grants credit.

    Args:
        lesson: Lesson to cancel
        caused_by: Who caused the cancellation
        now: Processing time
        ledger: Makeup credit ledger
        reason: Display reason (defaults to the requested reason)

    Returns:
        Result with the cancelled lesson and any granted credit
    """
    if not isinstance(caused_by, CancellationCause):
        return _refuse(f"Cancellation of lesson {lesson.id} needs a cause, got {caused_by!r}")
    if lesson.status != LessonStatus.PLANNED:
        return _refuse(f"Lesson {lesson.id} is {lesson.status.value}; cannot cancel")

    requested_at = None
    if isinstance(lesson.cancellation, Pending):
        requested_at = lesson.cancellation.requested_at
        if reason is None:
            reason = lesson.cancellation.reason

    cancelled = replace(
        lesson,
        status=LessonStatus.CANCELLED,
        cancellation=Approved(
            processed_at=now,
            caused_by=caused_by,
            reason=reason,
            requested_at=requested_at,
        ),
    )

    credit = None
    if caused_by == CancellationCause.STUDENT and not lesson.is_makeup:
        if lesson.minutes <= 0:
            logger.warning(f"Lesson {lesson.id} has no duration; no makeup credit granted")
        else:
            try:
                credit = ledger.grant(
                    lesson.student_id, lesson.minutes, lesson.id, lesson.date, now
                )
            except Exception as e:
                logger.error(f"Failed to grant makeup credit for lesson {lesson.id}: {e}", exc_info=True)
                return Result.failure("Failed to grant makeup credit", e)

    logger.info(
        f"Lesson {lesson.id} cancelled ({caused_by.value}-caused, makeup={lesson.is_makeup})"
    )
    return Result.success(CancellationOutcome(lesson=cancelled, credit=credit), "Lesson cancelled")


def reject_cancellation(lesson: Lesson, now: datetime) -> Result[Lesson]:
    """Teacher declines a pending cancellation request."""
    if not isinstance(lesson.cancellation, Pending):
        return _refuse(f"Lesson {lesson.id} has no pending cancellation request")

    pending = lesson.cancellation
    updated = replace(
        lesson,
        cancellation=Rejected(
            processed_at=now,
            reason=pending.reason,
            requested_at=pending.requested_at,
        ),
    )
    logger.info(f"Cancellation request for lesson {lesson.id} rejected")
    return Result.success(updated, "Cancellation rejected")


def undo_cancellation(lesson: Lesson) -> Result[Lesson]:
    """
    Reinstate a cancelled lesson.

    The next invoice computation drops its refund line. A makeup credit
    already granted for it stays in the ledger and has to be settled by
    the operator.
    """
    if not lesson.is_cancelled:
        return _refuse(f"Lesson {lesson.id} is not cancelled")

    if lesson.caused_by == CancellationCause.STUDENT and not lesson.is_makeup:
        logger.warning(
            f"Cancellation of lesson {lesson.id} undone; "
            f"its makeup credit remains in the ledger"
        )

    updated = replace(lesson, status=LessonStatus.PLANNED, cancellation=NotRequested())
    logger.info(f"Cancellation of lesson {lesson.id} undone")
    return Result.success(updated, "Cancellation undone")


def book_makeup_lesson(
    lesson_id: str,
    student_id: str,
    lesson_date: date,
    start_time: str,
    end_time: str,
    transport_fee: int,
    ledger: MakeupCreditLedger,
    now: datetime
) -> Result[MakeupBooking]:
    """
    Approve a makeup request: spend credit, then create the lesson.

    The makeup lesson carries no fee; its transport fee is billed as
    usual.

    Returns:
        Result with the new lesson and the consumption receipt. When the
        balance is too low the failure carries InsufficientCreditError and
        no lesson is created.
    """
    try:
        hours = calculate_hours(start_time, end_time)
    except ValueError as e:
        return Result.failure(str(e), e)

    consumed = ledger.consume(student_id, hours_to_minutes(hours), now)
    if consumed.is_failure:
        return Result.failure(consumed.message, consumed.error)

    lesson = Lesson(
        id=lesson_id,
        student_id=student_id,
        date=lesson_date,
        start_time=start_time[:5],
        end_time=end_time[:5],
        hours=hours,
        fee=0,
        transport_fee=transport_fee,
        status=LessonStatus.PLANNED,
        is_makeup=True,
        created_at=now,
    )
    logger.info(f"Makeup lesson {lesson_id} booked for student {student_id} on {lesson_date}")
    return Result.success(MakeupBooking(lesson=lesson, receipt=consumed.value), "Makeup lesson booked")
