"""
Unit tests for the prior-month adjustment resolver.
"""

from datetime import date, datetime, timedelta, timezone

from tutor_billing.billing.adjustments import (
    REASON_ADDED_LESSON,
    REASON_STUDENT_CANCELLATION,
    REASON_TEACHER_CANCELLATION,
    resolve_adjustments,
    was_invoiced_on_time,
)
from tutor_billing.models.invoice import AdjustmentType
from tutor_billing.models.lesson import Approved, CancellationCause, Lesson, LessonStatus, Pending


NOW = datetime(2024, 3, 25, 12, 0)
JST = timezone(timedelta(hours=9))


class TestCancellationRefunds:
    """Test cases for refund lines."""

    def test_student_cancellation_refunds_transport(self, make_lesson, settings):
        """Student-caused cancellation refunds transport only."""
        lesson = make_lesson("2024-03-15", fee=7000, transport_fee=500,
                             status=LessonStatus.CANCELLED,
                             caused_by=CancellationCause.STUDENT)

        summary = resolve_adjustments([lesson], NOW, settings)

        assert summary.cancellation_refund == 500
        assert summary.total == -500
        assert len(summary.details) == 1
        line = summary.details[0]
        assert line.reason == REASON_STUDENT_CANCELLATION
        assert line.amount == 500
        assert line.type == AdjustmentType.REFUND
        assert line.signed_amount == -500

    def test_teacher_cancellation_refunds_fee_and_transport(self, make_lesson, settings):
        lesson = make_lesson("2024-03-22", fee=3000, transport_fee=800,
                             status=LessonStatus.CANCELLED,
                             caused_by=CancellationCause.TEACHER)

        summary = resolve_adjustments([lesson], NOW, settings)

        assert summary.cancellation_refund == 3800
        assert summary.total == -3800
        assert summary.details[0].reason == REASON_TEACHER_CANCELLATION

    def test_student_cancellation_without_transport_has_no_line(self, make_lesson, settings):
        lesson = make_lesson("2024-03-15", transport_fee=0,
                             status=LessonStatus.CANCELLED,
                             caused_by=CancellationCause.STUDENT)

        summary = resolve_adjustments([lesson], NOW, settings)

        assert summary.details == ()
        assert summary.total == 0

    def test_cancelled_makeup_lesson_refunds_nothing(self, make_lesson, settings):
        """The makeup right is forfeited on cancellation."""
        for cause in CancellationCause:
            lesson = make_lesson("2024-03-15", fee=0, transport_fee=600, is_makeup=True,
                                 status=LessonStatus.CANCELLED, caused_by=cause)

            summary = resolve_adjustments([lesson], NOW, settings)

            assert summary.details == ()
            assert summary.warnings == ()

    def test_cancelled_without_cause_is_reported(self, make_lesson, settings):
        """Cancelled lessons lacking an approved cause produce a warning, not a line."""
        lesson = make_lesson("2024-03-15", status=LessonStatus.CANCELLED)
        lesson.cancellation = Pending(requested_at=datetime(2024, 3, 10), reason="発熱")

        summary = resolve_adjustments([lesson], NOW, settings)

        assert summary.details == ()
        assert summary.total == 0
        assert len(summary.warnings) == 1
        assert lesson.id in summary.warnings[0]

    def test_approved_without_cause_is_reported(self, make_lesson, settings):
        lesson = make_lesson("2024-03-15", status=LessonStatus.CANCELLED)
        lesson.cancellation = Approved(processed_at=datetime(2024, 3, 14), caused_by=None)

        summary = resolve_adjustments([lesson], NOW, settings)

        assert summary.details == ()
        assert len(summary.warnings) == 1
        assert "state: approved" in summary.warnings[0]

    def test_cause_recorded_without_timestamps(self, settings):
        """A teacher cancelling directly sets the status and cause only."""
        lesson = Lesson.from_dict({
            "id": "l1", "student_id": "student_1", "date": "2024-03-22",
            "start_time": "17:00", "end_time": "19:00", "hours": 2,
            "amount": 3000, "transport_fee": 800, "status": "cancelled",
            "cancellation_cause": "teacher",
        })

        summary = resolve_adjustments([lesson], NOW, settings)

        assert summary.total == -3800
        assert summary.details[0].reason == REASON_TEACHER_CANCELLATION
        assert summary.warnings == ()


class TestLateAdditions:
    """Test cases for lessons added after their month was invoiced."""

    def test_late_lesson_is_charged(self, make_lesson, settings):
        """A March lesson created after February 20th is charged in April."""
        lesson = make_lesson("2024-03-15", fee=4000, transport_fee=900,
                             created_at=datetime(2024, 3, 1, 10, 0))

        summary = resolve_adjustments([lesson], NOW, settings)

        assert summary.added_lessons_fee == 4900
        assert summary.total == 4900
        assert summary.details[0].reason == REASON_ADDED_LESSON
        assert summary.details[0].type == AdjustmentType.CHARGE

    def test_on_time_lesson_not_charged_again(self, make_lesson, settings):
        lesson = make_lesson("2024-03-15", created_at=datetime(2024, 2, 10))

        summary = resolve_adjustments([lesson], NOW, settings)

        assert summary.details == ()

    def test_late_makeup_lesson_charges_transport(self, make_lesson, settings):
        lesson = make_lesson("2024-03-15", fee=0, transport_fee=700, is_makeup=True,
                             created_at=datetime(2024, 3, 5))

        summary = resolve_adjustments([lesson], NOW, settings)

        assert summary.added_lessons_fee == 700

    def test_late_and_cancelled_is_ignored(self, make_lesson, settings):
        """Never invoiced, so nothing to refund."""
        lesson = make_lesson("2024-03-15", status=LessonStatus.CANCELLED,
                             caused_by=CancellationCause.TEACHER,
                             created_at=datetime(2024, 3, 1))

        summary = resolve_adjustments([lesson], NOW, settings)

        assert summary.details == ()
        assert summary.warnings == ()

    def test_done_late_lesson_is_charged(self, make_lesson, settings):
        lesson = make_lesson("2024-03-15", status=LessonStatus.DONE,
                             created_at=datetime(2024, 3, 1))

        summary = resolve_adjustments([lesson], NOW, settings)

        assert summary.added_lessons_fee == 4900

    def test_lesson_created_after_now_is_skipped(self, make_lesson, settings):
        lesson = make_lesson("2024-03-28", created_at=datetime(2024, 3, 26))

        summary = resolve_adjustments([lesson], NOW, settings)

        assert summary.details == ()

    def test_zoned_records_with_naive_now(self, make_lesson, settings):
        late = make_lesson("2024-03-15", created_at=datetime(2024, 3, 1, 10, 0, tzinfo=JST))
        future = make_lesson("2024-03-28", created_at=datetime(2024, 3, 26, tzinfo=JST))

        summary = resolve_adjustments([late, future], datetime(2024, 3, 25), settings)

        assert [d.lesson_id for d in summary.details] == [late.id]
        assert summary.added_lessons_fee == 4900

    def test_was_invoiced_on_time(self, make_lesson, settings):
        assert was_invoiced_on_time(make_lesson("2024-03-15"), settings)
        assert was_invoiced_on_time(
            make_lesson("2024-03-15", created_at=datetime(2024, 2, 20, 0, 0)), settings
        )
        assert not was_invoiced_on_time(
            make_lesson("2024-03-15", created_at=datetime(2024, 2, 20, 0, 1)), settings
        )


class TestOrderingAndTotals:
    """Test cases for line ordering and totals."""

    def test_lines_sorted_by_date_then_lesson(self, make_lesson, settings):
        lessons = [
            make_lesson("2024-03-22", lesson_id="l3", status=LessonStatus.CANCELLED,
                        caused_by=CancellationCause.TEACHER),
            make_lesson("2024-03-08", lesson_id="l2", created_at=datetime(2024, 3, 1)),
            make_lesson("2024-03-08", lesson_id="l1", status=LessonStatus.CANCELLED,
                        caused_by=CancellationCause.STUDENT),
        ]

        summary = resolve_adjustments(lessons, NOW, settings)

        assert [(d.date, d.lesson_id) for d in summary.details] == [
            (date(2024, 3, 8), "l1"),
            (date(2024, 3, 8), "l2"),
            (date(2024, 3, 22), "l3"),
        ]

    def test_total_is_charges_minus_refunds(self, make_lesson, settings):
        lessons = [
            make_lesson("2024-03-08", created_at=datetime(2024, 3, 1)),
            make_lesson("2024-03-22", fee=3000, transport_fee=800,
                        status=LessonStatus.CANCELLED, caused_by=CancellationCause.TEACHER),
        ]

        summary = resolve_adjustments(lessons, NOW, settings)

        assert summary.added_lessons_fee == 4900
        assert summary.cancellation_refund == 3800
        assert summary.total == 1100
        assert summary.total == sum(d.signed_amount for d in summary.details)

    def test_reinstated_lesson_drops_refund(self, make_lesson, settings):
        """Lines follow the lesson's current state on every call."""
        lesson = make_lesson("2024-03-15", status=LessonStatus.CANCELLED,
                             caused_by=CancellationCause.TEACHER)
        assert resolve_adjustments([lesson], NOW, settings).total == -4900

        reinstated = make_lesson("2024-03-15", lesson_id=lesson.id)

        assert resolve_adjustments([reinstated], NOW, settings).details == ()
