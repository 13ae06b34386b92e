"""
Shared fixtures for unit tests.
"""

import sys
from datetime import date, datetime
from pathlib import Path

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from tutor_billing.ledger.memory import InMemoryCreditRepository
from tutor_billing.ledger.makeup_credits import MakeupCreditLedger
from tutor_billing.models.lesson import (
    Approved,
    CancellationCause,
    Lesson,
    LessonStatus,
    NotRequested,
)
from tutor_billing.utils.config import BillingSettings


@pytest.fixture
def settings():
    """Default billing constants (20th / 25th / one month)."""
    return BillingSettings()


@pytest.fixture
def make_lesson():
    """Factory for lessons with sensible defaults."""
    counter = {"n": 0}

    def factory(
        lesson_date,
        fee=4000,
        transport_fee=900,
        status=LessonStatus.PLANNED,
        is_makeup=False,
        hours=2,
        created_at=None,
        caused_by=None,
        lesson_id=None,
        student_id="student_1",
        start_time="17:00",
        end_time="19:00",
    ):
        counter["n"] += 1
        if isinstance(lesson_date, str):
            lesson_date = date.fromisoformat(lesson_date)

        cancellation = NotRequested()
        if status == LessonStatus.CANCELLED and caused_by is not None:
            cancellation = Approved(
                processed_at=datetime.combine(lesson_date, datetime.min.time()),
                caused_by=caused_by,
                reason="体調不良" if caused_by == CancellationCause.STUDENT else "先生の都合",
            )

        return Lesson(
            id=lesson_id or f"lesson_{counter['n']:03d}",
            student_id=student_id,
            date=lesson_date,
            start_time=start_time,
            end_time=end_time,
            hours=hours,
            fee=fee,
            transport_fee=transport_fee,
            status=status,
            is_makeup=is_makeup,
            cancellation=cancellation,
            created_at=created_at,
        )

    return factory


@pytest.fixture
def credit_repository():
    return InMemoryCreditRepository()


@pytest.fixture
def ledger(credit_repository, settings):
    """Makeup credit ledger over an in-memory repository."""
    return MakeupCreditLedger(credit_repository, settings)
