"""
Makeup credit ledger.

Credits are granted when a student-caused cancellation of a regular
lesson is approved, and consumed soonest-expiring first when a makeup
lesson is booked. Expiry is passive: every read filters on
``expires_at > now`` and nothing is ever deleted.
"""

import logging
import uuid
from datetime import date, datetime
from threading import Lock, RLock
from typing import Dict, List, Optional

from dateutil.relativedelta import relativedelta

from .interfaces import CreditRepository
from ..billing.period import start_of_day
from ..errors import InsufficientCreditError
from ..models.credit import ConsumptionReceipt, CreditAllocation, MakeupCredit
from ..models.fields import align_timestamp
from ..models.result import Result
from ..utils.config import BillingSettings, default_settings


logger = logging.getLogger(__name__)


class MakeupCreditLedger:
    """
    Append-only ledger of makeup credits.

    ``consume`` runs its read-check-write sequence under a per-student
    lock, so concurrent bookings for one student cannot spend the same
    minutes twice while bookings for different students never wait on
    each other. The lock covers callers sharing this ledger instance;
    a shared database backend additionally needs row locks in its
    ``CreditRepository.save_all``.

    The ledger does not deduplicate calls: granting or consuming twice
    for the same lesson must be prevented by the calling workflow.

    Examples:
        >>> ledger = MakeupCreditLedger(InMemoryCreditRepository())
        >>> ledger.grant("student_1", 120, "lesson_9", date(2024, 3, 15), datetime(2024, 3, 14))
        >>> ledger.available_balance("student_1", datetime(2024, 4, 1))
        120
        >>> result = ledger.consume("student_1", 60, datetime(2024, 4, 1))
        >>> result.value.minutes_consumed
        60
    """

    def __init__(
        self,
        repository: CreditRepository,
        settings: Optional[BillingSettings] = None
    ):
        """
        Initialize the ledger.

        Args:
            repository: Credit storage
            settings: Billing constants (defaults to process configuration)
        """
        self.repository = repository
        self.settings = settings if settings is not None else default_settings()
        self._registry_lock = Lock()
        self._student_locks: Dict[str, RLock] = {}

    def _lock_for(self, student_id: str) -> RLock:
        with self._registry_lock:
            lock = self._student_locks.get(student_id)
            if lock is None:
                lock = RLock()
                self._student_locks[student_id] = lock
            return lock

    def expiry_for(self, origin_date: date, now: Optional[datetime] = None) -> datetime:
        """
        Expiry instant for a credit from a lesson on ``origin_date``.

        Midnight of the same day ``makeup_validity_months`` later; month
        ends are clamped (Jan 31 expires on Feb 28/29).
        """
        if isinstance(origin_date, datetime):
            origin_date = origin_date.date()
        expiry_day = origin_date + relativedelta(months=self.settings.makeup_validity_months)
        return start_of_day(expiry_day, now)

    def grant(
        self,
        student_id: str,
        minutes: int,
        origin_lesson_id: Optional[str],
        origin_date: date,
        now: datetime
    ) -> MakeupCredit:
        """
        Grant a makeup credit.

        Args:
            student_id: Student receiving the credit
            minutes: Minutes banked (the cancelled lesson's duration)
            origin_lesson_id: Cancelled lesson
            origin_date: Date of the cancelled lesson
            now: Grant time, recorded as created_at; the expiry takes its tzinfo

        Returns:
            The stored credit

        Raises:
            ValueError: If minutes is not positive
        """
        if not isinstance(minutes, int) or minutes <= 0:
            raise ValueError(f"Makeup credit minutes must be a positive integer, got {minutes!r}")

        credit = MakeupCredit(
            id=str(uuid.uuid4()),
            student_id=student_id,
            total_minutes=minutes,
            expires_at=self.expiry_for(origin_date, now),
            origin_lesson_id=origin_lesson_id,
            created_at=now,
        )
        self.repository.add(credit)

        logger.info(
            f"Granted {minutes} min makeup credit to student {student_id} "
            f"(origin lesson {origin_lesson_id}, expires {credit.expires_at.isoformat()})"
        )
        return credit

    def available_credits(self, student_id: str, now: datetime) -> List[MakeupCredit]:
        """
        Usable credits ordered soonest-expiring first.

        Ties on expiry are ordered by credit id.
        """
        credits = [
            c for c in self.repository.list_for_student(student_id)
            if c.is_available(now)
        ]
        credits.sort(key=lambda c: (align_timestamp(c.expires_at, now), c.id))
        return credits

    def available_balance(self, student_id: str, now: datetime) -> int:
        """Sum of remaining minutes over usable credits."""
        return sum(c.total_minutes for c in self.available_credits(student_id, now))

    def nearest_expiration(self, student_id: str, now: datetime) -> Optional[datetime]:
        """Expiry of the soonest-expiring usable credit, if any."""
        credits = self.available_credits(student_id, now)
        return credits[0].expires_at if credits else None

    def consume(
        self,
        student_id: str,
        minutes_needed: int,
        now: datetime
    ) -> Result[ConsumptionReceipt]:
        """
        Deduct minutes from the student's credits, soonest-expiring first.

        The balance is checked before anything is changed; on success all
        decrements are written as one batch.

        Args:
            student_id: Student booking the makeup lesson
            minutes_needed: Duration of the makeup lesson in minutes
            now: Booking time

        Returns:
            Result with a ConsumptionReceipt on success. On failure the
            error is InsufficientCreditError (balance too low), ValueError
            (bad minutes) or the storage error; nothing has been written.
        """
        if not isinstance(minutes_needed, int) or minutes_needed <= 0:
            return Result.failure(
                f"Minutes to consume must be a positive integer, got {minutes_needed!r}",
                ValueError(minutes_needed)
            )

        with self._lock_for(student_id):
            credits = self.available_credits(student_id, now)
            balance = sum(c.total_minutes for c in credits)

            if balance < minutes_needed:
                error = InsufficientCreditError(student_id, minutes_needed, balance)
                logger.info(str(error))
                return Result.failure("Insufficient makeup credit balance", error)

            remaining = minutes_needed
            touched: List[MakeupCredit] = []
            allocations: List[CreditAllocation] = []

            for credit in credits:
                if remaining == 0:
                    break
                taken = min(credit.total_minutes, remaining)
                credit.total_minutes -= taken
                remaining -= taken
                touched.append(credit)
                allocations.append(CreditAllocation(
                    credit_id=credit.id,
                    minutes_taken=taken,
                    minutes_remaining=credit.total_minutes,
                ))

            try:
                self.repository.save_all(touched)
            except Exception as e:
                logger.error(
                    f"Failed to save makeup credit consumption for student {student_id}: {e}",
                    exc_info=True
                )
                return Result.failure("Failed to save makeup credit consumption", e)

        logger.info(
            f"Consumed {minutes_needed} min makeup credit for student {student_id} "
            f"across {len(allocations)} credit(s)"
        )
        return Result.success(
            ConsumptionReceipt(
                student_id=student_id,
                minutes_consumed=minutes_needed,
                allocations=allocations,
            ),
            "Makeup credit consumed"
        )
