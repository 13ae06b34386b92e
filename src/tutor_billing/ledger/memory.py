"""
In-memory repositories.

Used by tests and the command-line tool. Every repository guards its
rows with an ``RLock`` and returns detached copies.
"""

import logging
from dataclasses import replace
from threading import RLock
from typing import Dict, Iterable, List, Optional, Tuple

from .interfaces import CreditRepository, OtherChargeRepository, PaymentRepository
from ..models.credit import MakeupCredit
from ..models.invoice import OtherCharge
from ..models.payment import MonthlyPayment


logger = logging.getLogger(__name__)


class InMemoryCreditRepository(CreditRepository):
    """
    Makeup credits held in a dict keyed by credit id.

    Examples:
        >>> repo = InMemoryCreditRepository()
        >>> ledger = MakeupCreditLedger(repo)
    """

    def __init__(self, credits: Iterable[MakeupCredit] = ()):
        self._lock = RLock()
        self._rows: Dict[str, MakeupCredit] = {}
        for credit in credits:
            self.add(credit)

    def add(self, credit: MakeupCredit) -> None:
        with self._lock:
            if credit.id in self._rows:
                raise KeyError(f"Makeup credit already exists: {credit.id}")
            self._rows[credit.id] = replace(credit)

    def get(self, credit_id: str) -> Optional[MakeupCredit]:
        with self._lock:
            row = self._rows.get(credit_id)
            return replace(row) if row else None

    def list_for_student(self, student_id: str) -> List[MakeupCredit]:
        with self._lock:
            return [replace(c) for c in self._rows.values() if c.student_id == student_id]

    def save_all(self, credits: Iterable[MakeupCredit]) -> None:
        batch = [replace(c) for c in credits]
        with self._lock:
            missing = [c.id for c in batch if c.id not in self._rows]
            if missing:
                raise KeyError(f"Unknown makeup credits: {', '.join(missing)}")
            for credit in batch:
                self._rows[credit.id] = credit
        logger.debug(f"Saved {len(batch)} makeup credits")


class InMemoryPaymentRepository(PaymentRepository):
    """Monthly payments keyed by (student id, year-month)."""

    def __init__(self, payments: Iterable[MonthlyPayment] = ()):
        self._lock = RLock()
        self._rows: Dict[Tuple[str, str], MonthlyPayment] = {}
        for payment in payments:
            self.save(payment)

    def get(self, student_id: str, year_month: str) -> Optional[MonthlyPayment]:
        with self._lock:
            row = self._rows.get((student_id, year_month))
            return replace(row) if row else None

    def save(self, payment: MonthlyPayment) -> None:
        with self._lock:
            self._rows[(payment.student_id, payment.year_month)] = replace(payment)

    def list_all(self) -> List[MonthlyPayment]:
        with self._lock:
            return [replace(p) for p in self._rows.values()]


class InMemoryOtherChargeRepository(OtherChargeRepository):
    """Other charges keyed by charge id."""

    def __init__(self, charges: Iterable[OtherCharge] = ()):
        self._lock = RLock()
        self._rows: Dict[str, OtherCharge] = {}
        for charge in charges:
            self.add(charge)

    def add(self, charge: OtherCharge) -> None:
        with self._lock:
            if charge.id in self._rows:
                raise KeyError(f"Other charge already exists: {charge.id}")
            self._rows[charge.id] = charge

    def delete(self, charge_id: str) -> bool:
        with self._lock:
            return self._rows.pop(charge_id, None) is not None

    def list_for(self, student_id: str, year_month: str) -> List[OtherCharge]:
        with self._lock:
            return [
                c for c in self._rows.values()
                if c.student_id == student_id and c.year_month == year_month
            ]
