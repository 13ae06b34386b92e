"""
Abstract repositories for ledger records.

The record store is owned by the surrounding application. These
interfaces are the only storage operations the ledger needs, which keeps
the core testable against the in-memory implementations.
"""

from abc import ABC, abstractmethod
from typing import Iterable, List, Optional

from ..models.credit import MakeupCredit
from ..models.invoice import OtherCharge
from ..models.payment import MonthlyPayment


class CreditRepository(ABC):
    """
    Storage for makeup credits.

    Implementations must apply ``save_all`` as one batch: either every
    credit in the batch is written or none is.
    """

    @abstractmethod
    def add(self, credit: MakeupCredit) -> None:
        """
        Insert a new credit.

        Args:
            credit: Credit to insert

        Raises:
            KeyError: If a credit with the same id already exists
        """
        pass

    @abstractmethod
    def get(self, credit_id: str) -> Optional[MakeupCredit]:
        """Fetch one credit by id."""
        pass

    @abstractmethod
    def list_for_student(self, student_id: str) -> List[MakeupCredit]:
        """
        All credits of a student, including exhausted and expired ones.

        Returns:
            Detached copies; mutating them does not change storage
        """
        pass

    @abstractmethod
    def save_all(self, credits: Iterable[MakeupCredit]) -> None:
        """
        Persist updated credits as a single batch.

        Raises:
            KeyError: If any credit does not exist (nothing is written)
        """
        pass


class PaymentRepository(ABC):
    """Storage for monthly payment records."""

    @abstractmethod
    def get(self, student_id: str, year_month: str) -> Optional[MonthlyPayment]:
        """Fetch the record for a student and month, if any."""
        pass

    @abstractmethod
    def save(self, payment: MonthlyPayment) -> None:
        """Insert or replace the record for the payment's student and month."""
        pass

    @abstractmethod
    def list_all(self) -> List[MonthlyPayment]:
        """All payment records."""
        pass


class OtherChargeRepository(ABC):
    """Storage for manually entered other charges."""

    @abstractmethod
    def add(self, charge: OtherCharge) -> None:
        pass

    @abstractmethod
    def delete(self, charge_id: str) -> bool:
        """
        Remove a charge.

        Returns:
            True if a charge was removed
        """
        pass

    @abstractmethod
    def list_for(self, student_id: str, year_month: str) -> List[OtherCharge]:
        pass
