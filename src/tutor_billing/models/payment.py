"""
Monthly payment models.

One settlement record exists per (student, year-month) once the guardian
reports a payment. Status is derived from which timestamps are set.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from .fields import parse_timestamp, format_timestamp


class PaymentStatus(Enum):
    """Settlement state of a monthly invoice."""
    UNPAID = "unpaid"
    REPORTED = "reported"
    CONFIRMED = "confirmed"


@dataclass
class MonthlyPayment:
    """
    Settlement record for one student and month.

    Attributes:
        id: Record identifier
        student_id: Student identifier
        year_month: Billing month (YYYY-MM format)
        total_amount: Invoice total snapshotted when the guardian reported payment
        payment_reported_at: When the guardian reported the transfer
        payment_confirmed_at: When the teacher confirmed receipt
    """

    id: str
    student_id: str
    year_month: str
    total_amount: int
    payment_reported_at: Optional[datetime] = None
    payment_confirmed_at: Optional[datetime] = None

    @property
    def status(self) -> PaymentStatus:
        return payment_status(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'MonthlyPayment':
        return cls(
            id=str(d["id"]),
            student_id=str(d["student_id"]),
            year_month=d["year_month"],
            total_amount=int(d.get("total_amount") or 0),
            payment_reported_at=parse_timestamp(d.get("payment_reported_at")),
            payment_confirmed_at=parse_timestamp(d.get("payment_confirmed_at")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "student_id": self.student_id,
            "year_month": self.year_month,
            "total_amount": self.total_amount,
            "payment_reported_at": format_timestamp(self.payment_reported_at),
            "payment_confirmed_at": format_timestamp(self.payment_confirmed_at),
            "status": self.status.value,
        }


def payment_status(payment: Optional[MonthlyPayment]) -> PaymentStatus:
    """
    Derive the payment status of a record.

    Args:
        payment: Settlement record, or None if none exists yet

    Returns:
        CONFIRMED if confirmed, REPORTED if only reported, otherwise UNPAID
    """
    if payment is None:
        return PaymentStatus.UNPAID
    if payment.payment_confirmed_at:
        return PaymentStatus.CONFIRMED
    if payment.payment_reported_at:
        return PaymentStatus.REPORTED
    return PaymentStatus.UNPAID
