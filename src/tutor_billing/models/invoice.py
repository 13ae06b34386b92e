"""
Invoice data models.

This module provides the computed invoice (``BillingInfo``) together
with its prior-month adjustment lines and manually entered other charges.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from .fields import parse_date
from .lesson import Lesson
from .payment import PaymentStatus


class AdjustmentType(Enum):
    """Direction of a prior-month adjustment line."""
    CHARGE = "charge"
    REFUND = "refund"


@dataclass(frozen=True)
class OtherCharge:
    """
    Manually entered miscellaneous charge (e.g. cancellation penalty).

    Attributes:
        id: Charge identifier
        student_id: Student identifier
        year_month: Billing month the charge belongs to (YYYY-MM format)
        description: Text shown on the invoice
        amount: Amount in yen
        charge_date: Optional date the charge refers to
    """

    id: str
    student_id: str
    year_month: str
    description: str
    amount: int
    charge_date: Optional[date] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'OtherCharge':
        charge_date = d.get("charge_date")
        return cls(
            id=str(d["id"]),
            student_id=str(d["student_id"]),
            year_month=d["year_month"],
            description=d["description"],
            amount=int(d["amount"]),
            charge_date=parse_date(charge_date, "charge_date") if charge_date else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "student_id": self.student_id,
            "year_month": self.year_month,
            "description": self.description,
            "amount": self.amount,
            "charge_date": self.charge_date.isoformat() if self.charge_date else None,
        }


@dataclass(frozen=True)
class AdjustmentDetail:
    """
    One prior-month adjustment line.

    Attributes:
        date: Date of the lesson the line refers to
        lesson_id: Lesson the line refers to
        reason: Display text (e.g. "追加レッスン")
        amount: Positive magnitude in yen
        type: CHARGE adds to the invoice, REFUND subtracts from it
    """

    date: date
    lesson_id: str
    reason: str
    amount: int
    type: AdjustmentType

    @property
    def signed_amount(self) -> int:
        """Contribution to the adjustment total."""
        return self.amount if self.type == AdjustmentType.CHARGE else -self.amount

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "lesson_id": self.lesson_id,
            "reason": self.reason,
            "amount": self.amount,
            "type": self.type.value,
        }


@dataclass(frozen=True)
class AdjustmentSummary:
    """
    Prior-month adjustments ("②" on the invoice).

    Attributes:
        added_lessons_fee: Sum of late-added lesson charges
        cancellation_refund: Sum of cancellation refunds (positive magnitude)
        total: Signed total (charges minus refunds)
        details: Lines ordered by (date, lesson id)
        warnings: Data-integrity problems for records left out of the total
    """

    added_lessons_fee: int = 0
    cancellation_refund: int = 0
    total: int = 0
    details: Tuple[AdjustmentDetail, ...] = ()
    warnings: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "added_lessons_fee": self.added_lessons_fee,
            "cancellation_refund": self.cancellation_refund,
            "total": self.total,
            "details": [d.to_dict() for d in self.details],
            "warnings": list(self.warnings),
        }


@dataclass(frozen=True)
class OtherChargesSummary:
    """Other charges passed through onto the invoice."""

    items: Tuple[OtherCharge, ...] = ()
    total: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "items": [
                {
                    "id": c.id,
                    "charge_date": c.charge_date.isoformat() if c.charge_date else None,
                    "description": c.description,
                    "amount": c.amount,
                }
                for c in self.items
            ],
            "total": self.total,
        }


@dataclass(frozen=True)
class BillingInfo:
    """
    Computed invoice for one student and month.

    ``grand_total`` always equals ``lesson_fee_total + transport_fee_total
    + adjustments.total + other_charges.total``.

    Attributes:
        target_month: First day of the billing month
        lesson_count: Number of lessons in the prepayment section
        lesson_fee_total: Prepaid lesson fees
        transport_fee_total: Prepaid transport fees
        adjustments: Prior-month adjustments
        other_charges: Other charges for the month
        grand_total: Amount the guardian pays
        is_confirmed: Whether the confirmation date has passed
        confirmation_date: Date the invoice is fixed
        payment_due_date: Transfer deadline
        lessons: Lessons included in the prepayment section
        payment_status: Payment state recorded for the month
    """

    target_month: date
    lesson_count: int
    lesson_fee_total: int
    transport_fee_total: int
    adjustments: AdjustmentSummary
    other_charges: OtherChargesSummary
    grand_total: int
    is_confirmed: bool
    confirmation_date: date
    payment_due_date: date
    lessons: Tuple[Lesson, ...] = field(default=())
    payment_status: PaymentStatus = PaymentStatus.UNPAID

    @property
    def prepayment_total(self) -> int:
        """Prepayment section ("①"): lesson fees plus transport."""
        return self.lesson_fee_total + self.transport_fee_total

    @property
    def year_month(self) -> str:
        return self.target_month.strftime("%Y-%m")

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to dictionary format.

        Returns:
            Dictionary representation suitable for JSON export
        """
        return {
            "target_month": self.year_month,
            "lesson_count": self.lesson_count,
            "lesson_fee_total": self.lesson_fee_total,
            "transport_fee_total": self.transport_fee_total,
            "prepayment_total": self.prepayment_total,
            "adjustments": self.adjustments.to_dict(),
            "other_charges": self.other_charges.to_dict(),
            "grand_total": self.grand_total,
            "is_confirmed": self.is_confirmed,
            "confirmation_date": self.confirmation_date.isoformat(),
            "payment_due_date": self.payment_due_date.isoformat(),
            "payment_status": self.payment_status.value,
            "lessons": [
                {
                    "id": l.id,
                    "date": l.date.isoformat(),
                    "start_time": l.start_time,
                    "end_time": l.end_time,
                    "hours": l.hours,
                    "fee": l.billable_fee,
                    "transport_fee": l.transport_fee,
                    "is_makeup": l.is_makeup,
                }
                for l in self.lessons
            ],
        }
