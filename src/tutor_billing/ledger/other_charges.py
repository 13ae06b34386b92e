"""
Other charges entered by the teacher.

Charges are scoped to a student and billing month and appear unchanged
in the invoice's other-charges section.
"""

import logging
import uuid
from datetime import date
from typing import List, Optional

from .interfaces import OtherChargeRepository
from ..models.invoice import OtherCharge
from ..models.result import Result
from ..validation.charge_validator import OtherChargeValidator


logger = logging.getLogger(__name__)


class OtherChargeBook:
    """
    Create, delete and list other charges.

    Examples:
        >>> book = OtherChargeBook(InMemoryOtherChargeRepository())
        >>> book.add("student_1", "2024-04", "教材費", 1500)
        >>> [c.amount for c in book.for_month("student_1", "2024-04")]
        [1500]
    """

    def __init__(self, repository: OtherChargeRepository):
        self.repository = repository
        self.validator = OtherChargeValidator()

    def add(
        self,
        student_id: str,
        year_month: str,
        description: str,
        amount: int,
        charge_date: Optional[date] = None
    ) -> Result[OtherCharge]:
        """
        Validate and store a charge.

        Returns:
            Result with the stored charge; failure lists validation errors
        """
        record = {
            "student_id": student_id,
            "year_month": year_month,
            "description": description,
            "amount": amount,
            "charge_date": charge_date.isoformat() if charge_date else None,
        }
        validation = self.validator.validate(record)
        if not validation.is_valid:
            logger.warning(f"Rejected other charge for {student_id}: {validation.get_summary()}")
            return Result.failure(validation.get_summary(), ValueError(validation.errors))

        for warning in validation.warnings:
            logger.warning(warning)

        charge = OtherCharge(
            id=str(uuid.uuid4()),
            student_id=student_id,
            year_month=year_month,
            description=description.strip(),
            amount=amount,
            charge_date=charge_date,
        )

        try:
            self.repository.add(charge)
        except Exception as e:
            logger.error(f"Failed to save other charge: {e}", exc_info=True)
            return Result.failure("Failed to save other charge", e)

        logger.info(f"Added other charge {charge.id} for {student_id} {year_month}: {amount} yen")
        return Result.success(charge, "Other charge added")

    def delete(self, charge_id: str) -> bool:
        """Remove a charge; returns False if it did not exist."""
        removed = self.repository.delete(charge_id)
        if removed:
            logger.info(f"Deleted other charge {charge_id}")
        return removed

    def for_month(self, student_id: str, year_month: str) -> List[OtherCharge]:
        """Charges for a student and month, ordered by charge date then id."""
        charges = self.repository.list_for(student_id, year_month)
        charges.sort(key=lambda c: (c.charge_date or date.min, c.id))
        return charges
