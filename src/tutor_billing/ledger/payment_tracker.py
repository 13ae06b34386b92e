"""
Payment status tracking.

Each (student, month) moves ``unpaid -> reported -> confirmed``. The
guardian reports a transfer, which snapshots the invoice total; the
teacher confirms receipt, which is terminal. Disputes are settled
outside the system and have no transition here.
"""

import logging
import uuid
from datetime import datetime
from typing import List, Union

from .interfaces import PaymentRepository
from ..billing.period import parse_year_month
from ..errors import PaymentTransitionError
from ..models.invoice import BillingInfo
from ..models.payment import MonthlyPayment, PaymentStatus, payment_status
from ..models.result import Result


logger = logging.getLogger(__name__)


class PaymentStatusTracker:
    """
    Guardian-report / teacher-confirm workflow per student and month.

    Examples:
        >>> tracker = PaymentStatusTracker(InMemoryPaymentRepository())
        >>> tracker.report_payment("student_1", "2024-04", billing_info, now)
        >>> tracker.status("student_1", "2024-04")
        <PaymentStatus.REPORTED: 'reported'>
    """

    def __init__(self, repository: PaymentRepository):
        self.repository = repository

    def status(self, student_id: str, year_month: str) -> PaymentStatus:
        """Current status; months without a record are unpaid."""
        return payment_status(self.repository.get(student_id, year_month))

    def report_payment(
        self,
        student_id: str,
        year_month: str,
        invoice: Union[BillingInfo, int],
        now: datetime
    ) -> Result[MonthlyPayment]:
        """
        Record that the guardian transferred the invoice amount.

        The total is frozen at report time; later changes to the invoice
        do not alter it. Reporting a month that is already reported keeps
        the original snapshot and succeeds.

        Args:
            student_id: Student identifier
            year_month: Billing month (YYYY-MM)
            invoice: Computed invoice, or its grand total
            now: Report time

        Returns:
            Result with the updated record; failure if already confirmed
        """
        parse_year_month(year_month)
        amount = invoice.grand_total if isinstance(invoice, BillingInfo) else int(invoice)

        payment = self.repository.get(student_id, year_month)
        current = payment_status(payment)

        if current == PaymentStatus.CONFIRMED:
            error = PaymentTransitionError(current.value, "report", "payment already confirmed")
            logger.warning(f"{error} (student {student_id}, {year_month})")
            return Result.failure(str(error), error)

        if current == PaymentStatus.REPORTED:
            logger.debug(f"Payment for {student_id} {year_month} already reported")
            return Result.success(payment, "Payment already reported")

        if payment is None:
            payment = MonthlyPayment(
                id=str(uuid.uuid4()),
                student_id=student_id,
                year_month=year_month,
                total_amount=amount,
            )
        else:
            payment.total_amount = amount
        payment.payment_reported_at = now

        try:
            self.repository.save(payment)
        except Exception as e:
            logger.error(f"Failed to save payment report: {e}", exc_info=True)
            return Result.failure("Failed to save payment report", e)

        logger.info(f"Payment reported for student {student_id} {year_month}: {amount} yen")
        return Result.success(payment, "Payment reported")

    def confirm_payment(
        self,
        student_id: str,
        year_month: str,
        now: datetime
    ) -> Result[MonthlyPayment]:
        """
        Record that the teacher verified the transfer.

        Returns:
            Result with the confirmed record; failure unless currently reported
        """
        payment = self.repository.get(student_id, year_month)
        current = payment_status(payment)

        if current != PaymentStatus.REPORTED:
            detail = (
                "payment already confirmed" if current == PaymentStatus.CONFIRMED
                else "payment has not been reported"
            )
            error = PaymentTransitionError(current.value, "confirm", detail)
            logger.warning(f"{error} (student {student_id}, {year_month})")
            return Result.failure(str(error), error)

        payment.payment_confirmed_at = now

        try:
            self.repository.save(payment)
        except Exception as e:
            logger.error(f"Failed to save payment confirmation: {e}", exc_info=True)
            return Result.failure("Failed to save payment confirmation", e)

        logger.info(f"Payment confirmed for student {student_id} {year_month}")
        return Result.success(payment, "Payment confirmed")

    def pending_confirmations(self) -> List[MonthlyPayment]:
        """Reported but unconfirmed payments, most recent report first."""
        pending = [
            p for p in self.repository.list_all()
            if payment_status(p) == PaymentStatus.REPORTED
        ]
        pending.sort(key=lambda p: (p.payment_reported_at, p.id), reverse=True)
        return pending
