"""
Data models for the billing core.
"""

from .result import Result, ResultStatus
from .lesson import (
    Lesson,
    LessonRecord,
    LessonStatus,
    CancellationCause,
    Cancellation,
    NotRequested,
    Pending,
    Approved,
    Rejected,
)
from .credit import MakeupCredit, CreditAllocation, ConsumptionReceipt
from .payment import MonthlyPayment, PaymentStatus, payment_status
from .invoice import (
    AdjustmentType,
    AdjustmentDetail,
    AdjustmentSummary,
    OtherCharge,
    OtherChargesSummary,
    BillingInfo,
)

__all__ = [
    "Result",
    "ResultStatus",
    "Lesson",
    "LessonRecord",
    "LessonStatus",
    "CancellationCause",
    "Cancellation",
    "NotRequested",
    "Pending",
    "Approved",
    "Rejected",
    "MakeupCredit",
    "CreditAllocation",
    "ConsumptionReceipt",
    "MonthlyPayment",
    "PaymentStatus",
    "payment_status",
    "AdjustmentType",
    "AdjustmentDetail",
    "AdjustmentSummary",
    "OtherCharge",
    "OtherChargesSummary",
    "BillingInfo",
]
