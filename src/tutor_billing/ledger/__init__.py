"""
Makeup credit ledger, payment tracking, other charges and the lesson
status workflow that drives them.
"""

from .interfaces import CreditRepository, PaymentRepository, OtherChargeRepository
from .memory import (
    InMemoryCreditRepository,
    InMemoryPaymentRepository,
    InMemoryOtherChargeRepository,
)
from .makeup_credits import MakeupCreditLedger
from .payment_tracker import PaymentStatusTracker
from .other_charges import OtherChargeBook

__all__ = [
    "CreditRepository",
    "PaymentRepository",
    "OtherChargeRepository",
    "InMemoryCreditRepository",
    "InMemoryPaymentRepository",
    "InMemoryOtherChargeRepository",
    "MakeupCreditLedger",
    "PaymentStatusTracker",
    "OtherChargeBook",
]
