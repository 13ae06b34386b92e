"""
Billing and makeup-credit ledger engine for a private tutoring practice.

Usage:
    >>> from tutor_billing.billing import calculate_billing_info
    >>> from tutor_billing.ledger import MakeupCreditLedger, InMemoryCreditRepository
"""

__version__ = "0.1.0"
