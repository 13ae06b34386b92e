"""
Exception types for the billing core.

Expected business failures (insufficient credit, illegal payment
transitions) travel inside a failed ``Result``; only malformed input
such as an invalid billing period is raised directly.
"""

from typing import Optional


class BillingError(Exception):
    """Base class for billing core errors."""
    pass


class InvalidPeriodError(BillingError, ValueError):
    """Raised when a target month or reference time is not a valid calendar value."""
    pass


class InsufficientCreditError(BillingError):
    """
    Makeup credit balance is lower than the minutes requested.

    Attributes:
        student_id: Student whose credits were checked
        minutes_needed: Minutes requested by the booking
        minutes_available: Available balance at the time of the check
    """

    def __init__(self, student_id: str, minutes_needed: int, minutes_available: int):
        self.student_id = student_id
        self.minutes_needed = minutes_needed
        self.minutes_available = minutes_available
        super().__init__(
            f"Insufficient makeup credit for student {student_id}: "
            f"needed {minutes_needed} min, available {minutes_available} min"
        )


class PaymentTransitionError(BillingError):
    """Payment status change not permitted from the current state."""

    def __init__(self, current: str, action: str, detail: Optional[str] = None):
        self.current = current
        self.action = action
        message = f"Cannot {action} payment in state '{current}'"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class CancellationStateError(BillingError):
    """Cancellation workflow step not permitted for the lesson's current state."""
    pass
