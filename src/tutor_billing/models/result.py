"""
Result<T> pattern for ledger and workflow operations.

Business failures such as an insufficient makeup balance or an illegal
payment transition are returned as a failed Result instead of being
raised, so a caller that already opened a booking transaction decides
for itself whether to abort it.
"""

from dataclasses import dataclass
from typing import Optional, Generic, TypeVar, Callable, Type
from enum import Enum


T = TypeVar('T')
U = TypeVar('U')


class ResultStatus(Enum):
    """Status of a Result."""
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass
class Result(Generic[T]):
    """
    Outcome of an operation that may fail for an expected reason.

    Attributes:
        status: Result status (SUCCESS or FAILURE)
        value: Produced value if successful (None on failure)
        error: Typed error describing the failure (None on success)
        message: Human-readable message

    Examples:
        >>> result = ledger.consume("student_1", 60, now)
        >>> if result.is_failure and result.error_is(InsufficientCreditError):
        ...     print("残りの振替時間が足りません")
    """

    status: ResultStatus
    value: Optional[T] = None
    error: Optional[Exception] = None
    message: Optional[str] = None

    @property
    def is_success(self) -> bool:
        """Check if the result represents success."""
        return self.status == ResultStatus.SUCCESS

    @property
    def is_failure(self) -> bool:
        """Check if the result represents failure."""
        return self.status == ResultStatus.FAILURE

    @classmethod
    def success(cls, value: T, message: Optional[str] = None) -> 'Result[T]':
        """
        Create a successful result.

        Args:
            value: The produced value
            message: Optional success message

        Returns:
            Result instance with SUCCESS status
        """
        return cls(status=ResultStatus.SUCCESS, value=value, message=message)

    @classmethod
    def failure(
        cls,
        message: str,
        error: Optional[Exception] = None
    ) -> 'Result[T]':
        """
        Create a failure result.

        Args:
            message: Message describing the failure
            error: Optional typed error carrying failure details

        Returns:
            Result instance with FAILURE status
        """
        return cls(status=ResultStatus.FAILURE, message=message, error=error)

    def error_is(self, error_type: Type[Exception]) -> bool:
        """Check whether this is a failure caused by the given error type."""
        return self.is_failure and isinstance(self.error, error_type)

    def unwrap(self) -> T:
        """
        Unwrap the result value.

        Returns:
            The value if successful

        Raises:
            ValueError: If the result is a failure
        """
        if self.is_failure:
            raise ValueError(f"Cannot unwrap failure result: {self.message}")
        return self.value

    def unwrap_or(self, default: T) -> T:
        """Return the value if successful, otherwise ``default``."""
        return self.value if self.is_success else default

    def map(self, func: Callable[[T], U]) -> 'Result[U]':
        """
        Map a function over the success value.

        Args:
            func: Function to apply to the value (T -> U)

        Returns:
            New Result with mapped value if success, the same failure otherwise
        """
        if self.is_failure:
            return Result.failure(self.message, self.error)

        try:
            return Result.success(func(self.value), self.message)
        except Exception as e:
            return Result.failure(str(e), e)

    def and_then(self, func: Callable[[T], 'Result[U]']) -> 'Result[U]':
        """
        Chain another Result-returning step after a success.

        Examples:
            >>> tracker.report_payment(...).and_then(
            ...     lambda p: tracker.confirm_payment(p.student_id, p.year_month, now)
            ... )
        """
        if self.is_failure:
            return Result.failure(self.message, self.error)
        return func(self.value)
