"""
Lesson record validator.

Validates lesson rows from the record store before they are billed.
"""

from typing import Dict, Any

from .validators import Validator, ValidationResult
from ..models.lesson import CancellationCause, LessonStatus


class LessonValidator(Validator):
    """
    Validator for lesson records.

    Validates:
    - Required fields
    - Date and time formats
    - Status and cancellation cause values
    - Amounts (integer yen, non-negative)
    - Business rules (duration, makeup fee, cancellation cause)

    Examples:
        >>> validator = LessonValidator()
        >>> lesson = {
        ...     "id": "lesson_001",
        ...     "student_id": "student_789",
        ...     "date": "2024-04-10",
        ...     "start_time": "17:00",
        ...     "end_time": "19:00",
        ...     "hours": 2,
        ...     "amount": 4000,
        ...     "transport_fee": 900,
        ...     "status": "planned",
        ...     "is_makeup": False
        ... }
        >>> result = validator.validate(lesson)
        >>> result.is_valid
        True
    """

    VALID_STATUSES = [s.value for s in LessonStatus]
    VALID_CAUSES = [c.value for c in CancellationCause]

    # Business rule constraints
    MAX_HOURS = 5

    def validate(self, data: Dict[str, Any]) -> ValidationResult:
        """
        Validate a lesson record.

        Args:
            data: Lesson record dictionary

        Returns:
            ValidationResult with errors and warnings
        """
        result = ValidationResult(is_valid=True)

        required_fields = [
            "id",
            "student_id",
            "date",
            "start_time",
            "end_time",
            "hours",
            "amount",
            "status",
        ]

        for error in self.validate_required_fields(data, required_fields):
            result.add_error(error)

        if not result.is_valid:
            return result

        for name in ("id", "student_id"):
            error = self.validate_string_length(data[name], name, min_length=1, max_length=100)
            if error:
                result.add_error(error)

        error = self.validate_date_format(data["date"], "date")
        if error:
            result.add_error(error)

        for name in ("start_time", "end_time"):
            error = self.validate_time_format(data[name], name)
            if error:
                result.add_error(error)

        if not result.has_errors and data["start_time"][:5] >= data["end_time"][:5]:
            result.add_error(
                f"end_time {data['end_time']} must be after start_time {data['start_time']}"
            )

        error = self.validate_positive_number(data["hours"], "hours")
        if error:
            result.add_error(error)
        elif data["hours"] > self.MAX_HOURS:
            result.add_warning(
                f"Lesson unusually long: {data['hours']} hours "
                f"(maximum recommended: {self.MAX_HOURS})"
            )

        error = self.validate_yen_amount(data["amount"], "amount")
        if error:
            result.add_error(error)

        error = self.validate_yen_amount(data.get("transport_fee", 0), "transport_fee")
        if error:
            result.add_error(error)

        status = data["status"]
        if status not in self.VALID_STATUSES:
            result.add_error(
                f"Invalid status: {status} "
                f"(must be one of: {', '.join(self.VALID_STATUSES)})"
            )

        cause = data.get("cancellation_cause")
        if cause is not None and cause not in self.VALID_CAUSES:
            result.add_error(
                f"Invalid cancellation_cause: {cause} "
                f"(must be one of: {', '.join(self.VALID_CAUSES)})"
            )

        is_makeup = bool(data.get("is_makeup", False))

        if is_makeup and data["amount"]:
            result.add_warning(
                f"Makeup lesson {data['id']} has fee {data['amount']}; it will be billed as 0"
            )

        if status == LessonStatus.CANCELLED.value and not is_makeup and cause is None:
            result.add_warning(
                f"Cancelled lesson {data['id']} has no cancellation_cause; "
                f"it will be left out of refunds"
            )

        return result
