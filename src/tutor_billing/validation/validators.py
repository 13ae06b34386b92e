"""
Validation framework with Strategy pattern.

This module provides:
- Abstract Validator interface
- ValidationResult for consistent validation reporting
- Field checks shared by the lesson and other-charge validators
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date
from typing import Any, List, Optional


@dataclass
class ValidationResult:
    """
    Result of data validation.

    Attributes:
        is_valid: Whether validation passed
        errors: List of error messages
        warnings: List of warning messages (non-fatal)
    """

    is_valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def add_error(self, message: str) -> 'ValidationResult':
        """
        Add an error message.

        Returns:
            Self for method chaining
        """
        self.errors.append(message)
        self.is_valid = False
        return self

    def add_warning(self, message: str) -> 'ValidationResult':
        """
        Add a warning message.

        Returns:
            Self for method chaining
        """
        self.warnings.append(message)
        return self

    @property
    def has_errors(self) -> bool:
        """Check if there are errors."""
        return len(self.errors) > 0

    @property
    def has_warnings(self) -> bool:
        """Check if there are warnings."""
        return len(self.warnings) > 0

    def get_summary(self) -> str:
        """
        Get validation summary.

        Returns:
            Human-readable summary of validation results
        """
        if self.is_valid and not self.has_warnings:
            return "Validation passed"

        parts = []

        if self.has_errors:
            parts.append(f"Errors ({len(self.errors)}):")
            for error in self.errors:
                parts.append(f"  - {error}")

        if self.has_warnings:
            parts.append(f"Warnings ({len(self.warnings)}):")
            for warning in self.warnings:
                parts.append(f"  - {warning}")

        return "\n".join(parts)


class Validator(ABC):
    """
    Abstract base class for validators.

    Subclasses implement ``validate()`` for one record type and reuse the
    field checks below, each of which returns an error message or None.
    """

    @abstractmethod
    def validate(self, data: Any) -> ValidationResult:
        """
        Validate data.

        Args:
            data: Data to validate

        Returns:
            ValidationResult with errors and warnings
        """
        pass

    def validate_required_fields(
        self,
        data: dict,
        required_fields: List[str]
    ) -> List[str]:
        """
        Validate that required fields exist.

        Returns:
            List of error messages for missing fields
        """
        errors = []
        for name in required_fields:
            if name not in data or data[name] is None:
                errors.append(f"Missing required field: {name}")
        return errors

    def validate_date_format(
        self,
        date_str: Any,
        field_name: str = "date"
    ) -> Optional[str]:
        """
        Validate a calendar date in YYYY-MM-DD format.

        Rejects impossible dates such as 2024-02-30.
        """
        if not isinstance(date_str, str) or not re.match(r'^\d{4}-\d{2}-\d{2}$', date_str):
            return f"Invalid {field_name} format: {date_str} (expected YYYY-MM-DD)"
        try:
            date.fromisoformat(date_str)
        except ValueError:
            return f"Invalid {field_name}: {date_str} is not a calendar date"
        return None

    def validate_year_month_format(
        self,
        value: Any,
        field_name: str = "year_month"
    ) -> Optional[str]:
        """Validate a month in YYYY-MM format."""
        if not isinstance(value, str) or not re.match(r'^\d{4}-(0[1-9]|1[0-2])$', value):
            return f"Invalid {field_name} format: {value} (expected YYYY-MM)"
        return None

    def validate_time_format(
        self,
        value: Any,
        field_name: str
    ) -> Optional[str]:
        """Validate a time of day in HH:MM or HH:MM:SS format."""
        pattern = r'^([01]\d|2[0-3]):[0-5]\d(:[0-5]\d)?$'
        if not isinstance(value, str) or not re.match(pattern, value):
            return f"Invalid {field_name} format: {value} (expected HH:MM)"
        return None

    def validate_positive_number(
        self,
        value: Any,
        field_name: str
    ) -> Optional[str]:
        """Validate that value is a positive number."""
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return f"{field_name} must be a number, got {type(value).__name__}"

        if value <= 0:
            return f"{field_name} must be positive, got {value}"

        return None

    def validate_yen_amount(
        self,
        value: Any,
        field_name: str,
        allow_negative: bool = False
    ) -> Optional[str]:
        """
        Validate a yen amount (integer, non-negative unless allowed).
        """
        if isinstance(value, bool) or not isinstance(value, int):
            return f"{field_name} must be an integer yen amount, got {type(value).__name__}"

        if not allow_negative and value < 0:
            return f"{field_name} must not be negative, got {value}"

        return None

    def validate_string_length(
        self,
        value: Any,
        field_name: str,
        min_length: Optional[int] = None,
        max_length: Optional[int] = None
    ) -> Optional[str]:
        """Validate string length."""
        if not isinstance(value, str):
            return f"{field_name} must be a string, got {type(value).__name__}"

        length = len(value)

        if min_length is not None and length < min_length:
            return f"{field_name} must be at least {min_length} characters, got {length}"

        if max_length is not None and length > max_length:
            return f"{field_name} must be at most {max_length} characters, got {length}"

        return None
