"""
Input validation for lesson and other-charge records.
"""

from .validators import Validator, ValidationResult
from .lesson_validator import LessonValidator
from .charge_validator import OtherChargeValidator

__all__ = [
    "Validator",
    "ValidationResult",
    "LessonValidator",
    "OtherChargeValidator",
]
