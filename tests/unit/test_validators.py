"""
Unit tests for validators.
"""

import pytest

from tutor_billing.validation.charge_validator import OtherChargeValidator
from tutor_billing.validation.lesson_validator import LessonValidator
from tutor_billing.validation.validators import ValidationResult


class TestValidationResult:
    """Test cases for ValidationResult."""

    def test_add_error(self):
        result = ValidationResult(is_valid=True)

        result.add_error("Test error")

        assert not result.is_valid
        assert result.has_errors
        assert result.errors == ["Test error"]

    def test_add_warning_keeps_valid(self):
        result = ValidationResult(is_valid=True)

        result.add_warning("Test warning")

        assert result.is_valid
        assert result.has_warnings

    def test_summary(self):
        assert ValidationResult(is_valid=True).get_summary() == "Validation passed"

        result = ValidationResult(is_valid=True).add_error("E1").add_warning("W1")
        summary = result.get_summary()

        assert "Errors (1)" in summary
        assert "Warnings (1)" in summary


@pytest.fixture
def lesson_record():
    return {
        "id": "lesson_001",
        "student_id": "student_789",
        "date": "2024-04-10",
        "start_time": "17:00",
        "end_time": "19:00",
        "hours": 2,
        "amount": 4000,
        "transport_fee": 900,
        "status": "planned",
        "is_makeup": False,
    }


class TestLessonValidator:
    """Test cases for LessonValidator."""

    def test_valid_lesson(self, lesson_record):
        result = LessonValidator().validate(lesson_record)

        assert result.is_valid
        assert not result.has_warnings

    def test_missing_fields(self, lesson_record):
        del lesson_record["amount"]
        lesson_record["date"] = None

        result = LessonValidator().validate(lesson_record)

        assert not result.is_valid
        assert len(result.errors) == 2

    @pytest.mark.parametrize("field,value", [
        ("date", "2024-02-30"),
        ("date", "2024/04/10"),
        ("start_time", "25:00"),
        ("end_time", "16:00"),
        ("hours", 0),
        ("amount", 4000.5),
        ("amount", -1),
        ("transport_fee", "900"),
        ("status", "postponed"),
        ("cancellation_cause", "weather"),
    ])
    def test_invalid_values(self, lesson_record, field, value):
        lesson_record[field] = value

        result = LessonValidator().validate(lesson_record)

        assert not result.is_valid

    def test_long_lesson_warning(self, lesson_record):
        lesson_record["hours"] = 6

        result = LessonValidator().validate(lesson_record)

        assert result.is_valid
        assert result.has_warnings

    def test_makeup_with_fee_warning(self, lesson_record):
        lesson_record["is_makeup"] = True

        result = LessonValidator().validate(lesson_record)

        assert result.is_valid
        assert any("Makeup lesson" in w for w in result.warnings)

    def test_cancelled_without_cause_warning(self, lesson_record):
        lesson_record["status"] = "cancelled"

        result = LessonValidator().validate(lesson_record)

        assert result.is_valid
        assert any("cancellation_cause" in w for w in result.warnings)

    def test_cancelled_with_cause(self, lesson_record):
        lesson_record["status"] = "cancelled"
        lesson_record["cancellation_cause"] = "teacher"

        result = LessonValidator().validate(lesson_record)

        assert result.is_valid
        assert not result.has_warnings


class TestOtherChargeValidator:
    """Test cases for OtherChargeValidator."""

    def test_valid_charge(self):
        result = OtherChargeValidator().validate({
            "student_id": "student_789",
            "year_month": "2024-04",
            "description": "当日キャンセル料",
            "amount": 2000,
            "charge_date": "2024-04-12",
        })

        assert result.is_valid

    def test_large_amount_warning(self):
        result = OtherChargeValidator().validate({
            "student_id": "student_789",
            "year_month": "2024-04",
            "description": "年間教材費",
            "amount": 120000,
        })

        assert result.is_valid
        assert result.has_warnings

    def test_bool_amount_rejected(self):
        result = OtherChargeValidator().validate({
            "student_id": "student_789",
            "year_month": "2024-04",
            "description": "教材費",
            "amount": True,
        })

        assert not result.is_valid

    def test_invalid_charge_date(self):
        result = OtherChargeValidator().validate({
            "student_id": "student_789",
            "year_month": "2024-04",
            "description": "教材費",
            "amount": 1500,
            "charge_date": "2024-04-31",
        })

        assert not result.is_valid
