"""
Other charge validator.

Validates manually entered charges before they are stored.
"""

from typing import Dict, Any

from .validators import Validator, ValidationResult


class OtherChargeValidator(Validator):
    """
    Validator for other charges.

    Validates:
    - Required fields
    - Month and optional charge date formats
    - Description length
    - Amount (non-zero integer yen; negative amounts are discounts)

    Examples:
        >>> validator = OtherChargeValidator()
        >>> charge = {
        ...     "student_id": "student_789",
        ...     "year_month": "2024-04",
        ...     "description": "当日キャンセル料",
        ...     "amount": 2000
        ... }
        >>> validator.validate(charge).is_valid
        True
    """

    MAX_DESCRIPTION_LENGTH = 200
    LARGE_AMOUNT = 100000  # yen

    def validate(self, data: Dict[str, Any]) -> ValidationResult:
        """
        Validate an other charge.

        Args:
            data: Charge dictionary

        Returns:
            ValidationResult with errors and warnings
        """
        result = ValidationResult(is_valid=True)

        required_fields = ["student_id", "year_month", "description", "amount"]

        for error in self.validate_required_fields(data, required_fields):
            result.add_error(error)

        if not result.is_valid:
            return result

        error = self.validate_year_month_format(data["year_month"])
        if error:
            result.add_error(error)

        error = self.validate_string_length(
            data["description"].strip() if isinstance(data["description"], str) else data["description"],
            "description",
            min_length=1,
            max_length=self.MAX_DESCRIPTION_LENGTH
        )
        if error:
            result.add_error(error)

        error = self.validate_yen_amount(data["amount"], "amount", allow_negative=True)
        if error:
            result.add_error(error)
        elif data["amount"] == 0:
            result.add_error("amount must not be zero")
        elif abs(data["amount"]) >= self.LARGE_AMOUNT:
            result.add_warning(f"Unusually large amount: {data['amount']} yen")

        charge_date = data.get("charge_date")
        if charge_date:
            error = self.validate_date_format(charge_date, "charge_date")
            if error:
                result.add_error(error)

        return result
