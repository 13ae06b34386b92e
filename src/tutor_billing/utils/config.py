"""
Configuration management with environment variables.

This module provides centralized configuration for the billing core
with validation. The billing constants are bundled into an immutable
``BillingSettings`` value so tests can pass their own without touching
the environment.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from dotenv import load_dotenv


DEFAULT_CONFIRMATION_DAY = 20  # 請求確定日（前月20日）
DEFAULT_PAYMENT_DUE_DAY = 25   # 振込期限（当月25日）
DEFAULT_MAKEUP_VALIDITY_MONTHS = 1
DEFAULT_HOURLY_RATE = 3500     # yen per hour

# Days that exist in every month
MAX_FIXED_DAY = 28


@dataclass(frozen=True)
class BillingSettings:
    """
    Billing calendar and ledger constants.

    Attributes:
        confirmation_day: Day of the previous month on which an invoice is fixed
        payment_due_day: Day of the billing month by which payment is due
        makeup_validity_months: Calendar months a makeup credit stays usable

    Examples:
        >>> settings = BillingSettings(confirmation_day=15)
        >>> confirmation_date_for(date(2024, 1, 1), settings)
        datetime.date(2023, 12, 15)
    """

    confirmation_day: int = DEFAULT_CONFIRMATION_DAY
    payment_due_day: int = DEFAULT_PAYMENT_DUE_DAY
    makeup_validity_months: int = DEFAULT_MAKEUP_VALIDITY_MONTHS

    def __post_init__(self):
        errors = []
        if not 1 <= self.confirmation_day <= MAX_FIXED_DAY:
            errors.append(
                f"confirmation_day must be between 1 and {MAX_FIXED_DAY}, "
                f"got {self.confirmation_day}"
            )
        if not 1 <= self.payment_due_day <= MAX_FIXED_DAY:
            errors.append(
                f"payment_due_day must be between 1 and {MAX_FIXED_DAY}, "
                f"got {self.payment_due_day}"
            )
        if self.makeup_validity_months < 1:
            errors.append(
                f"makeup_validity_months must be positive, got {self.makeup_validity_months}"
            )
        if errors:
            raise ValueError("Invalid billing settings: " + "; ".join(errors))


class Config:
    """
    Application configuration manager.

    Loads configuration from environment variables and provides
    validated access to configuration values.

    Attributes:
        confirmation_day: BILLING_CONFIRMATION_DAY
        payment_due_day: PAYMENT_DUE_DAY
        makeup_validity_months: MAKEUP_CREDIT_VALIDITY_MONTHS
        hourly_rate: HOURLY_RATE, default lesson fee per hour in yen
        output_dir: Output directory for exported invoices and logs
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Examples:
        >>> config = Config()
        >>> if config.validate():
        ...     settings = config.billing_settings
    """

    @staticmethod
    def _read_int(name: str, default: int) -> int:
        """
        Read an integer environment variable.

        Raises:
            ValueError: If the variable is set but not an integer
        """
        raw = os.getenv(name)
        if raw is None or raw.strip() == "":
            return default
        try:
            return int(raw)
        except ValueError:
            raise ValueError(f"{name} must be an integer, got: {raw!r}")

    def __init__(self):
        """Initialize configuration by loading environment variables."""
        # Load .env file if it exists
        load_dotenv()

        # Billing calendar
        self._confirmation_day = self._read_int(
            "BILLING_CONFIRMATION_DAY", DEFAULT_CONFIRMATION_DAY
        )
        self._payment_due_day = self._read_int("PAYMENT_DUE_DAY", DEFAULT_PAYMENT_DUE_DAY)
        self._makeup_validity_months = self._read_int(
            "MAKEUP_CREDIT_VALIDITY_MONTHS", DEFAULT_MAKEUP_VALIDITY_MONTHS
        )

        # Pricing
        self._hourly_rate = self._read_int("HOURLY_RATE", DEFAULT_HOURLY_RATE)

        # Output settings
        self._output_dir = Path(os.getenv("OUTPUT_DIR", "output"))
        self._log_level = os.getenv("LOG_LEVEL", "INFO").upper()

    @property
    def confirmation_day(self) -> int:
        """Get the invoice confirmation day of month."""
        return self._confirmation_day

    @property
    def payment_due_day(self) -> int:
        """Get the payment due day of month."""
        return self._payment_due_day

    @property
    def makeup_validity_months(self) -> int:
        """Get makeup credit validity in months."""
        return self._makeup_validity_months

    @property
    def hourly_rate(self) -> int:
        """Get default lesson fee per hour in yen."""
        return self._hourly_rate

    @property
    def output_dir(self) -> Path:
        """Get output directory path."""
        return self._output_dir

    @property
    def log_level(self) -> str:
        """Get logging level."""
        return self._log_level

    @property
    def billing_settings(self) -> BillingSettings:
        """
        Get billing constants as a BillingSettings value.

        Raises:
            ValueError: If the configured values are out of range
        """
        return BillingSettings(
            confirmation_day=self._confirmation_day,
            payment_due_day=self._payment_due_day,
            makeup_validity_months=self._makeup_validity_months,
        )

    def validate(self) -> bool:
        """
        Validate configuration values.

        Returns:
            True if all configuration is valid

        Raises:
            ValueError: If validation fails
        """
        errors = []

        if not 1 <= self._confirmation_day <= MAX_FIXED_DAY:
            errors.append(f"BILLING_CONFIRMATION_DAY must be between 1 and {MAX_FIXED_DAY}")

        if not 1 <= self._payment_due_day <= MAX_FIXED_DAY:
            errors.append(f"PAYMENT_DUE_DAY must be between 1 and {MAX_FIXED_DAY}")

        if self._makeup_validity_months < 1:
            errors.append("MAKEUP_CREDIT_VALIDITY_MONTHS must be positive")

        if self._hourly_rate <= 0:
            errors.append("HOURLY_RATE must be positive")

        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if self._log_level not in valid_levels:
            errors.append(
                f"LOG_LEVEL must be one of: {', '.join(valid_levels)}"
            )

        if errors:
            error_msg = "Configuration validation failed:\n  - " + "\n  - ".join(errors)
            raise ValueError(error_msg)

        return True

    def create_output_directories(self):
        """Create output directories if they don't exist."""
        directories = [
            self.output_dir / "logs",
            self.output_dir / "invoices",
        ]

        for directory in directories:
            directory.mkdir(parents=True, exist_ok=True)


def default_settings() -> BillingSettings:
    """Billing settings from the process configuration."""
    return config.billing_settings


# Singleton instance
config = Config()
