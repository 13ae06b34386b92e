"""
Unit tests for logging utilities.
"""

import logging

from tutor_billing.utils.logger import (
    SensitiveDataFilter,
    mask_account_number,
    mask_email,
    setup_logger,
)


def make_record(msg, *args):
    return logging.LogRecord(
        name="test", level=logging.INFO, pathname=__file__, lineno=1,
        msg=msg, args=args or None, exc_info=None
    )


class TestMasking:
    """Test cases for masking helpers."""

    def test_mask_email(self):
        assert mask_email("parent@example.com") == "p***@example.com"
        assert mask_email("invalid") == "***"
        assert mask_email("") == "***"

    def test_mask_account_number(self):
        assert mask_account_number("1234567") == "****567"
        assert mask_account_number("12") == "***"


class TestSensitiveDataFilter:
    """Test cases for SensitiveDataFilter."""

    def test_masks_email(self):
        record = make_record("Payment reported by parent@example.com")

        assert SensitiveDataFilter().filter(record) is True
        assert record.getMessage() == "Payment reported by p***@example.com"

    def test_masks_account_number_in_args(self):
        record = make_record("Transfer from %s", "口座番号: 1234567")

        SensitiveDataFilter().filter(record)

        assert "1234567" not in record.getMessage()
        assert "****567" in record.getMessage()

    def test_plain_message_unchanged(self):
        record = make_record("Invoice 2024-04: total 4900")

        SensitiveDataFilter().filter(record)

        assert record.getMessage() == "Invoice 2024-04: total 4900"


class TestSetupLogger:
    """Test cases for setup_logger."""

    def test_console_handler_with_filter(self):
        logger = setup_logger("tutor_billing.test_console", level=logging.DEBUG)

        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert any(isinstance(f, SensitiveDataFilter) for f in logger.handlers[0].filters)

    def test_file_handler(self, tmp_path):
        log_file = tmp_path / "logs" / "billing.log"

        logger = setup_logger("tutor_billing.test_file", log_file=str(log_file))
        logger.info("Invoice for parent@example.com")
        for handler in logger.handlers:
            handler.flush()

        assert len(logger.handlers) == 2
        content = log_file.read_text(encoding="utf-8")
        assert "p***@example.com" in content
        assert "parent@example.com" not in content

        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)

    def test_no_duplicate_handlers(self):
        first = setup_logger("tutor_billing.test_dupes")
        second = setup_logger("tutor_billing.test_dupes")

        assert first is second
        assert len(second.handlers) == 1
