"""
Logging utilities with personal-data masking.

This module provides logging setup with:
- Configurable log levels and output destinations
- Log rotation for file handlers
- Masking of guardian e-mail addresses and bank account numbers
- Structured log format
"""

import logging
import re
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional


EMAIL_PATTERN = re.compile(r'([A-Za-z0-9._%+-])[A-Za-z0-9._%+-]*@([A-Za-z0-9.-]+\.[A-Za-z]{2,})')
ACCOUNT_PATTERN = re.compile(
    r'(account(?:_number)?|口座番号)["\']?\s*[:=]?\s*["\']?(\d{4,})',
    flags=re.IGNORECASE
)


def mask_email(email: str) -> str:
    """
    Mask email address for safe logging.

    Args:
        email: Email address to mask

    Returns:
        Masked email (e.g., "u***@example.com")

    Examples:
        >>> mask_email("parent@example.com")
        'p***@example.com'
        >>> mask_email("invalid")
        '***'
    """
    if not email or "@" not in email:
        return "***"

    local, domain = email.split("@", 1)
    masked_local = local[0] + "***" if len(local) > 0 else "***"
    return f"{masked_local}@{domain}"


def mask_account_number(number: str) -> str:
    """
    Keep only the last three digits of a bank account number.

    Examples:
        >>> mask_account_number("1234567")
        '****567'
    """
    if len(number) <= 3:
        return "***"
    return "*" * (len(number) - 3) + number[-3:]


class SensitiveDataFilter(logging.Filter):
    """
    Logging filter that masks guardian contact and bank details.

    Payment reports can carry the guardian's e-mail address and the
    transfer account; both are masked before a record is emitted.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        """
        Mask sensitive data in a log record.

        Args:
            record: Log record to filter

        Returns:
            Always True (allows all records through after masking)
        """
        message = record.getMessage()

        message = EMAIL_PATTERN.sub(r'\1***@\2', message)
        message = ACCOUNT_PATTERN.sub(
            lambda m: f"{m.group(1)}: {mask_account_number(m.group(2))}",
            message
        )

        record.msg = message
        record.args = None
        return True


def setup_logger(
    name: str = "tutor_billing",
    level: int = logging.INFO,
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Set up and configure a logger instance.

    Args:
        name: Logger name (default: "tutor_billing")
        level: Logging level (default: logging.INFO)
        log_file: Optional path to log file for file output

    Returns:
        Configured logger instance

    Examples:
        >>> logger = setup_logger()
        >>> logger.info("Invoice generation started")

        >>> logger = setup_logger(
        ...     level=logging.DEBUG,
        ...     log_file="output/logs/billing.log"
        ... )
    """
    logger = logging.getLogger(name)

    # Avoid duplicate handlers
    if logger.handlers:
        return logger

    logger.setLevel(level)

    formatter = logging.Formatter(
        fmt='%(asctime)s [%(levelname)s] %(name)s:%(funcName)s:%(lineno)d %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    sensitive_filter = SensitiveDataFilter()

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler.addFilter(sensitive_filter)
    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5,
            encoding='utf-8'
        )
        file_handler.setFormatter(formatter)
        file_handler.addFilter(sensitive_filter)
        logger.addHandler(file_handler)

    return logger
