#!/usr/bin/env python3
"""
Monthly invoice generation.

Computes a student's invoice for a billing month from exported lesson,
other-charge and makeup-credit records, prints a summary, and saves a
checksummed JSON snapshot and a CSV of the invoice lines.

Usage:
    tutor-billing --student STUDENT_ID --month YYYY-MM --lessons lessons.json
                  [--charges charges.json] [--credits credits.json]
                  [--now 2024-03-25T10:00] [--output-dir DIR] [--dry-run]

Examples:
    # Invoice for April 2024 as it looks today
    tutor-billing --student s1 --month 2024-04 --lessons lessons.json

    # What the invoice looked like on March 10th, without writing files
    tutor-billing --student s1 --month 2024-04 --lessons lessons.json \\
        --now 2024-03-10 --dry-run
"""

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from .billing.calculator import calculate_billing_info
from .billing.period import billing_period_for, parse_year_month, previous_month
from .errors import InvalidPeriodError
from .ledger.interfaces import CreditRepository
from .ledger.makeup_credits import MakeupCreditLedger
from .ledger.payment_tracker import PaymentStatusTracker
from .ledger.pricing import format_currency, format_expiration_status, format_makeup_time
from .models.credit import MakeupCredit
from .models.invoice import BillingInfo, OtherCharge
from .models.lesson import Lesson
from .models.fields import parse_timestamp
from .utils.config import Config
from .utils.di_container import DIContainer, configure_default_services
from .utils.file_utils import export_billing_info, load_json
from .validation.charge_validator import OtherChargeValidator
from .validation.lesson_validator import LessonValidator


logger = logging.getLogger("tutor_billing.run_billing")


def parse_arguments(argv: Optional[List[str]] = None):
    """
    Parse command-line arguments.

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(
        description="Generate a monthly tutoring invoice",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )

    parser.add_argument("--student", required=True, help="Student identifier")
    parser.add_argument(
        "--month",
        required=True,
        help="Billing month in YYYY-MM format (e.g., 2024-04)"
    )
    parser.add_argument(
        "--lessons",
        required=True,
        type=Path,
        help="JSON file with lesson records (target and previous month)"
    )
    parser.add_argument("--charges", type=Path, help="JSON file with other charges")
    parser.add_argument("--credits", type=Path, help="JSON file with makeup credits")
    parser.add_argument(
        "--now",
        help="Reference time in ISO 8601 (default: current time)"
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        help="Directory for exported files (default: OUTPUT_DIR/invoices)"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the invoice without writing files"
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: LOG_LEVEL)"
    )

    return parser.parse_args(argv)


def load_lessons(path: Path, student_id: str) -> List[Lesson]:
    """
    Load, validate and convert the student's lesson records.

    Invalid records are logged and skipped.
    """
    records = load_json(path)
    if not isinstance(records, list):
        raise ValueError(f"{path} must contain a JSON list of lesson records")

    validator = LessonValidator()
    lessons = []

    for record in records:
        if record.get("student_id") != student_id:
            continue
        result = validator.validate(record)
        for warning in result.warnings:
            logger.warning(warning)
        if not result.is_valid:
            logger.error(f"Skipping lesson {record.get('id')}: {result.get_summary()}")
            continue
        lessons.append(Lesson.from_dict(record))

    return lessons


def load_other_charges(path: Optional[Path], student_id: str, year_month: str) -> List[OtherCharge]:
    """Load the student's valid other charges for the month."""
    if path is None:
        return []

    records = load_json(path)
    if not isinstance(records, list):
        raise ValueError(f"{path} must contain a JSON list of other charges")

    validator = OtherChargeValidator()
    charges = []

    for record in records:
        if record.get("student_id") != student_id or record.get("year_month") != year_month:
            continue
        result = validator.validate(record)
        if not result.is_valid:
            logger.error(f"Skipping other charge {record.get('id')}: {result.get_summary()}")
            continue
        charges.append(OtherCharge.from_dict(record))

    charges.sort(key=lambda c: (c.charge_date.isoformat() if c.charge_date else "", c.id))
    return charges


def load_credits(path: Optional[Path], repository: CreditRepository) -> int:
    """Load makeup credit records into the repository; returns the count."""
    if path is None:
        return 0

    records = load_json(path)
    if not isinstance(records, list):
        raise ValueError(f"{path} must contain a JSON list of makeup credits")

    for record in records:
        repository.add(MakeupCredit.from_dict(record))
    return len(records)


def display_summary(info: BillingInfo, student_id: str):
    """Print the invoice."""
    state = "確定" if info.is_confirmed else "未確定"

    print("\n" + "=" * 60)
    print(f"INVOICE {info.year_month}  student: {student_id}  [{state}]")
    print("=" * 60)
    print(f"Confirmation date:        {info.confirmation_date.isoformat()}")
    print(f"Payment due:              {info.payment_due_date.isoformat()}")
    print(f"Payment status:           {info.payment_status.value}")
    print("-" * 60)
    print(f"① Lessons ({info.lesson_count:2d})            {format_currency(info.lesson_fee_total):>12s}")
    print(f"   Transport              {format_currency(info.transport_fee_total):>12s}")
    print(f"② Adjustments            {format_currency(info.adjustments.total):>12s}")
    for detail in info.adjustments.details:
        print(
            f"     {detail.date.isoformat()} {detail.reason:24s} "
            f"{format_currency(detail.signed_amount):>10s}"
        )
    print(f"③ Other charges          {format_currency(info.other_charges.total):>12s}")
    for charge in info.other_charges.items:
        print(f"     {charge.description:35s} {format_currency(charge.amount):>10s}")
    print("-" * 60)
    print(f"TOTAL                    {format_currency(info.grand_total):>12s}")
    print("=" * 60)

    if info.adjustments.warnings:
        print("\nData warnings:")
        for warning in info.adjustments.warnings:
            print(f"  - {warning}")


def display_credits(ledger: MakeupCreditLedger, student_id: str, now: datetime):
    """Print the student's usable makeup credits."""
    credits = ledger.available_credits(student_id, now)
    balance = sum(c.total_minutes for c in credits)

    print(f"\nMakeup credit balance:    {format_makeup_time(balance) if balance else '0分'}")
    for credit in credits:
        print(
            f"  - {format_makeup_time(credit.total_minutes):10s} "
            f"{format_expiration_status(credit.expires_at, now)}"
        )


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main execution function.

    Returns:
        Exit code (0 = success, 1 = failure)
    """
    args = parse_arguments(argv)

    container = DIContainer()
    configure_default_services(container)

    try:
        app_config: Config = container.resolve(Config)
        app_config.validate()
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    app_logger = container.resolve(logging.Logger)
    if args.log_level:
        app_logger.setLevel(args.log_level)

    try:
        target_month = parse_year_month(args.month)
        now = parse_timestamp(args.now, "--now") if args.now else datetime.now().astimezone()
    except (InvalidPeriodError, ValueError) as e:
        logger.error(str(e))
        return 1

    try:
        lessons = load_lessons(args.lessons, args.student)
        other_charges = load_other_charges(args.charges, args.student, args.month)
        ledger: MakeupCreditLedger = container.resolve(MakeupCreditLedger)
        credit_count = load_credits(args.credits, ledger.repository)
    except (ValueError, KeyError) as e:
        logger.error(f"Failed to load input: {e}")
        return 1

    start, end = billing_period_for(target_month)
    prior_start, prior_end = billing_period_for(previous_month(target_month))
    current = [l for l in lessons if start <= l.date <= end]
    prior = [l for l in lessons if prior_start <= l.date <= prior_end]

    logger.info(
        f"Computing invoice {args.month} for {args.student}: "
        f"{len(current)} lessons, {len(prior)} previous-month lessons"
    )

    tracker: PaymentStatusTracker = container.resolve(PaymentStatusTracker)
    info = calculate_billing_info(
        current,
        target_month,
        now,
        prior_month_lessons=prior,
        other_charges=other_charges,
        settings=ledger.settings,
        payment_status=tracker.status(args.student, args.month),
    )

    display_summary(info, args.student)
    if credit_count:
        display_credits(ledger, args.student, now)

    if args.dry_run:
        logger.info("Dry run: no files written")
        return 0

    output_dir = args.output_dir or app_config.output_dir / "invoices"
    written = export_billing_info(info, args.student, output_dir, now)
    if len(written) < 2:
        logger.error("Failed to save invoice export")
        return 1

    for kind, path in written.items():
        print(f"Saved {kind.upper()}: {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
