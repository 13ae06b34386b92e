"""
Invoice export and file utilities.

This module saves computed invoices as checksummed, versioned JSON
snapshots (the audit copy of what a guardian was shown) and as CSV
tables of invoice lines, and loads the JSON inputs of the CLI.
"""

import hashlib
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

import pandas as pd

from ..models.invoice import BillingInfo
from ..models.schema_version import VersionedData


logger = logging.getLogger(__name__)


LINE_COLUMNS = ["section", "date", "description", "amount"]

SECTION_PREPAYMENT = "prepayment"
SECTION_ADJUSTMENT = "adjustment"
SECTION_OTHER = "other"


def save_json(data: Any, filepath: Path) -> bool:
    """
    Save data to JSON file (UTF-8, Japanese kept readable).

    Returns:
        True if save successful, False otherwise
    """
    try:
        filepath.parent.mkdir(parents=True, exist_ok=True)

        with open(filepath, 'w', encoding='utf-8') as f:
            json.dump(data, f, ensure_ascii=False, indent=2)

        logger.debug(f"Saved JSON file: {filepath}")
        return True

    except (OSError, TypeError, ValueError) as e:
        logger.error(f"Failed to save JSON file {filepath}: {e}", exc_info=True)
        return False


def load_json(filepath: Path) -> Optional[Any]:
    """
    Load data from JSON file.

    Returns:
        Loaded data, or None if the file is missing or invalid
    """
    try:
        if not filepath.exists():
            logger.warning(f"JSON file not found: {filepath}")
            return None

        with open(filepath, 'r', encoding='utf-8') as f:
            data = json.load(f)

        logger.debug(f"Loaded JSON file: {filepath}")
        return data

    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in file {filepath}: {e}")
        return None

    except OSError as e:
        logger.error(f"Failed to load JSON file {filepath}: {e}", exc_info=True)
        return None


def save_csv(df: pd.DataFrame, filepath: Path) -> bool:
    """
    Save DataFrame to CSV file.

    Written as UTF-8 with BOM so spreadsheet software shows Japanese text.

    Returns:
        True if save successful, False otherwise
    """
    try:
        filepath.parent.mkdir(parents=True, exist_ok=True)
        df.to_csv(filepath, index=False, encoding='utf-8-sig')

        logger.debug(f"Saved CSV file: {filepath}")
        return True

    except OSError as e:
        logger.error(f"Failed to save CSV file {filepath}: {e}", exc_info=True)
        return False


def load_csv(filepath: Path) -> Optional[pd.DataFrame]:
    """
    Load DataFrame from CSV file.

    Returns:
        Loaded DataFrame, or None if load failed
    """
    try:
        if not filepath.exists():
            logger.warning(f"CSV file not found: {filepath}")
            return None

        df = pd.read_csv(filepath, encoding='utf-8-sig')

        logger.debug(f"Loaded CSV file: {filepath}")
        return df

    except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        logger.error(f"Failed to load CSV file {filepath}: {e}", exc_info=True)
        return None


def generate_filename(prefix: str, extension: str, now: Optional[datetime] = None) -> str:
    """
    Generate timestamped filename.

    Examples:
        >>> generate_filename("invoice_s1_2024-04", "json", datetime(2024, 3, 25, 10, 30))
        'invoice_s1_2024-04_20240325_103000.json'
    """
    timestamp = (now or datetime.now()).strftime("%Y%m%d_%H%M%S")
    return f"{prefix}_{timestamp}.{extension}"


def _checksum(data: Any) -> str:
    serialized = json.dumps(data, sort_keys=True, ensure_ascii=False)
    return hashlib.sha256(serialized.encode('utf-8')).hexdigest()


def save_json_with_integrity(
    data: Dict[str, Any],
    filepath: Path,
    now: Optional[datetime] = None
) -> bool:
    """
    Save JSON wrapped with a SHA-256 checksum of the data.

    Returns:
        True if save successful, False otherwise
    """
    wrapped = {
        "integrity": {
            "checksum": _checksum(data),
            "algorithm": "sha256",
            "timestamp": (now or datetime.now()).isoformat()
        },
        "data": data
    }
    return save_json(wrapped, filepath)


def verify_json_integrity(filepath: Path) -> bool:
    """
    Verify a file written by ``save_json_with_integrity``.

    Returns:
        True if the stored checksum matches the data
    """
    wrapped = load_json(filepath)
    if not isinstance(wrapped, dict) or "integrity" not in wrapped or "data" not in wrapped:
        logger.error("Invalid integrity-protected JSON format")
        return False

    expected = wrapped["integrity"].get("checksum")
    algorithm = wrapped["integrity"].get("algorithm", "sha256")
    if algorithm != "sha256":
        logger.error(f"Unsupported checksum algorithm: {algorithm}")
        return False

    if _checksum(wrapped["data"]) != expected:
        logger.error("Integrity check failed: checksum mismatch")
        return False

    logger.debug("Integrity check passed")
    return True


def billing_lines_frame(info: BillingInfo) -> pd.DataFrame:
    """
    Invoice lines as a table.

    One row per prepaid lesson, adjustment line and other charge.
    Adjustment amounts are signed (refunds negative), so the ``amount``
    column sums to the grand total.
    """
    rows = []

    for lesson in info.lessons:
        label = "振替レッスン" if lesson.is_makeup else "レッスン"
        rows.append({
            "section": SECTION_PREPAYMENT,
            "date": lesson.date.isoformat(),
            "description": f"{label} {lesson.start_time}-{lesson.end_time}",
            "amount": lesson.billable_amount,
        })

    for detail in info.adjustments.details:
        rows.append({
            "section": SECTION_ADJUSTMENT,
            "date": detail.date.isoformat(),
            "description": detail.reason,
            "amount": detail.signed_amount,
        })

    for charge in info.other_charges.items:
        rows.append({
            "section": SECTION_OTHER,
            "date": charge.charge_date.isoformat() if charge.charge_date else "",
            "description": charge.description,
            "amount": charge.amount,
        })

    return pd.DataFrame(rows, columns=LINE_COLUMNS)


def export_billing_info(
    info: BillingInfo,
    student_id: str,
    output_dir: Path,
    now: Optional[datetime] = None
) -> Dict[str, Path]:
    """
    Write the invoice as a versioned JSON snapshot and a CSV of its lines.

    Returns:
        Paths written, keyed by "json" and "csv" (missing on failure)
    """
    prefix = f"invoice_{student_id}_{info.year_month}"
    written: Dict[str, Path] = {}

    json_path = output_dir / generate_filename(prefix, "json", now)
    payload = VersionedData.wrap({"student_id": student_id, **info.to_dict()}).to_dict()
    if save_json_with_integrity(payload, json_path, now):
        written["json"] = json_path

    csv_path = output_dir / generate_filename(prefix, "csv", now)
    if save_csv(billing_lines_frame(info), csv_path):
        written["csv"] = csv_path

    logger.info(f"Exported invoice {info.year_month} for {student_id}: {len(written)} file(s)")
    return written
