"""
Unit tests for invoice export and file utilities.
"""

import json
from datetime import date, datetime

import pytest

from tutor_billing.billing.calculator import calculate_billing_info
from tutor_billing.models.invoice import OtherCharge
from tutor_billing.models.lesson import CancellationCause, LessonStatus
from tutor_billing.models.schema_version import CURRENT_SCHEMA_VERSION, VersionedData
from tutor_billing.utils.file_utils import (
    billing_lines_frame,
    export_billing_info,
    generate_filename,
    load_csv,
    load_json,
    save_json,
    save_json_with_integrity,
    verify_json_integrity,
)


NOW = datetime(2024, 3, 25, 10, 30)


@pytest.fixture
def billing_info(make_lesson, settings):
    lessons = [
        make_lesson("2024-04-10", fee=4000, transport_fee=900),
        make_lesson("2024-04-17", fee=0, transport_fee=700, is_makeup=True),
    ]
    prior = [
        make_lesson("2024-03-15", fee=7000, transport_fee=500,
                    status=LessonStatus.CANCELLED, caused_by=CancellationCause.STUDENT),
    ]
    charges = [
        OtherCharge(id="c1", student_id="student_1", year_month="2024-04",
                    description="教材費", amount=1500, charge_date=date(2024, 4, 3)),
    ]
    return calculate_billing_info(
        lessons, date(2024, 4, 1), NOW,
        prior_month_lessons=prior, other_charges=charges, settings=settings
    )


class TestJsonFiles:
    """Test cases for JSON helpers."""

    def test_save_and_load(self, tmp_path):
        path = tmp_path / "nested" / "data.json"

        assert save_json({"description": "教材費"}, path)
        assert load_json(path) == {"description": "教材費"}
        assert "教材費" in path.read_text(encoding="utf-8")

    def test_load_missing(self, tmp_path):
        assert load_json(tmp_path / "missing.json") is None

    def test_load_invalid(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")

        assert load_json(path) is None

    def test_integrity_roundtrip(self, tmp_path):
        path = tmp_path / "snapshot.json"

        save_json_with_integrity({"grand_total": 4900}, path, NOW)

        assert verify_json_integrity(path)
        assert load_json(path)["integrity"]["timestamp"] == NOW.isoformat()

    def test_integrity_detects_tampering(self, tmp_path):
        path = tmp_path / "snapshot.json"
        save_json_with_integrity({"grand_total": 4900}, path, NOW)

        wrapped = json.loads(path.read_text(encoding="utf-8"))
        wrapped["data"]["grand_total"] = 100
        path.write_text(json.dumps(wrapped), encoding="utf-8")

        assert not verify_json_integrity(path)

    def test_generate_filename(self):
        assert generate_filename("invoice_s1_2024-04", "json", NOW) == (
            "invoice_s1_2024-04_20240325_103000.json"
        )


class TestInvoiceExport:
    """Test cases for exporting BillingInfo."""

    def test_lines_frame_sums_to_total(self, billing_info):
        frame = billing_lines_frame(billing_info)

        assert list(frame.columns) == ["section", "date", "description", "amount"]
        assert list(frame["section"]) == ["prepayment", "prepayment", "adjustment", "other"]
        assert int(frame["amount"].sum()) == billing_info.grand_total
        assert int(frame.loc[frame["section"] == "adjustment", "amount"].iloc[0]) == -500

    def test_export_writes_json_and_csv(self, billing_info, tmp_path):
        written = export_billing_info(billing_info, "student_1", tmp_path, NOW)

        assert set(written) == {"json", "csv"}
        assert verify_json_integrity(written["json"])

        versioned = VersionedData.from_dict(load_json(written["json"])["data"])
        assert versioned.schema_version == CURRENT_SCHEMA_VERSION.value
        assert versioned.is_current
        assert versioned.data["student_id"] == "student_1"
        assert versioned.data["grand_total"] == billing_info.grand_total
        assert versioned.data["target_month"] == "2024-04"

        frame = load_csv(written["csv"])
        assert len(frame) == 4
        assert int(frame["amount"].sum()) == billing_info.grand_total

    def test_unversioned_snapshot_reads_as_1_0(self):
        versioned = VersionedData.from_dict({"data": {"grand_total": 1}})

        assert versioned.schema_version == "1.0"
        assert not versioned.is_current
