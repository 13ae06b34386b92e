"""
Unit tests for pricing and display helpers.
"""

from datetime import datetime

import pytest

from tutor_billing.ledger.pricing import (
    calculate_hours,
    calculate_lesson_amount,
    days_until_expiration,
    format_currency,
    format_expiration_status,
    format_makeup_time,
    hours_to_minutes,
    lesson_fee_for,
    minutes_to_hours,
)


class TestLessonPricing:
    """Test cases for durations and fees."""

    def test_calculate_hours(self):
        assert calculate_hours("17:00", "18:30") == 1.5
        assert calculate_hours("17:00:00", "19:00:00") == 2

    def test_end_before_start(self):
        with pytest.raises(ValueError):
            calculate_hours("19:00", "17:00")

    def test_amount_rounds_half_up(self):
        assert calculate_lesson_amount(1.5, 3500) == 5250
        assert calculate_lesson_amount(0.75, 3333) == 2500

    def test_amount_uses_configured_rate(self):
        assert calculate_lesson_amount(2) == 7000

    def test_makeup_fee_is_zero(self):
        assert lesson_fee_for(2, 3500, is_makeup=True) == 0
        assert lesson_fee_for(2, 3500) == 7000

    def test_minute_conversion(self):
        assert hours_to_minutes(1.5) == 90
        assert minutes_to_hours(90) == 1.5


class TestDisplay:
    """Test cases for display formatting."""

    @pytest.mark.parametrize("amount,expected", [
        (3500, "¥3,500"),
        (0, "¥0"),
        (-800, "-¥800"),
        (1234567, "¥1,234,567"),
    ])
    def test_format_currency(self, amount, expected):
        assert format_currency(amount) == expected

    @pytest.mark.parametrize("minutes,expected", [
        (120, "2時間"),
        (90, "1時間30分"),
        (45, "45分"),
    ])
    def test_format_makeup_time(self, minutes, expected):
        assert format_makeup_time(minutes) == expected


class TestExpirationStatus:
    """Test cases for expiry countdowns."""

    EXPIRES = datetime(2024, 5, 1)

    @pytest.mark.parametrize("now,expected", [
        (datetime(2024, 5, 1), "期限切れ"),
        (datetime(2024, 5, 2), "期限切れ"),
        (datetime(2024, 4, 30, 21, 0), "本日期限"),
        (datetime(2024, 4, 29, 9, 0), "明日期限"),
        (datetime(2024, 4, 26, 9, 0), "あと4日"),
        (datetime(2024, 4, 23, 0, 0), "あと7日"),
        (datetime(2024, 4, 1, 0, 0), "4月30日まで"),
    ])
    def test_format_expiration_status(self, now, expected):
        assert format_expiration_status(self.EXPIRES, now) == expected

    def test_days_until_expiration(self):
        assert days_until_expiration(self.EXPIRES, datetime(2024, 4, 30, 12, 0)) == 1
        assert days_until_expiration(self.EXPIRES, datetime(2024, 4, 28)) == 3
