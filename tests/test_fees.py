"""
Tests for the fee rules in libreria.fees
"""

from datetime import date
from decimal import Decimal

import pytest

from libreria.errors import InvalidDuration
from libreria.fees import (
    LATE_FEE_RATE,
    compute_late_fee,
    compute_total_fee,
    days_late,
    expected_return_date,
)


def test_total_fee_is_rate_times_days():
    """15.99 for 7 days costs 111.93"""
    assert compute_total_fee(Decimal("15.99"), 7) == Decimal("111.93")


def test_total_fee_rounds_half_up():
    assert compute_total_fee(Decimal("0.125"), 1) == Decimal("0.13")
    assert compute_total_fee(Decimal("1.005"), 1) == Decimal("1.01")


def test_total_fee_accepts_strings_and_floats():
    assert compute_total_fee("2.50", 4) == Decimal("10.00")
    assert compute_total_fee(2.5, 4) == Decimal("10.00")


@pytest.mark.parametrize("rental_days", [0, -3, 1.5, "7", True, None])
def test_total_fee_rejects_invalid_durations(rental_days):
    with pytest.raises(InvalidDuration):
        compute_total_fee(Decimal("15.99"), rental_days)


def test_late_fee_is_fifteen_percent_per_day():
    """15.99 * 0.15 * 3 = 7.1955 -> 7.20"""
    assert LATE_FEE_RATE == Decimal("0.15")
    assert compute_late_fee(Decimal("15.99"), 3) == Decimal("7.20")


@pytest.mark.parametrize("late", [0, -1, -30])
def test_late_fee_is_zero_when_not_late(late):
    assert compute_late_fee(Decimal("15.99"), late) == Decimal("0")


def test_late_fee_uses_custom_rate():
    assert compute_late_fee(Decimal("10.00"), 2, late_fee_rate="0.5") == Decimal("10.00")


def test_expected_return_date_adds_rental_days():
    assert expected_return_date(date(2024, 2, 25), 7) == date(2024, 3, 3)


def test_days_late_is_never_negative():
    expected = date(2024, 3, 10)
    assert days_late(expected, date(2024, 3, 13)) == 3
    assert days_late(expected, date(2024, 3, 10)) == 0
    assert days_late(expected, date(2024, 3, 1)) == 0
