"""
Fee rules for reservations.

All amounts are ``Decimal`` rounded to cents with ROUND_HALF_UP. The functions
here hold no state so they can be called from any thread.
"""

from __future__ import annotations
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Union

from .errors import InvalidDuration

Money = Union[Decimal, int, str, float]

# 15% of the daily rate per day overdue
LATE_FEE_RATE = Decimal("0.15")
CENTS = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value: Money) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_money(amount: Decimal) -> Decimal:
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def validate_rental_days(rental_days: int) -> int:
    # bool is an int subclass; True is not a duration
    if isinstance(rental_days, bool) or not isinstance(rental_days, int) or rental_days <= 0:
        raise InvalidDuration()
    return rental_days


def compute_total_fee(daily_rate: Money, rental_days: int) -> Decimal:
    validate_rental_days(rental_days)
    return round_money(to_money(daily_rate) * rental_days)


def compute_late_fee(
    daily_rate: Money, days_late: int, late_fee_rate: Money = LATE_FEE_RATE
) -> Decimal:
    if days_late <= 0:
        return ZERO
    return round_money(to_money(daily_rate) * to_money(late_fee_rate) * days_late)


def expected_return_date(start_date: date, rental_days: int) -> date:
    return start_date + timedelta(days=validate_rental_days(rental_days))


def days_late(expected: date, actual: date) -> int:
    return max(0, (actual - expected).days)
