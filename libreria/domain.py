from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional
import uuid


def new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:8]}"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class User:
    user_id: str
    name: str
    email: str
    phone: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)


@dataclass
class Book:
    """A catalog title. ``price`` is the daily rental rate."""

    book_id: str
    title: str
    price: Decimal
    stock_quantity: int
    available_quantity: int
    author: str = ""

    @property
    def is_available(self) -> bool:
        return self.available_quantity > 0


class ReservationStatus(Enum):
    ACTIVE = "ACTIVE"
    RETURNED = "RETURNED"
    OVERDUE = "OVERDUE"


@dataclass
class Reservation:
    user: User
    book: Book
    rental_days: int
    start_date: date
    expected_return_date: date
    daily_rate: Decimal
    total_fee: Decimal
    status: ReservationStatus = ReservationStatus.ACTIVE
    late_fee: Decimal = Decimal("0.00")
    actual_return_date: Optional[date] = None
    created_at: datetime = field(default_factory=utcnow)
    reservation_id: Optional[str] = None

    @property
    def user_id(self) -> str:
        return self.user.user_id

    @property
    def book_id(self) -> str:
        return self.book.book_id

    @property
    def book_title(self) -> str:
        return self.book.title

    def is_overdue(self, as_of: Optional[date] = None) -> bool:
        as_of = as_of or date.today()
        return self.status == ReservationStatus.ACTIVE and as_of > self.expected_return_date
