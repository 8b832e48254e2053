"""
Tests for the availability ledger
"""

from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal
import threading

import pytest

from libreria.domain import Book
from libreria.errors import OutOfStock
from libreria.ledger import AvailabilityLedger


def make_book(stock=3, available=3):
    return Book(
        book_id="bk_1",
        title="Dune",
        price=Decimal("9.50"),
        stock_quantity=stock,
        available_quantity=available,
    )


def test_reserve_decrements_available():
    ledger = AvailabilityLedger()
    book = make_book(available=2)

    assert ledger.reserve(book) == 1
    assert book.available_quantity == 1


def test_reserve_fails_when_not_enough_copies():
    """A failed reserve leaves the counter untouched"""
    ledger = AvailabilityLedger()
    book = make_book(available=1)

    with pytest.raises(OutOfStock, match="El libro está agotado"):
        ledger.reserve(book, 2)
    assert book.available_quantity == 1


def test_reserve_on_empty_shelf_fails():
    ledger = AvailabilityLedger()
    book = make_book(available=0)

    with pytest.raises(OutOfStock):
        ledger.reserve(book)
    assert book.available_quantity == 0


def test_release_increments_available():
    ledger = AvailabilityLedger()
    book = make_book(stock=3, available=1)

    assert ledger.release(book) == 2


def test_release_never_exceeds_stock():
    """Double release is clamped to stock_quantity"""
    ledger = AvailabilityLedger()
    book = make_book(stock=3, available=3)

    ledger.release(book)
    ledger.release(book, 2)
    assert book.available_quantity == 3


@pytest.mark.parametrize("quantity", [0, -1, True])
def test_quantity_must_be_positive(quantity):
    ledger = AvailabilityLedger()
    book = make_book()

    with pytest.raises(ValueError):
        ledger.reserve(book, quantity)
    with pytest.raises(ValueError):
        ledger.release(book, quantity)
    assert book.available_quantity == 3


def test_concurrent_reserves_never_oversell():
    """20 threads race for 5 copies: exactly 5 win"""
    ledger = AvailabilityLedger()
    book = make_book(stock=5, available=5)
    barrier = threading.Barrier(20)

    def attempt():
        barrier.wait()
        try:
            ledger.reserve(book)
            return True
        except OutOfStock:
            return False

    with ThreadPoolExecutor(max_workers=20) as pool:
        results = list(pool.map(lambda _: attempt(), range(20)))

    assert results.count(True) == 5
    assert book.available_quantity == 0


def test_concurrent_reserve_and_release_stay_in_bounds():
    ledger = AvailabilityLedger()
    book = make_book(stock=2, available=2)
    seen = []

    def churn():
        for _ in range(200):
            try:
                ledger.reserve(book)
            except OutOfStock:
                pass
            seen.append(book.available_quantity)
            ledger.release(book)
            seen.append(book.available_quantity)

    threads = [threading.Thread(target=churn) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert all(0 <= n <= 2 for n in seen)
    assert book.available_quantity == 2
