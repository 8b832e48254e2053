from __future__ import annotations
from contextlib import contextmanager
import logging
import threading
from typing import Dict, Iterator

from .domain import Book
from .errors import OutOfStock

logger = logging.getLogger(__name__)


class AvailabilityLedger:
    """
    Owns the "copies available" counter of every book.

    Mutations for one book run under that book's lock, so the
    check-then-decrement in ``reserve`` is a single step for concurrent
    callers. The ledger never persists the book; callers save it.
    """

    def __init__(self) -> None:
        self._locks: Dict[str, threading.RLock] = {}
        self._registry_lock = threading.Lock()

    def _lock_for(self, book_id: str) -> threading.RLock:
        with self._registry_lock:
            lock = self._locks.get(book_id)
            if lock is None:
                lock = self._locks[book_id] = threading.RLock()
            return lock

    @contextmanager
    def locked(self, book_id: str) -> Iterator[None]:
        with self._lock_for(book_id):
            yield

    def reserve(self, book: Book, quantity: int = 1) -> int:
        _check_quantity(quantity)
        with self.locked(book.book_id):
            if book.available_quantity < quantity:
                logger.info("book %s out of stock (available=%d)", book.book_id, book.available_quantity)
                raise OutOfStock()
            book.available_quantity -= quantity
            return book.available_quantity

    def release(self, book: Book, quantity: int = 1) -> int:
        _check_quantity(quantity)
        with self.locked(book.book_id):
            target = book.available_quantity + quantity
            if target > book.stock_quantity:
                logger.warning(
                    "release on book %s would exceed stock (%d > %d); clamping",
                    book.book_id,
                    target,
                    book.stock_quantity,
                )
                target = book.stock_quantity
            book.available_quantity = target
            return book.available_quantity


def _check_quantity(quantity: int) -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise ValueError(f"quantity must be a positive integer, got {quantity!r}")
