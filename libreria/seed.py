from __future__ import annotations
from datetime import date, timedelta
import logging
from typing import Optional

from .api import LibrarySystem

logger = logging.getLogger(__name__)


def seed_demo_data(sys: LibrarySystem, today: Optional[date] = None) -> None:
    today = today or date.today()

    # users
    juan = sys.create_user("Juan Pérez", "juan@example.com", "+34 600 000 001")
    ana = sys.create_user("Ana García", "ana@example.com")

    # books
    lotr = sys.add_book("The Lord of the Rings", "J.R.R. Tolkien", "15.99", copies=10, book_id="258027")
    dune = sys.add_book("Dune", "Frank Herbert", "9.50", copies=2, book_id="9780441172719")
    sys.add_book("Clean Code", "Robert C. Martin", "12.00", copies=1, book_id="9780132350884")

    # reservations: one due today, one already three days late
    sys.reserve(juan.user_id, lotr.book_id, 7, start_date=today - timedelta(days=7))
    sys.reserve(ana.user_id, dune.book_id, 7, start_date=today - timedelta(days=10))

    logger.info("seeded users: %s", [u.name for u in sys.users.list_all()])
    logger.info("seeded books: %s", [b.title for b in sys.books.list_books()])
