from __future__ import annotations
from datetime import date
import logging
from typing import List, Optional, Tuple

from .config import Settings, load_settings
from .domain import Book, Reservation, User
from .fees import Money
from .ledger import AvailabilityLedger
from .repositories import BookRepo, ReservationRepo, UserRepo
from .services import CatalogService, ReservationService, UserService

logger = logging.getLogger(__name__)


class LibrarySystem:
    """
    A simple facade that wires repos + ledger + services and offers a compact API.

    Repositories live in memory unless ``settings.database_url`` is set, in
    which case the SQLAlchemy ones from ``libreria.sql`` are used.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or load_settings()

        # repos
        if self.settings.database_url:
            from .sql import SqlBookRepo, SqlReservationRepo, SqlUserRepo, create_session_factory

            session_factory = create_session_factory(self.settings.database_url)
            self.users = SqlUserRepo(session_factory)
            self.books = SqlBookRepo(session_factory)
            self.reservations = SqlReservationRepo(session_factory, self.users, self.books)
        else:
            self.users = UserRepo()
            self.books = BookRepo()
            self.reservations = ReservationRepo()
        logger.debug("repositories: %s", type(self.reservations).__name__)

        # services
        self.ledger = AvailabilityLedger()
        self.user_service = UserService(self.users)
        self.catalog = CatalogService(self.books)
        self.reservation_service = ReservationService(
            self.user_service,
            self.catalog,
            self.reservations,
            ledger=self.ledger,
            late_fee_rate=self.settings.late_fee_rate,
        )

    # ---- user module
    def create_user(self, name: str, email: str, phone: Optional[str] = None) -> User:
        return self.user_service.register_user(name, email, phone)

    # ---- book/catalog module
    def add_book(
        self,
        title: str,
        author: str,
        price: Money,
        copies: int = 1,
        book_id: Optional[str] = None,
    ) -> Book:
        return self.catalog.add_book(title, author, price, copies, book_id)

    def search_books(self, text: str) -> List[Book]:
        return self.catalog.search(text)

    # ---- reservation module
    def reserve(
        self, user_id: str, book_id: str, rental_days: int, start_date: Optional[date] = None
    ) -> Reservation:
        return self.reservation_service.create_reservation(user_id, book_id, rental_days, start_date)

    def return_book(self, reservation_id: str, actual_return_date: Optional[date] = None) -> Reservation:
        return self.reservation_service.return_book(reservation_id, actual_return_date)

    def get_reservation(self, reservation_id: str) -> Reservation:
        return self.reservation_service.get_reservation_by_id(reservation_id)

    def reservations_for_user(self, user_id: str) -> List[Reservation]:
        return self.reservation_service.get_reservations_by_user_id(user_id)

    def active_reservations(self) -> List[Reservation]:
        return self.reservation_service.get_active_reservations()

    # ---- reporting
    def report_overdue(self, as_of: Optional[date] = None) -> List[Reservation]:
        return self.reservation_service.get_overdue_reservations(as_of)

    def report_inventory(self) -> List[Tuple[Book, int, int]]:
        """
        Returns tuples of (Book, stock_quantity, available_quantity)
        """
        return self.catalog.inventory()
