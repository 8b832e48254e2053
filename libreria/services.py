from __future__ import annotations
from dataclasses import replace
from datetime import date
import logging
from typing import List, Optional, Tuple

from . import fees
from .domain import Book, Reservation, ReservationStatus, User, new_id, utcnow
from .errors import BookNotFound, OutOfStock, ReservationNotFound, UserNotFound
from .ledger import AvailabilityLedger
from .repositories import BookRepo, ReservationRepo, UserRepo
from .state_machine import ReservationStateMachine

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, users: UserRepo) -> None:
        self.users = users

    def register_user(self, name: str, email: str, phone: Optional[str] = None) -> User:
        u = User(user_id=new_id("usr"), name=name, email=email, phone=phone)
        self.users.add(u)
        return u

    def get_user_by_id(self, user_id: str) -> User:
        user = self.users.get(user_id)
        if user is None:
            raise UserNotFound(f"El usuario {user_id} no existe")
        return user

    def list_users(self) -> List[User]:
        return self.users.list_all()


class CatalogService:
    def __init__(self, books: BookRepo) -> None:
        self.books = books

    def add_book(
        self,
        title: str,
        author: str,
        price: fees.Money,
        copies: int = 1,
        book_id: Optional[str] = None,
    ) -> Book:
        if copies < 0:
            raise ValueError("copies must be >= 0")
        b = Book(
            book_id=book_id or new_id("bk"),
            title=title,
            author=author,
            price=fees.to_money(price),
            stock_quantity=copies,
            available_quantity=copies,
        )
        self.books.add_book(b)
        return b

    def get_book(self, book_id: str) -> Book:
        book = self.books.get_book(book_id)
        if book is None:
            raise BookNotFound(f"El libro {book_id} no existe")
        return book

    def search(self, text: str) -> List[Book]:
        return self.books.search(text)

    def list_books(self) -> List[Book]:
        return self.books.list_books()

    def inventory(self) -> List[Tuple[Book, int, int]]:
        return [(b, b.stock_quantity, b.available_quantity) for b in self.books.list_books()]


class ReservationService:
    """
    Create/return/query use cases for reservations.

    Stock changes go through the ledger; status changes go through the state
    machine. A copy taken for a reservation that could not be stored is given
    back before the error reaches the caller.
    """

    def __init__(
        self,
        users: UserService,
        catalog: CatalogService,
        reservations: ReservationRepo,
        ledger: Optional[AvailabilityLedger] = None,
        late_fee_rate: fees.Money = fees.LATE_FEE_RATE,
    ) -> None:
        self.users = users
        self.catalog = catalog
        self.reservations = reservations
        self.ledger = ledger or AvailabilityLedger()
        self.state_machine = ReservationStateMachine(late_fee_rate)

    @property
    def books(self) -> BookRepo:
        return self.catalog.books

    def create_reservation(
        self,
        user_id: str,
        book_id: str,
        rental_days: int,
        start_date: Optional[date] = None,
    ) -> Reservation:
        start_date = start_date or date.today()
        user = self.users.get_user_by_id(user_id)
        book = self.catalog.get_book(book_id)

        # validate before touching stock
        total_fee = fees.compute_total_fee(book.price, rental_days)
        expected = fees.expected_return_date(start_date, rental_days)

        # the stored counter must be written while the ledger lock is held
        with self.ledger.locked(book.book_id):
            try:
                self.ledger.reserve(book, 1)
            except OutOfStock:
                logger.warning("user %s asked for %s but no copies are left", user_id, book_id)
                raise

            try:
                self.books.save(book)
                reservation = self.reservations.save(
                    Reservation(
                        user=user,
                        book=book,
                        rental_days=rental_days,
                        start_date=start_date,
                        expected_return_date=expected,
                        daily_rate=book.price,
                        total_fee=total_fee,
                        status=ReservationStatus.ACTIVE,
                        created_at=utcnow(),
                    )
                )
            except Exception:
                logger.error("could not store reservation of %s for %s; releasing the copy", book_id, user_id)
                self._give_back(book)
                raise

        logger.info(
            "reservation %s: %s -> %s for %d day(s), fee %s",
            reservation.reservation_id,
            user_id,
            book_id,
            rental_days,
            total_fee,
        )
        return reservation

    def return_book(self, reservation_id: str, actual_return_date: Optional[date] = None) -> Reservation:
        actual_return_date = actual_return_date or date.today()
        book = self.get_reservation_by_id(reservation_id).book

        with self.ledger.locked(book.book_id):
            # reload under the lock so a concurrent return is seen
            reservation = self.get_reservation_by_id(reservation_id)
            before = replace(reservation)
            outcome = self.state_machine.apply_return(reservation, actual_return_date)
            self.ledger.release(book, 1)
            try:
                self.books.save(book)
                reservation = self.reservations.save(reservation)
            except Exception:
                logger.error("could not store return of %s; restoring it as active", reservation_id)
                self._restore(reservation, before)
                self._take_back(book)
                raise

        if outcome.status == ReservationStatus.OVERDUE:
            logger.info(
                "reservation %s returned %d day(s) late, late fee %s",
                reservation_id,
                outcome.days_late,
                outcome.late_fee,
            )
        else:
            logger.info("reservation %s returned on time", reservation_id)
        return reservation

    # ---- compensation
    def _give_back(self, book: Book) -> None:
        with self.ledger.locked(book.book_id):
            self.ledger.release(book, 1)
            try:
                self.books.save(book)
            except Exception:
                logger.exception("could not store released copy of %s", book.book_id)

    def _take_back(self, book: Book) -> None:
        with self.ledger.locked(book.book_id):
            try:
                self.ledger.reserve(book, 1)
                self.books.save(book)
            except Exception:
                logger.exception("could not take back the copy of %s", book.book_id)

    @staticmethod
    def _restore(reservation: Reservation, before: Reservation) -> None:
        reservation.actual_return_date = before.actual_return_date
        reservation.status = before.status
        reservation.late_fee = before.late_fee

    # ---- queries
    def get_reservation_by_id(self, reservation_id: str) -> Reservation:
        reservation = self.reservations.find_by_id(reservation_id)
        if reservation is None:
            raise ReservationNotFound(f"Reserva no encontrada con ID: {reservation_id}")
        return reservation

    def get_reservations_by_user_id(self, user_id: str) -> List[Reservation]:
        return self.reservations.find_by_user_id(user_id)

    def get_active_reservations(self) -> List[Reservation]:
        return self.reservations.find_by_status(ReservationStatus.ACTIVE)

    def get_all_reservations(self) -> List[Reservation]:
        return self.reservations.list_all()

    def get_overdue_reservations(self, as_of: Optional[date] = None) -> List[Reservation]:
        """Active reservations whose expected return date is before ``as_of`` (today by default)."""
        return self.reservations.find_overdue(as_of or date.today())

