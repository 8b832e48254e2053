"""
SQLAlchemy-backed collaborators.

Tables mirror the domain dataclasses: ``users``, ``books`` and
``reservations``. The repositories expose the same methods as the in-memory
ones in ``repositories`` so ``LibrarySystem`` can use either.

``SqlBookRepo`` keeps an identity map of loaded books: every caller in the
process gets the same ``Book`` instance, which is what the availability
ledger locks around.
"""

from __future__ import annotations
from datetime import date
import logging
import threading
from typing import Dict, List, Optional

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    create_engine,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, relationship, sessionmaker
from sqlalchemy.pool import StaticPool

from .domain import Book, Reservation, ReservationStatus, User, new_id

logger = logging.getLogger(__name__)

Base = declarative_base()


class UserRow(Base):
    """users table - library members"""
    __tablename__ = "users"

    user_id = Column(String(32), primary_key=True)
    name = Column(String(200), nullable=False)
    email = Column(String(200), nullable=False)
    phone = Column(String(50), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)

    reservations = relationship("ReservationRow", back_populates="user")

    def __repr__(self):
        return f"<UserRow(id={self.user_id}, name='{self.name}')>"

    @classmethod
    def from_domain(cls, user: User) -> "UserRow":
        return cls(
            user_id=user.user_id,
            name=user.name,
            email=user.email,
            phone=user.phone,
            created_at=user.created_at,
        )

    def to_domain(self) -> User:
        return User(
            user_id=self.user_id,
            name=self.name,
            email=self.email,
            phone=self.phone,
            created_at=self.created_at,
        )


class BookRow(Base):
    """books table - catalog titles and their copy counters"""
    __tablename__ = "books"

    book_id = Column(String(32), primary_key=True)
    title = Column(String(500), nullable=False)
    author = Column(String(200), nullable=False, default="")
    price = Column(Numeric(10, 2), nullable=False)
    stock_quantity = Column(Integer, nullable=False)
    available_quantity = Column(Integer, nullable=False)

    reservations = relationship("ReservationRow", back_populates="book")

    def __repr__(self):
        return f"<BookRow(id={self.book_id}, title='{self.title}', available={self.available_quantity})>"

    @classmethod
    def from_domain(cls, book: Book) -> "BookRow":
        return cls(
            book_id=book.book_id,
            title=book.title,
            author=book.author,
            price=book.price,
            stock_quantity=book.stock_quantity,
            available_quantity=book.available_quantity,
        )

    def to_domain(self) -> Book:
        return Book(
            book_id=self.book_id,
            title=self.title,
            author=self.author,
            price=self.price,
            stock_quantity=self.stock_quantity,
            available_quantity=self.available_quantity,
        )


class ReservationRow(Base):
    """reservations table - one row per checkout, updated once at return"""
    __tablename__ = "reservations"

    reservation_id = Column(String(32), primary_key=True)
    user_id = Column(String(32), ForeignKey("users.user_id"), nullable=False)
    book_id = Column(String(32), ForeignKey("books.book_id"), nullable=False)

    rental_days = Column(Integer, nullable=False)
    start_date = Column(Date, nullable=False)
    expected_return_date = Column(Date, nullable=False)
    actual_return_date = Column(Date, nullable=True)
    daily_rate = Column(Numeric(10, 2), nullable=False)
    total_fee = Column(Numeric(10, 2), nullable=False)
    late_fee = Column(Numeric(10, 2), nullable=False)
    status = Column(SAEnum(ReservationStatus), nullable=False, default=ReservationStatus.ACTIVE)
    created_at = Column(DateTime(timezone=True), nullable=False)

    user = relationship("UserRow", back_populates="reservations")
    book = relationship("BookRow", back_populates="reservations")

    def __repr__(self):
        return f"<ReservationRow(id={self.reservation_id}, book_id={self.book_id}, status={self.status})>"

    @classmethod
    def from_domain(cls, r: Reservation) -> "ReservationRow":
        return cls(
            reservation_id=r.reservation_id,
            user_id=r.user_id,
            book_id=r.book_id,
            rental_days=r.rental_days,
            start_date=r.start_date,
            expected_return_date=r.expected_return_date,
            actual_return_date=r.actual_return_date,
            daily_rate=r.daily_rate,
            total_fee=r.total_fee,
            late_fee=r.late_fee,
            status=r.status,
            created_at=r.created_at,
        )


def create_session_factory(database_url: str, echo: bool = False) -> sessionmaker:
    """Create the engine and tables for ``database_url`` and return a session factory."""
    kwargs = {"echo": echo}
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        # one shared connection, otherwise each thread sees an empty database
        kwargs.update(poolclass=StaticPool, connect_args={"check_same_thread": False})
    engine: Engine = create_engine(database_url, **kwargs)
    Base.metadata.create_all(engine)
    logger.info("database ready at %s", engine.url.render_as_string(hide_password=True))
    return sessionmaker(bind=engine, expire_on_commit=False)


class SqlUserRepo:
    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    def add(self, user: User) -> None:
        with self._session_factory.begin() as session:
            session.merge(UserRow.from_domain(user))

    def get(self, user_id: str) -> Optional[User]:
        with self._session_factory() as session:
            row = session.get(UserRow, user_id)
            return row.to_domain() if row else None

    def list_all(self) -> List[User]:
        with self._session_factory() as session:
            return [row.to_domain() for row in session.query(UserRow).order_by(UserRow.name)]


class SqlBookRepo:
    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory
        self._live: Dict[str, Book] = {}
        self._lock = threading.Lock()

    def _attach(self, row: BookRow) -> Book:
        # caller holds self._lock
        book = self._live.get(row.book_id)
        if book is None:
            book = self._live[row.book_id] = row.to_domain()
        return book

    def add_book(self, book: Book) -> None:
        self.save(book)

    def get_book(self, book_id: str) -> Optional[Book]:
        with self._lock:
            if book_id in self._live:
                return self._live[book_id]
            with self._session_factory() as session:
                row = session.get(BookRow, book_id)
                return self._attach(row) if row else None

    def save(self, book: Book) -> Book:
        with self._session_factory.begin() as session:
            session.merge(BookRow.from_domain(book))
        with self._lock:
            self._live[book.book_id] = book
        return book

    def list_books(self) -> List[Book]:
        with self._lock, self._session_factory() as session:
            return [self._attach(row) for row in session.query(BookRow).order_by(BookRow.title)]

    def search(self, text: str) -> List[Book]:
        pattern = f"%{text.strip()}%"
        with self._lock, self._session_factory() as session:
            rows = session.query(BookRow).filter(
                BookRow.title.ilike(pattern) | BookRow.author.ilike(pattern) | BookRow.book_id.ilike(pattern)
            )
            return [self._attach(row) for row in rows]


class SqlReservationRepo:
    def __init__(self, session_factory: sessionmaker, users: SqlUserRepo, books: SqlBookRepo) -> None:
        self._session_factory = session_factory
        self.users = users
        self.books = books

    def _to_domain(self, row: ReservationRow) -> Reservation:
        user = self.users.get(row.user_id)
        book = self.books.get_book(row.book_id)
        if user is None or book is None:
            raise LookupError(f"reservation {row.reservation_id} references a missing user or book")
        return Reservation(
            reservation_id=row.reservation_id,
            user=user,
            book=book,
            rental_days=row.rental_days,
            start_date=row.start_date,
            expected_return_date=row.expected_return_date,
            actual_return_date=row.actual_return_date,
            daily_rate=row.daily_rate,
            total_fee=row.total_fee,
            late_fee=row.late_fee,
            status=row.status,
            created_at=row.created_at,
        )

    def _query(self, *criteria) -> List[Reservation]:
        with self._session_factory() as session:
            rows = session.query(ReservationRow).filter(*criteria).order_by(ReservationRow.created_at).all()
        return [self._to_domain(row) for row in rows]

    def save(self, r: Reservation) -> Reservation:
        reservation_id = r.reservation_id or new_id("res")
        row = ReservationRow.from_domain(r)
        row.reservation_id = reservation_id
        with self._session_factory.begin() as session:
            session.merge(row)
        # only assign once the row is stored
        r.reservation_id = reservation_id
        return r

    def find_by_id(self, reservation_id: str) -> Optional[Reservation]:
        with self._session_factory() as session:
            row = session.get(ReservationRow, reservation_id)
        return self._to_domain(row) if row else None

    def find_by_user_id(self, user_id: str) -> List[Reservation]:
        return self._query(ReservationRow.user_id == user_id)

    def find_by_status(self, status: ReservationStatus) -> List[Reservation]:
        return self._query(ReservationRow.status == status)

    def find_overdue(self, as_of: date) -> List[Reservation]:
        return self._query(
            ReservationRow.status == ReservationStatus.ACTIVE,
            ReservationRow.expected_return_date < as_of,
        )

    def list_all(self) -> List[Reservation]:
        return self._query()
