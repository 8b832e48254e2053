from __future__ import annotations
from datetime import date
from typing import Dict, List, Optional

from .domain import Book, Reservation, ReservationStatus, User, new_id


class UserRepo:
    def __init__(self) -> None:
        self._users: Dict[str, User] = {}

    def add(self, user: User) -> None:
        self._users[user.user_id] = user

    def get(self, user_id: str) -> Optional[User]:
        return self._users.get(user_id)

    def list_all(self) -> List[User]:
        return list(self._users.values())


class BookRepo:
    def __init__(self) -> None:
        self._books: Dict[str, Book] = {}

    def add_book(self, book: Book) -> None:
        self._books[book.book_id] = book

    def get_book(self, book_id: str) -> Optional[Book]:
        return self._books.get(book_id)

    def save(self, book: Book) -> Book:
        self._books[book.book_id] = book
        return book

    def list_books(self) -> List[Book]:
        return list(self._books.values())

    def search(self, text: str) -> List[Book]:
        t = text.lower().strip()

        def matches(b: Book) -> bool:
            return t in b.title.lower() or t in b.author.lower() or t in b.book_id.lower()

        return [b for b in self._books.values() if matches(b)]


class ReservationRepo:
    def __init__(self) -> None:
        self._reservations: Dict[str, Reservation] = {}

    def save(self, r: Reservation) -> Reservation:
        if r.reservation_id is None:
            r.reservation_id = new_id("res")
        self._reservations[r.reservation_id] = r
        return r

    def find_by_id(self, reservation_id: str) -> Optional[Reservation]:
        return self._reservations.get(reservation_id)

    def find_by_user_id(self, user_id: str) -> List[Reservation]:
        return [r for r in self.list_all() if r.user_id == user_id]

    def find_by_status(self, status: ReservationStatus) -> List[Reservation]:
        return [r for r in self.list_all() if r.status == status]

    def find_overdue(self, as_of: date) -> List[Reservation]:
        return [r for r in self.list_all() if r.is_overdue(as_of)]

    def list_all(self) -> List[Reservation]:
        return list(self._reservations.values())
