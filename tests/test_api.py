"""
Tests for the LibrarySystem facade, seed data and demo script
"""

from datetime import date, timedelta
from decimal import Decimal

from libreria import LibrarySystem, Settings, seed_demo_data
from libreria.domain import ReservationStatus

import demo

TODAY = date(2024, 3, 15)


def test_seed_demo_data(system):
    seed_demo_data(system, TODAY)

    inventory = {book.title: (stock, available) for book, stock, available in system.report_inventory()}

    assert inventory["The Lord of the Rings"] == (10, 9)
    assert inventory["Dune"] == (2, 1)
    assert inventory["Clean Code"] == (1, 1)
    assert len(system.active_reservations()) == 2
    assert [r.book_title for r in system.report_overdue(TODAY)] == ["Dune"]


def test_search_books(system):
    system.add_book("Dune", "Frank Herbert", "9.50")
    system.add_book("Clean Code", "Robert C. Martin", "12.00")

    assert [b.title for b in system.search_books("HERBERT")] == ["Dune"]
    assert [b.title for b in system.search_books("clean")] == ["Clean Code"]


def test_facade_round_trip(system):
    user = system.create_user("Juan Pérez", "juan@example.com")
    book = system.add_book("The Lord of the Rings", "J.R.R. Tolkien", "15.99", copies=2)

    r = system.reserve(user.user_id, book.book_id, 7, TODAY - timedelta(days=10))
    assert system.get_reservation(r.reservation_id) is r
    assert system.reservations_for_user(user.user_id) == [r]

    returned = system.return_book(r.reservation_id, TODAY)

    assert returned.status == ReservationStatus.OVERDUE
    assert returned.late_fee == Decimal("7.20")
    assert system.active_reservations() == []


def test_late_fee_rate_comes_from_settings():
    system = LibrarySystem(Settings(late_fee_rate="0.5"))
    user = system.create_user("Juan Pérez", "juan@example.com")
    book = system.add_book("Dune", "Frank Herbert", "10.00")

    r = system.reserve(user.user_id, book.book_id, 1, TODAY - timedelta(days=3))
    returned = system.return_book(r.reservation_id, TODAY)

    assert returned.late_fee == Decimal("10.00")


def test_demo_flow_runs(capsys, monkeypatch):
    monkeypatch.delenv("LIBRERIA_DATABASE_URL", raising=False)
    monkeypatch.setattr(demo, "setup_logging", lambda level: None)
    demo.demo_flow(["--log-level", "WARNING"])

    out = capsys.readouterr().out
    assert "[demo] inventory:" in out
    assert "second checkout of Clean Code: DENIED (El libro está agotado)" in out
