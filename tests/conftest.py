from decimal import Decimal

import pytest

from libreria import LibrarySystem, Settings


@pytest.fixture
def system():
    """In-memory LibrarySystem with default settings"""
    return LibrarySystem(Settings())


@pytest.fixture
def user(system):
    return system.create_user("Juan Pérez", "juan@example.com")


@pytest.fixture
def book(system):
    """15.99/day, 10 copies owned, 5 on the shelf"""
    b = system.add_book("The Lord of the Rings", "J.R.R. Tolkien", Decimal("15.99"), copies=10, book_id="258027")
    b.available_quantity = 5
    return b


@pytest.fixture
def service(system):
    return system.reservation_service
