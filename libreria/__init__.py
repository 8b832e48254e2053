"""
libreria reservation core.

Exports key modules for convenient imports.
"""

from .domain import (
    User,
    Book,
    ReservationStatus,
    Reservation,
)

from .errors import (
    LibraryError,
    UserNotFound,
    BookNotFound,
    OutOfStock,
    InvalidDuration,
    InvalidState,
    ReservationNotFound,
)

from .fees import (
    LATE_FEE_RATE,
    compute_total_fee,
    compute_late_fee,
)

from .ledger import AvailabilityLedger
from .state_machine import ReservationStateMachine, ReturnOutcome

from .repositories import (
    UserRepo,
    BookRepo,
    ReservationRepo,
)

from .services import (
    UserService,
    CatalogService,
    ReservationService,
)

from .config import Settings, load_settings, setup_logging
from .api import LibrarySystem
from .seed import seed_demo_data

__all__ = [
    # domain
    "User",
    "Book",
    "ReservationStatus",
    "Reservation",
    # errors
    "LibraryError",
    "UserNotFound",
    "BookNotFound",
    "OutOfStock",
    "InvalidDuration",
    "InvalidState",
    "ReservationNotFound",
    # core
    "LATE_FEE_RATE",
    "compute_total_fee",
    "compute_late_fee",
    "AvailabilityLedger",
    "ReservationStateMachine",
    "ReturnOutcome",
    # repos
    "UserRepo",
    "BookRepo",
    "ReservationRepo",
    # services
    "UserService",
    "CatalogService",
    "ReservationService",
    # config
    "Settings",
    "load_settings",
    "setup_logging",
    # api
    "LibrarySystem",
    # seed
    "seed_demo_data",
]
