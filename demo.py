from __future__ import annotations
import argparse
from datetime import date

from libreria import LibrarySystem, OutOfStock, load_settings, seed_demo_data, setup_logging


def parse_arguments(argv=None):
    parser = argparse.ArgumentParser(description="libreria reservation demo")

    parser.add_argument(
        "--database-url",
        default=None,
        help="SQLAlchemy URL, e.g. sqlite:///libreria.db (default: in memory)",
    )

    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (default: INFO or LIBRERIA_LOG_LEVEL)",
    )

    return parser.parse_args(argv)


def demo_flow(argv=None) -> None:
    args = parse_arguments(argv)
    settings = load_settings(database_url=args.database_url, log_level=args.log_level)
    setup_logging(settings.log_level)

    sys = LibrarySystem(settings)
    today = date.today()
    seed_demo_data(sys, today)

    # Search
    print("\n[demo] search 'dune':", [b.title for b in sys.search_books("dune")])

    # Report inventory
    print("\n[demo] inventory:")
    for book, stock, available in sys.report_inventory():
        print(f"  - {book.title}: stock={stock}, available={available}")

    # Overdue report
    overdue = sys.report_overdue(today)
    print("\n[demo] overdue reservations:", [r.reservation_id for r in overdue])

    # Return everything that is out
    for r in sys.active_reservations():
        returned = sys.return_book(r.reservation_id, today)
        print(
            f"[demo] returned {returned.book_title}: status={returned.status.value}, "
            f"fee={returned.total_fee}, late_fee={returned.late_fee}"
        )

    # The single copy of Clean Code can only go out once
    clean_code = sys.search_books("clean code")[0]
    users = sys.users.list_all()
    sys.reserve(users[0].user_id, clean_code.book_id, 3)
    try:
        sys.reserve(users[1].user_id, clean_code.book_id, 3)
        print("\n[demo] second checkout of Clean Code: SUCCESS")
    except OutOfStock as exc:
        print(f"\n[demo] second checkout of Clean Code: DENIED ({exc})")


if __name__ == "__main__":
    demo_flow()
