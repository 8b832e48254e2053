from __future__ import annotations
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Dict, FrozenSet

from .domain import Reservation, ReservationStatus
from .errors import InvalidState
from .fees import LATE_FEE_RATE, ZERO, Money, compute_late_fee, days_late

TRANSITIONS: Dict[ReservationStatus, FrozenSet[ReservationStatus]] = {
    ReservationStatus.ACTIVE: frozenset({ReservationStatus.RETURNED, ReservationStatus.OVERDUE}),
    ReservationStatus.RETURNED: frozenset(),
    ReservationStatus.OVERDUE: frozenset(),
}


@dataclass(frozen=True)
class ReturnOutcome:
    status: ReservationStatus
    late_fee: Decimal
    days_late: int


class ReservationStateMachine:
    """
    Single place where reservation status changes are decided.

    ACTIVE is the only non-terminal state; a return moves it to RETURNED
    (on time or early) or OVERDUE (late, with a late fee).
    """

    def __init__(self, late_fee_rate: Money = LATE_FEE_RATE) -> None:
        self.late_fee_rate = late_fee_rate

    @staticmethod
    def can_transition(source: ReservationStatus, target: ReservationStatus) -> bool:
        return target in TRANSITIONS[source]

    @staticmethod
    def ensure_active(reservation: Reservation) -> None:
        if reservation.status != ReservationStatus.ACTIVE:
            raise InvalidState(
                f"La reserva {reservation.reservation_id} no está activa ({reservation.status.value})"
            )

    def resolve_return(self, reservation: Reservation, actual_return_date: date) -> ReturnOutcome:
        self.ensure_active(reservation)
        if actual_return_date <= reservation.expected_return_date:
            return ReturnOutcome(ReservationStatus.RETURNED, ZERO, 0)
        late = days_late(reservation.expected_return_date, actual_return_date)
        fee = compute_late_fee(reservation.daily_rate, late, self.late_fee_rate)
        return ReturnOutcome(ReservationStatus.OVERDUE, fee, late)

    def apply_return(self, reservation: Reservation, actual_return_date: date) -> ReturnOutcome:
        outcome = self.resolve_return(reservation, actual_return_date)
        reservation.actual_return_date = actual_return_date
        reservation.status = outcome.status
        reservation.late_fee = outcome.late_fee
        return outcome
