"""
Booking lifecycle.

    PENDING   -> APPROVED | REJECTED
    APPROVED  -> CONFIRMED | CANCELLED
    CONFIRMED -> CANCELLED
    REJECTED, CANCELLED are terminal

Administrators move bookings along the table above. Clients have two
separate operations: confirm an approved booking, and cancel any booking that
is not already closed (including pending and confirmed ones).

The functions here only decide; they return the column values to write and
never touch the database. BookingOrchestrator applies them with a
compare-and-swap on the stored status.
"""

from typing import Dict, FrozenSet, Optional
from datetime import datetime

from schooltrips.bookings.schemas import BookingStatus
from schooltrips.exceptions import InvalidTransitionError

ALLOWED_TRANSITIONS: Dict[BookingStatus, FrozenSet[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.APPROVED, BookingStatus.REJECTED}),
    BookingStatus.APPROVED: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.CANCELLED}),
    BookingStatus.REJECTED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
}

TERMINAL_STATUSES = frozenset({BookingStatus.REJECTED, BookingStatus.CANCELLED})


def allowed_next_states(current: BookingStatus) -> FrozenSet[BookingStatus]:
    """Statuses an administrator may move a booking to from ``current``"""
    try:
        return ALLOWED_TRANSITIONS[current]
    except KeyError:
        raise ValueError(f"Unhandled booking status: {current!r}")


def is_terminal(status: BookingStatus) -> bool:
    return not allowed_next_states(status)


class BookingStateMachine:
    """Computes lifecycle updates for a booking"""

    @staticmethod
    def admin_transition(
        current: BookingStatus,
        target: BookingStatus,
        actor_id: int,
        now: datetime,
        notes: Optional[str] = None
    ) -> dict:
        if target not in allowed_next_states(current):
            raise InvalidTransitionError(current, target)

        update = {"status": target.value}
        if notes:
            update["admin_notes"] = notes
        if target in (BookingStatus.APPROVED, BookingStatus.REJECTED):
            update["reviewed_by"] = actor_id
            update["reviewed_at"] = now
        if target == BookingStatus.CONFIRMED:
            update["confirmed_at"] = now
        if target == BookingStatus.CANCELLED:
            update["cancelled_at"] = now
        return update

    @staticmethod
    def client_confirm(current: BookingStatus, now: datetime) -> dict:
        if current != BookingStatus.APPROVED:
            raise InvalidTransitionError(
                current, BookingStatus.CONFIRMED,
                "Booking must be approved before confirmation"
            )
        return {"status": BookingStatus.CONFIRMED.value, "confirmed_at": now}

    @staticmethod
    def client_cancel(current: BookingStatus, now: datetime, reason: Optional[str] = None) -> dict:
        if current in TERMINAL_STATUSES:
            raise InvalidTransitionError(
                current, BookingStatus.CANCELLED,
                "Booking already closed"
            )
        return {
            "status": BookingStatus.CANCELLED.value,
            "cancelled_at": now,
            "cancellation_reason": reason,
        }
