"""
Tests for the booking lifecycle rules.
"""

from datetime import datetime, timezone

import pytest

from schooltrips.bookings.schemas import BookingStatus
from schooltrips.bookings.state_machine import (
    ALLOWED_TRANSITIONS,
    BookingStateMachine,
    allowed_next_states,
    is_terminal,
)
from schooltrips.exceptions import InvalidTransitionError

NOW = datetime(2025, 1, 1, 9, 30, tzinfo=timezone.utc)
ADMIN_ID = 7

ILLEGAL_PAIRS = [
    (current, target)
    for current in BookingStatus
    for target in BookingStatus
    if target not in ALLOWED_TRANSITIONS[current]
]


class TestTransitionTable:
    def test_every_status_has_an_entry(self):
        assert set(ALLOWED_TRANSITIONS) == set(BookingStatus)

    def test_table(self):
        assert allowed_next_states(BookingStatus.PENDING) == {BookingStatus.APPROVED, BookingStatus.REJECTED}
        assert allowed_next_states(BookingStatus.APPROVED) == {BookingStatus.CONFIRMED, BookingStatus.CANCELLED}
        assert allowed_next_states(BookingStatus.CONFIRMED) == {BookingStatus.CANCELLED}
        assert allowed_next_states(BookingStatus.REJECTED) == set()
        assert allowed_next_states(BookingStatus.CANCELLED) == set()

    def test_terminal_statuses(self):
        assert is_terminal(BookingStatus.REJECTED)
        assert is_terminal(BookingStatus.CANCELLED)
        assert not is_terminal(BookingStatus.CONFIRMED)


class TestAdminTransition:
    @pytest.mark.parametrize("current,target", ILLEGAL_PAIRS)
    def test_illegal_transitions_fail(self, current, target):
        with pytest.raises(InvalidTransitionError) as exc_info:
            BookingStateMachine.admin_transition(current, target, ADMIN_ID, NOW)
        assert f"{current.value} to {target.value}" in exc_info.value.message

    @pytest.mark.parametrize("target", [BookingStatus.APPROVED, BookingStatus.REJECTED])
    def test_review_stamps_reviewer(self, target):
        update = BookingStateMachine.admin_transition(BookingStatus.PENDING, target, ADMIN_ID, NOW)
        assert update == {"status": target.value, "reviewed_by": ADMIN_ID, "reviewed_at": NOW}

    def test_confirm_stamps_confirmed_at(self):
        update = BookingStateMachine.admin_transition(
            BookingStatus.APPROVED, BookingStatus.CONFIRMED, ADMIN_ID, NOW
        )
        assert update == {"status": "confirmed", "confirmed_at": NOW}

    def test_cancel_stamps_cancelled_at(self):
        update = BookingStateMachine.admin_transition(
            BookingStatus.CONFIRMED, BookingStatus.CANCELLED, ADMIN_ID, NOW
        )
        assert update == {"status": "cancelled", "cancelled_at": NOW}

    def test_notes_overwrite_admin_notes(self):
        update = BookingStateMachine.admin_transition(
            BookingStatus.PENDING, BookingStatus.APPROVED, ADMIN_ID, NOW, notes="Coach booked"
        )
        assert update["admin_notes"] == "Coach booked"


class TestClientOperations:
    def test_confirm_requires_approved(self):
        for status in BookingStatus:
            if status == BookingStatus.APPROVED:
                continue
            with pytest.raises(InvalidTransitionError):
                BookingStateMachine.client_confirm(status, NOW)

    def test_confirm_from_approved(self):
        update = BookingStateMachine.client_confirm(BookingStatus.APPROVED, NOW)
        assert update == {"status": "confirmed", "confirmed_at": NOW}

    @pytest.mark.parametrize("status", [BookingStatus.PENDING, BookingStatus.APPROVED, BookingStatus.CONFIRMED])
    def test_cancel_from_open_statuses(self, status):
        update = BookingStateMachine.client_cancel(status, NOW, "Exam clash")
        assert update == {"status": "cancelled", "cancelled_at": NOW, "cancellation_reason": "Exam clash"}

    @pytest.mark.parametrize("status", [BookingStatus.CANCELLED, BookingStatus.REJECTED])
    def test_cancel_closed_booking_fails(self, status):
        with pytest.raises(InvalidTransitionError, match="already closed"):
            BookingStateMachine.client_cancel(status, NOW)
