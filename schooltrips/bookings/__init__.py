"""
Booking Module

Booking requests for school trips and their lifecycle.

Key Components:
- booking_service.py: BookingOrchestrator; prices a configuration through the
  QuoteCalculator, reserves seats in the availability ledger and applies
  status transitions with a compare-and-swap on the stored status
- state_machine.py: transition table and lifecycle timestamp stamping
- router.py: client self-service and administrator endpoints
- schemas.py: Pydantic models for bookings

Lifecycle:
- pending -> approved | rejected
- approved -> confirmed | cancelled
- confirmed -> cancelled
- clients may confirm an approved booking and cancel any booking that is not
  already cancelled or rejected
"""

from .router import router
from .booking_service import BookingOrchestrator
from .state_machine import BookingStateMachine, allowed_next_states, ALLOWED_TRANSITIONS
from .schemas import (
    BookingStatus, BookingCreateRequest, BookingStatusUpdate,
    BookingCancellationRequest, Booking, BookingList, BookingKanban
)

__all__ = [
    "router",
    "BookingOrchestrator",
    "BookingStateMachine",
    "allowed_next_states",
    "ALLOWED_TRANSITIONS",
    "BookingStatus",
    "BookingCreateRequest",
    "BookingStatusUpdate",
    "BookingCancellationRequest",
    "Booking",
    "BookingList",
    "BookingKanban"
]
