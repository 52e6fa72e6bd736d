"""
Availability Module

Capacity per trip and calendar date. Administrators set total capacity;
bookings consume seats through an atomic conditional increment of
``booked_count`` and release them when the booking is cancelled or rejected.
"""

from .router import router
from .service import AvailabilityLedger
from .schemas import AvailabilitySlot, AvailabilityUpsert, AvailabilityBulkUpsert, BulkUpsertResult

__all__ = [
    "router",
    "AvailabilityLedger",
    "AvailabilitySlot",
    "AvailabilityUpsert",
    "AvailabilityBulkUpsert",
    "BulkUpsertResult"
]
