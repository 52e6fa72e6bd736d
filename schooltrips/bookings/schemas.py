from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime, date
from decimal import Decimal
from enum import Enum

from schooltrips.trips.schemas import TransportType

class BookingStatus(str, Enum):
    """Booking lifecycle status"""
    PENDING = "pending"
    APPROVED = "approved"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    REJECTED = "rejected"

# Request Models
class BookingCreateRequest(BaseModel):
    """Request to book a trip; mirrors the quote input"""
    trip_id: int
    students: int = Field(..., ge=1)
    adults: int = Field(0, ge=0)
    start_date: date
    meals_per_day: int = Field(..., ge=0)
    transport_type: TransportType
    selected_extras: List[str] = []
    client_notes: Optional[str] = None

class BookingStatusUpdate(BaseModel):
    """Administrator status change"""
    status: BookingStatus
    notes: Optional[str] = None

class BookingCancellationRequest(BaseModel):
    reason: Optional[str] = None

# Response Models
class BookingConfig(BaseModel):
    """Trip configuration frozen at booking time"""
    students: int
    adults: int
    start_date: date
    meals_per_day: int
    transport_type: TransportType
    selected_extras: List[str] = []

class PriceBreakdown(BaseModel):
    """Quote captured at booking time"""
    base_students: Decimal
    base_adults: Decimal
    meals: Decimal
    transport: Decimal
    extras: Decimal
    total: Decimal
    per_student: Decimal

class TripSummary(BaseModel):
    id: int
    title: str
    destination: str
    duration_days: int

class ClientSummary(BaseModel):
    id: int
    name: str
    email: str
    school: Optional[str] = None

class Booking(BaseModel):
    id: int
    client_id: int
    trip_id: int
    config: BookingConfig
    price_breakdown: PriceBreakdown
    status: BookingStatus
    seats_reserved: int = 0
    client_notes: Optional[str] = None
    admin_notes: Optional[str] = None
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    confirmed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    cancellation_reason: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    trip: Optional[TripSummary] = None
    client: Optional[ClientSummary] = None

class BookingList(BaseModel):
    bookings: List[Booking]
    total: int
    page: int
    limit: int

class BookingKanban(BaseModel):
    """All bookings grouped by status"""
    pending: List[Booking] = []
    approved: List[Booking] = []
    confirmed: List[Booking] = []
    cancelled: List[Booking] = []
    rejected: List[Booking] = []
