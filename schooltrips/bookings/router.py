from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from schooltrips.database import get_db
from schooltrips.clock import Clock, get_clock
from schooltrips.auth.dependencies import get_current_user, require_admin
from schooltrips.models import Booking as BookingModel
from schooltrips.bookings.schemas import (
    Booking, BookingCreateRequest, BookingStatusUpdate, BookingCancellationRequest,
    BookingStatus, BookingList, BookingKanban
)
from schooltrips.bookings.booking_service import BookingOrchestrator

router = APIRouter()

def booking_detail(booking: BookingModel) -> dict:
    """Flatten a stored booking into the response shape"""
    detail = {
        "id": booking.id,
        "client_id": booking.client_id,
        "trip_id": booking.trip_id,
        "config": {
            "students": booking.students,
            "adults": booking.adults,
            "start_date": booking.start_date,
            "meals_per_day": booking.meals_per_day,
            "transport_type": booking.transport_type,
            "selected_extras": booking.selected_extras or []
        },
        "price_breakdown": {
            "base_students": booking.base_students,
            "base_adults": booking.base_adults,
            "meals": booking.meals,
            "transport": booking.transport,
            "extras": booking.extras,
            "total": booking.total,
            "per_student": booking.per_student
        },
        "status": booking.status,
        "seats_reserved": booking.seats_reserved or 0,
        "client_notes": booking.client_notes,
        "admin_notes": booking.admin_notes,
        "reviewed_by": booking.reviewed_by,
        "reviewed_at": booking.reviewed_at,
        "confirmed_at": booking.confirmed_at,
        "cancelled_at": booking.cancelled_at,
        "cancellation_reason": booking.cancellation_reason,
        "created_at": booking.created_at,
        "updated_at": booking.updated_at,
        "trip": None,
        "client": None
    }

    if booking.trip:
        detail["trip"] = {
            "id": booking.trip.id,
            "title": booking.trip.title,
            "destination": booking.trip.destination,
            "duration_days": booking.trip.duration_days
        }

    if booking.client:
        detail["client"] = {
            "id": booking.client.id,
            "name": booking.client.name,
            "email": booking.client.email,
            "school": booking.client.school
        }

    return detail

def get_orchestrator(
    clock: Clock = Depends(get_clock),
    db: Session = Depends(get_db)
) -> BookingOrchestrator:
    return BookingOrchestrator(db, clock)

# Client Endpoints
@router.post("", response_model=Booking, status_code=status.HTTP_201_CREATED)
def create_booking(
    request: BookingCreateRequest,
    current_user = Depends(get_current_user),
    orchestrator: BookingOrchestrator = Depends(get_orchestrator)
):
    """Price a trip configuration and submit it as a pending booking"""
    booking = orchestrator.create_booking(current_user.id, request)
    return booking_detail(booking)

@router.get("/my", response_model=BookingList)
def get_my_bookings(
    booking_status: Optional[BookingStatus] = Query(None, alias="status", description="Filter by booking status"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_user = Depends(get_current_user),
    orchestrator: BookingOrchestrator = Depends(get_orchestrator)
):
    """List the caller's own bookings"""
    bookings, total = orchestrator.list_bookings(
        client_id=current_user.id, status=booking_status, page=page, limit=limit
    )
    return BookingList(
        bookings=[booking_detail(b) for b in bookings],
        total=total,
        page=page,
        limit=limit
    )

@router.get("/my/{booking_id}", response_model=Booking)
def get_my_booking(
    booking_id: int,
    current_user = Depends(get_current_user),
    orchestrator: BookingOrchestrator = Depends(get_orchestrator)
):
    """Get one of the caller's bookings"""
    return booking_detail(orchestrator.get_booking(booking_id, current_user.id))

@router.patch("/my/{booking_id}/confirm", response_model=Booking)
def confirm_my_booking(
    booking_id: int,
    current_user = Depends(get_current_user),
    orchestrator: BookingOrchestrator = Depends(get_orchestrator)
):
    """Confirm an approved booking"""
    return booking_detail(orchestrator.client_confirm(booking_id, current_user.id))

@router.patch("/my/{booking_id}/cancel", response_model=Booking)
def cancel_my_booking(
    booking_id: int,
    cancellation: Optional[BookingCancellationRequest] = None,
    current_user = Depends(get_current_user),
    orchestrator: BookingOrchestrator = Depends(get_orchestrator)
):
    """Cancel a booking that is not already closed"""
    reason = cancellation.reason if cancellation else None
    return booking_detail(orchestrator.client_cancel(booking_id, current_user.id, reason))

# Admin Endpoints
@router.get("/kanban", response_model=BookingKanban)
def get_kanban(
    admin = Depends(require_admin),
    orchestrator: BookingOrchestrator = Depends(get_orchestrator)
):
    """All bookings grouped by status"""
    board = orchestrator.kanban()
    return {
        booking_status.value: [booking_detail(b) for b in bookings]
        for booking_status, bookings in board.items()
    }

@router.get("", response_model=BookingList)
def get_all_bookings(
    booking_status: Optional[BookingStatus] = Query(None, alias="status", description="Filter by booking status"),
    trip_id: Optional[int] = Query(None, description="Filter by trip ID"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    admin = Depends(require_admin),
    orchestrator: BookingOrchestrator = Depends(get_orchestrator)
):
    """List all bookings"""
    bookings, total = orchestrator.list_bookings(
        status=booking_status, trip_id=trip_id, page=page, limit=limit
    )
    return BookingList(
        bookings=[booking_detail(b) for b in bookings],
        total=total,
        page=page,
        limit=limit
    )

@router.get("/{booking_id}", response_model=Booking)
def get_booking(
    booking_id: int,
    admin = Depends(require_admin),
    orchestrator: BookingOrchestrator = Depends(get_orchestrator)
):
    """Get any booking by ID"""
    return booking_detail(orchestrator.get_booking(booking_id))

@router.patch("/{booking_id}/status", response_model=Booking)
def update_booking_status(
    booking_id: int,
    status_update: BookingStatusUpdate,
    admin = Depends(require_admin),
    orchestrator: BookingOrchestrator = Depends(get_orchestrator)
):
    """Move a booking along its lifecycle"""
    booking = orchestrator.update_status(
        booking_id, status_update.status, admin.id, status_update.notes
    )
    return booking_detail(booking)
