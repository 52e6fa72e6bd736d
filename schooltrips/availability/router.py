from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date

from schooltrips.database import get_db
from schooltrips.auth.dependencies import get_current_user, require_admin
from schooltrips.availability.schemas import (
    AvailabilitySlot, AvailabilityUpsert, AvailabilityBulkUpsert, BulkUpsertResult
)
from schooltrips.availability.service import AvailabilityLedger

router = APIRouter()

@router.get("/trips/{trip_id}", response_model=List[AvailabilitySlot])
def get_trip_availability(
    trip_id: int,
    date_from: Optional[date] = Query(None, alias="from", description="First date (inclusive)"),
    date_to: Optional[date] = Query(None, alias="to", description="Last date (inclusive)"),
    current_user = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get capacity records for a trip in date order"""
    return AvailabilityLedger(db).get_for_trip(trip_id, date_from, date_to)

@router.get("/trips/{trip_id}/available-dates", response_model=List[AvailabilitySlot])
def get_available_dates(
    trip_id: int,
    date_from: date = Query(..., alias="from", description="First date (inclusive)"),
    date_to: date = Query(..., alias="to", description="Last date (inclusive)"),
    current_user = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get open dates for a trip within a range"""
    return AvailabilityLedger(db).get_available_dates(trip_id, date_from, date_to)

@router.post("/trips/{trip_id}", response_model=AvailabilitySlot)
def upsert_availability(
    trip_id: int,
    body: AvailabilityUpsert,
    admin = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Create or replace the capacity for one date"""
    return AvailabilityLedger(db).upsert(trip_id, body.date, body.capacity, body.is_available)

@router.post("/trips/{trip_id}/bulk", response_model=BulkUpsertResult)
def bulk_upsert_availability(
    trip_id: int,
    body: AvailabilityBulkUpsert,
    admin = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Set capacity for many dates; a date with capacity 0 is closed"""
    return AvailabilityLedger(db).bulk_upsert(trip_id, body.dates)
