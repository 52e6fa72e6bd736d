from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime, date

class AvailabilityUpsert(BaseModel):
    """Create or replace the capacity record for one date"""
    date: date
    capacity: int = Field(..., ge=0)
    is_available: bool = True

class AvailabilityEntry(BaseModel):
    date: date
    capacity: int = Field(..., ge=0)

class AvailabilityBulkUpsert(BaseModel):
    dates: List[AvailabilityEntry]

class AvailabilitySlot(BaseModel):
    id: int
    trip_id: int
    date: date
    total_capacity: int
    booked_count: int
    is_available: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class BulkUpsertResult(BaseModel):
    upserted: int
    failed: int
    errors: List[str] = []
