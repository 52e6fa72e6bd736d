import logging
from typing import List, Optional
from datetime import date
from sqlalchemy import and_, case
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from schooltrips.models import AvailabilitySlot
from schooltrips.availability.schemas import AvailabilityEntry, BulkUpsertResult
from schooltrips.exceptions import CapacityExceededError, NotFoundError
from schooltrips.trips.service import TripCatalog

logger = logging.getLogger("schooltrips.availability")

class AvailabilityLedger:
    """Per (trip, date) capacity records"""

    def __init__(self, db: Session):
        self.db = db

    def _require_trip(self, trip_id: int) -> None:
        if TripCatalog(self.db).get_trip(trip_id) is None:
            raise NotFoundError("Trip not found")

    def _slot_filter(self, trip_id: int, slot_date: date):
        return and_(AvailabilitySlot.trip_id == trip_id, AvailabilitySlot.date == slot_date)

    def get_slot(self, trip_id: int, slot_date: date) -> Optional[AvailabilitySlot]:
        return self.db.query(AvailabilitySlot).populate_existing().filter(
            self._slot_filter(trip_id, slot_date)
        ).first()

    def _upsert(self, trip_id: int, slot_date: date, total_capacity: int, is_available: bool) -> AvailabilitySlot:
        slot = self.get_slot(trip_id, slot_date)
        if slot:
            slot.total_capacity = total_capacity
            slot.is_available = is_available
            self.db.commit()
        else:
            slot = AvailabilitySlot(
                trip_id=trip_id,
                date=slot_date,
                total_capacity=total_capacity,
                booked_count=0,
                is_available=is_available
            )
            self.db.add(slot)
            try:
                self.db.commit()
            except IntegrityError:
                # A concurrent insert won the unique key; replace its values instead
                self.db.rollback()
                slot = self.get_slot(trip_id, slot_date)
                if slot is None:
                    raise
                slot.total_capacity = total_capacity
                slot.is_available = is_available
                self.db.commit()
        self.db.refresh(slot)
        return slot

    def upsert(self, trip_id: int, slot_date: date, total_capacity: int, is_available: bool = True) -> AvailabilitySlot:
        """Create or replace the (trip, date) record; booked_count is preserved"""
        self._require_trip(trip_id)
        slot = self._upsert(trip_id, slot_date, total_capacity, is_available)
        logger.info("Upserted availability trip=%s date=%s capacity=%s", trip_id, slot_date, total_capacity)
        return slot

    def bulk_upsert(self, trip_id: int, entries: List[AvailabilityEntry]) -> BulkUpsertResult:
        """Upsert each entry independently; a failing entry does not undo the others"""
        self._require_trip(trip_id)
        upserted = 0
        errors = []
        for entry in entries:
            try:
                self._upsert(trip_id, entry.date, entry.capacity, entry.capacity > 0)
                upserted += 1
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.warning("Bulk upsert failed trip=%s date=%s: %s", trip_id, entry.date, e)
                errors.append(f"{entry.date.isoformat()}: {e}")

        return BulkUpsertResult(upserted=upserted, failed=len(errors), errors=errors)

    def get_for_trip(
        self,
        trip_id: int,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None
    ) -> List[AvailabilitySlot]:
        """Slots for a trip in ascending date order, optionally range-filtered"""
        query = self.db.query(AvailabilitySlot).filter(AvailabilitySlot.trip_id == trip_id)
        if date_from:
            query = query.filter(AvailabilitySlot.date >= date_from)
        if date_to:
            query = query.filter(AvailabilitySlot.date <= date_to)
        return query.order_by(AvailabilitySlot.date).all()

    def get_available_dates(self, trip_id: int, date_from: date, date_to: date) -> List[AvailabilitySlot]:
        return self.db.query(AvailabilitySlot).filter(
            AvailabilitySlot.trip_id == trip_id,
            AvailabilitySlot.date >= date_from,
            AvailabilitySlot.date <= date_to,
            AvailabilitySlot.is_available == True
        ).order_by(AvailabilitySlot.date).all()

    def decrement_capacity(self, trip_id: int, slot_date: date, count: int) -> Optional[AvailabilitySlot]:
        """Consume capacity by atomically incrementing booked_count; no capacity check"""
        self.db.query(AvailabilitySlot).filter(self._slot_filter(trip_id, slot_date)).update(
            {AvailabilitySlot.booked_count: AvailabilitySlot.booked_count + count},
            synchronize_session=False
        )
        self.db.commit()
        return self.get_slot(trip_id, slot_date)

    def consume_capacity(self, trip_id: int, slot_date: date, count: int, commit: bool = True) -> int:
        """
        Reserve ``count`` seats if the slot can hold them.

        Returns the number of seats reserved: ``count`` on success, 0 when no
        slot exists for the date. Raises CapacityExceededError when a slot
        exists but is closed or too full. The check and the increment are a
        single conditional UPDATE.
        """
        updated = self.db.query(AvailabilitySlot).filter(
            self._slot_filter(trip_id, slot_date),
            AvailabilitySlot.is_available == True,
            AvailabilitySlot.booked_count + count <= AvailabilitySlot.total_capacity
        ).update(
            {AvailabilitySlot.booked_count: AvailabilitySlot.booked_count + count},
            synchronize_session=False
        )
        if updated:
            if commit:
                self.db.commit()
            return count

        slot = self.get_slot(trip_id, slot_date)
        if slot is None:
            return 0

        remaining = max(0, slot.total_capacity - slot.booked_count)
        logger.warning(
            "Capacity refused trip=%s date=%s requested=%s remaining=%s available=%s",
            trip_id, slot_date, count, remaining, slot.is_available
        )
        if not slot.is_available:
            raise CapacityExceededError(f"Trip is not available on {slot_date.isoformat()}")
        raise CapacityExceededError(
            f"Not enough capacity on {slot_date.isoformat()}: requested {count}, remaining {remaining}"
        )

    def release_capacity(self, trip_id: int, slot_date: date, count: int, commit: bool = True) -> None:
        """Return seats to the slot; booked_count never drops below 0"""
        self.db.query(AvailabilitySlot).filter(self._slot_filter(trip_id, slot_date)).update(
            {AvailabilitySlot.booked_count: case(
                (AvailabilitySlot.booked_count >= count, AvailabilitySlot.booked_count - count),
                else_=0
            )},
            synchronize_session=False
        )
        if commit:
            self.db.commit()
