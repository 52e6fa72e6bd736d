from typing import Dict, Optional
from decimal import Decimal
from sqlalchemy.orm import Session

from schooltrips.models import Trip
from schooltrips.trips.schemas import PriceConfig

def to_money(value) -> Decimal:
    """Coerce a stored amount to Decimal, treating missing values as zero"""
    if value is None:
        return Decimal('0')
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))

def to_money_map(values: Optional[Dict]) -> Dict[str, Decimal]:
    return {key: to_money(amount) for key, amount in (values or {}).items()}

class TripCatalog:
    """Read-only access to the trip catalog"""

    def __init__(self, db: Session):
        self.db = db

    def get_trip(self, trip_id: int) -> Optional[Trip]:
        return self.db.query(Trip).filter(Trip.id == trip_id).first()

    @staticmethod
    def price_config(trip: Trip) -> PriceConfig:
        """Build the price configuration for a trip, defaulting unset amounts to 0"""
        return PriceConfig(
            base_per_student=to_money(trip.base_per_student),
            base_per_adult=to_money(trip.base_per_adult),
            meal_per_person_per_day=to_money(trip.meal_per_person_per_day),
            transport_surcharge=to_money_map(trip.transport_surcharge),
            extras=to_money_map(trip.extras),
        )

    @staticmethod
    def available_extras(trip: Trip) -> Dict[str, Decimal]:
        return to_money_map(trip.available_extras)
