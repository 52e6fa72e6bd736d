from pydantic import BaseModel, Field
from typing import Dict
from decimal import Decimal
from enum import Enum

class TransportType(str, Enum):
    """Ways a group can travel to the destination"""
    BUS = "bus"
    TRAIN = "train"
    FLIGHT = "flight"
    FERRY = "ferry"

class PriceConfig(BaseModel):
    """Immutable per-trip price configuration"""
    base_per_student: Decimal = Field(Decimal('0'), ge=0)
    base_per_adult: Decimal = Field(Decimal('0'), ge=0)
    meal_per_person_per_day: Decimal = Field(Decimal('0'), ge=0)
    transport_surcharge: Dict[str, Decimal] = {}
    extras: Dict[str, Decimal] = {}

    class Config:
        frozen = True
