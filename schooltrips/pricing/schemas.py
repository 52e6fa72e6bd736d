from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import datetime, date
from decimal import Decimal
from enum import Enum

from schooltrips.trips.schemas import TransportType

class RuleType(str, Enum):
    """Advisory label for a pricing rule; evaluation ignores it"""
    EARLY_BIRD = "early_bird"
    GROUP_DISCOUNT = "group_discount"
    SEASONAL = "seasonal"
    FLAT = "flat"

class DiscountType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"

# Quote Models
class QuoteRequest(BaseModel):
    """Trip configuration to price"""
    trip_id: int
    students: int = Field(..., ge=1)
    adults: int = Field(0, ge=0)
    start_date: date
    meals_per_day: int = Field(..., ge=0)
    transport_type: TransportType
    selected_extras: List[str] = []

class QuoteResult(BaseModel):
    """Computed, non-binding price for a trip configuration"""
    base_students: Decimal
    base_adults: Decimal
    meals: Decimal
    transport: Decimal
    extras: Decimal
    discount: Decimal
    total: Decimal
    per_student: Decimal
    applied_rules: List[str] = []

class DiscountResult(BaseModel):
    amount: Decimal
    applied_rule_names: List[str] = []

# Pricing Rule Models
class PricingRuleBase(BaseModel):
    name: str = Field(..., min_length=1)
    trip_id: Optional[int] = None
    rule_type: RuleType
    discount_type: DiscountType
    discount_value: Decimal = Field(..., ge=0)
    min_students: Optional[int] = Field(None, ge=0)
    max_students: Optional[int] = Field(None, ge=0)
    valid_from: Optional[date] = None
    valid_to: Optional[date] = None
    days_before_trip: Optional[int] = Field(None, ge=0)
    is_active: bool = True

class PricingRuleCreate(PricingRuleBase):
    pass

class PricingRuleUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    trip_id: Optional[int] = None
    rule_type: Optional[RuleType] = None
    discount_type: Optional[DiscountType] = None
    discount_value: Optional[Decimal] = Field(None, ge=0)
    min_students: Optional[int] = Field(None, ge=0)
    max_students: Optional[int] = Field(None, ge=0)
    valid_from: Optional[date] = None
    valid_to: Optional[date] = None
    days_before_trip: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None

    @field_validator("name", "rule_type", "discount_type", "discount_value", "is_active")
    def reject_null(cls, v):
        if v is None:
            raise ValueError("may be omitted but not null")
        return v

class PricingRule(PricingRuleBase):
    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
