"""
Discount rule evaluation.

Rules are fetched by the caller and evaluated here in-process. Every
applicable rule contributes; contributions are summed rather than picking the
single best discount.
"""

from typing import Iterable, List
from datetime import date, datetime, time, timezone
from decimal import Decimal, ROUND_HALF_UP

from schooltrips.models import PricingRule
from schooltrips.pricing.schemas import DiscountType, DiscountResult

CENT = Decimal('0.01')

def round2(amount: Decimal) -> Decimal:
    """Round to cents, half-up"""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)

def midnight_utc(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)

def days_until(start_date: date, now: datetime) -> int:
    """Whole days from ``now`` until midnight UTC of ``start_date``, floored"""
    return (midnight_utc(start_date) - now).days

class DiscountRuleEngine:
    """Evaluates pricing rules against a candidate booking configuration"""

    @staticmethod
    def is_candidate(rule: PricingRule, trip_id: int, now: datetime) -> bool:
        """Scope, active flag and validity window; bounds are midnight UTC of their date"""
        if rule.trip_id is not None and rule.trip_id != trip_id:
            return False
        if not rule.is_active:
            return False
        if rule.valid_from is not None and midnight_utc(rule.valid_from) > now:
            return False
        if rule.valid_to is not None and midnight_utc(rule.valid_to) < now:
            return False
        return True

    @staticmethod
    def is_applicable(rule: PricingRule, students: int, start_date: date, now: datetime) -> bool:
        """Eligibility constraints; a zero limit counts as unset"""
        if rule.min_students and students < rule.min_students:
            return False
        if rule.max_students and students > rule.max_students:
            return False
        if rule.days_before_trip and days_until(start_date, now) < rule.days_before_trip:
            return False
        return True

    @staticmethod
    def contribution(rule: PricingRule, subtotal: Decimal) -> Decimal:
        value = Decimal(str(rule.discount_value))
        if DiscountType(rule.discount_type) == DiscountType.PERCENTAGE:
            return subtotal * value / Decimal('100')
        return value

    def evaluate(
        self,
        rules: Iterable[PricingRule],
        trip_id: int,
        students: int,
        start_date: date,
        subtotal: Decimal,
        now: datetime
    ) -> DiscountResult:
        """Sum the discounts of every applicable rule, in the order given"""
        amount = Decimal('0')
        applied: List[str] = []

        for rule in rules:
            if not self.is_candidate(rule, trip_id, now):
                continue
            if not self.is_applicable(rule, students, start_date, now):
                continue
            amount += self.contribution(rule, subtotal)
            applied.append(rule.name)

        return DiscountResult(amount=round2(amount), applied_rule_names=applied)
