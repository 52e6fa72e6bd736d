from typing import Dict, Iterable, List
from datetime import date
from decimal import Decimal
from sqlalchemy.orm import Session

from schooltrips.clock import Clock, SystemClock
from schooltrips.exceptions import NotFoundError
from schooltrips.pricing.discount_engine import DiscountRuleEngine, round2
from schooltrips.pricing.rule_service import PricingRuleService
from schooltrips.pricing.schemas import QuoteRequest, QuoteResult
from schooltrips.trips.schemas import PriceConfig, TransportType
from schooltrips.trips.service import TripCatalog

class QuoteCalculator:
    """Prices a trip configuration against the catalog and active discount rules"""

    def __init__(self, db: Session, clock: Clock = None):
        self.db = db
        self.clock = clock or SystemClock()
        self.catalog = TripCatalog(db)
        self.rule_service = PricingRuleService(db)
        self.discount_engine = DiscountRuleEngine()

    def calculate_quote(self, request: QuoteRequest) -> QuoteResult:
        """Calculate a quote; raises NotFoundError for an unknown trip"""

        trip = self.catalog.get_trip(request.trip_id)
        if not trip:
            raise NotFoundError("Trip not found")

        return self.price(
            price_config=TripCatalog.price_config(trip),
            available_extras=TripCatalog.available_extras(trip),
            duration_days=trip.duration_days,
            rules=self.rule_service.rules_in_scope(trip.id),
            trip_id=trip.id,
            students=request.students,
            adults=request.adults,
            start_date=request.start_date,
            meals_per_day=request.meals_per_day,
            transport_type=request.transport_type,
            selected_extras=request.selected_extras,
        )

    def price(
        self,
        price_config: PriceConfig,
        available_extras: Dict[str, Decimal],
        duration_days: int,
        rules: Iterable,
        trip_id: int,
        students: int,
        adults: int,
        start_date: date,
        meals_per_day: int,
        transport_type: TransportType,
        selected_extras: List[str]
    ) -> QuoteResult:
        """Pure pricing over already-loaded trip data and rules"""

        total_people = students + adults
        days = Decimal(duration_days)

        base_students = price_config.base_per_student * students * days
        base_adults = price_config.base_per_adult * adults * days
        meals = price_config.meal_per_person_per_day * meals_per_day * total_people * days

        transport_rate = price_config.transport_surcharge.get(TransportType(transport_type).value) or Decimal('0')
        transport = transport_rate * total_people

        # Unknown extras price at 0
        extras = Decimal('0')
        for extra in selected_extras:
            rate = price_config.extras.get(extra) or available_extras.get(extra) or Decimal('0')
            extras += rate * students

        subtotal = base_students + base_adults + meals + transport + extras

        discount = self.discount_engine.evaluate(
            rules, trip_id, students, start_date, subtotal, self.clock.now_utc()
        )

        total = max(Decimal('0'), subtotal - discount.amount)
        per_student = round2(total / students) if students > 0 else Decimal('0')

        return QuoteResult(
            base_students=base_students,
            base_adults=base_adults,
            meals=meals,
            transport=transport,
            extras=extras,
            discount=discount.amount,
            total=total,
            per_student=per_student,
            applied_rules=discount.applied_rule_names
        )
