"""
Pricing Module

Quote calculation for school trip configurations and administration of the
discount rules applied to them.

Key Components:
- quote_service.py: QuoteCalculator combining trip price config, group size,
  meals, transport and extras into a priced quote
- discount_engine.py: evaluation of pricing rules; all applicable discounts
  are summed
- rule_service.py: create/list/update/delete of pricing rules
- router.py: FastAPI endpoints for quotes and rule administration
- schemas.py: Pydantic models for quotes and rules
"""

from .router import router
from .quote_service import QuoteCalculator
from .discount_engine import DiscountRuleEngine, round2
from .rule_service import PricingRuleService
from .schemas import (
    QuoteRequest, QuoteResult, DiscountResult, DiscountType, RuleType,
    PricingRule, PricingRuleCreate, PricingRuleUpdate
)

__all__ = [
    "router",
    "QuoteCalculator",
    "DiscountRuleEngine",
    "round2",
    "PricingRuleService",
    "QuoteRequest",
    "QuoteResult",
    "DiscountResult",
    "DiscountType",
    "RuleType",
    "PricingRule",
    "PricingRuleCreate",
    "PricingRuleUpdate"
]
