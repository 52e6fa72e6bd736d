from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from schooltrips.database import get_db
from schooltrips.clock import Clock, get_clock
from schooltrips.auth.dependencies import get_current_user, require_admin
from schooltrips.pricing.schemas import (
    QuoteRequest, QuoteResult, PricingRule, PricingRuleCreate, PricingRuleUpdate
)
from schooltrips.pricing.quote_service import QuoteCalculator
from schooltrips.pricing.rule_service import PricingRuleService

router = APIRouter()

@router.post("/quote", response_model=QuoteResult)
def calculate_quote(
    request: QuoteRequest,
    current_user = Depends(get_current_user),
    clock: Clock = Depends(get_clock),
    db: Session = Depends(get_db)
):
    """Price a trip configuration"""
    return QuoteCalculator(db, clock).calculate_quote(request)

# Pricing Rule Administration
@router.get("/rules", response_model=List[PricingRule])
def list_rules(
    trip_id: Optional[int] = Query(None, description="Filter by trip ID"),
    admin = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """List pricing rules, newest first"""
    return PricingRuleService(db).list_rules(trip_id)

@router.post("/rules", response_model=PricingRule, status_code=status.HTTP_201_CREATED)
def create_rule(
    rule: PricingRuleCreate,
    admin = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Create a pricing rule"""
    return PricingRuleService(db).create_rule(rule)

@router.patch("/rules/{rule_id}", response_model=PricingRule)
def update_rule(
    rule_id: int,
    rule_update: PricingRuleUpdate,
    admin = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Partially update a pricing rule"""
    return PricingRuleService(db).update_rule(rule_id, rule_update)

@router.delete("/rules/{rule_id}")
def delete_rule(
    rule_id: int,
    admin = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Delete a pricing rule"""
    PricingRuleService(db).delete_rule(rule_id)
    return {"message": "Pricing rule deleted successfully"}
