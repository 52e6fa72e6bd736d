import logging
from typing import List, Optional
from sqlalchemy import or_
from sqlalchemy.orm import Session

from schooltrips.models import PricingRule
from schooltrips.pricing.schemas import PricingRuleCreate, PricingRuleUpdate
from schooltrips.exceptions import NotFoundError

logger = logging.getLogger("schooltrips.pricing")

class PricingRuleService:
    """Administrator management of discount rules"""

    def __init__(self, db: Session):
        self.db = db

    def rules_in_scope(self, trip_id: int) -> List[PricingRule]:
        """Rules scoped to the trip or to all trips, in creation order"""
        return self.db.query(PricingRule).filter(
            or_(PricingRule.trip_id == trip_id, PricingRule.trip_id.is_(None)),
            PricingRule.is_active == True
        ).order_by(PricingRule.id).all()

    def get_rule(self, rule_id: int) -> PricingRule:
        rule = self.db.query(PricingRule).filter(PricingRule.id == rule_id).first()
        if not rule:
            raise NotFoundError("Pricing rule not found")
        return rule

    def list_rules(self, trip_id: Optional[int] = None) -> List[PricingRule]:
        query = self.db.query(PricingRule)
        if trip_id is not None:
            query = query.filter(PricingRule.trip_id == trip_id)
        return query.order_by(PricingRule.created_at.desc(), PricingRule.id.desc()).all()

    def create_rule(self, rule: PricingRuleCreate) -> PricingRule:
        data = rule.dict()
        data["rule_type"] = rule.rule_type.value
        data["discount_type"] = rule.discount_type.value

        db_rule = PricingRule(**data)
        self.db.add(db_rule)
        self.db.commit()
        self.db.refresh(db_rule)

        logger.info("Created pricing rule %s (%s)", db_rule.id, db_rule.name)
        return db_rule

    def update_rule(self, rule_id: int, rule_update: PricingRuleUpdate) -> PricingRule:
        db_rule = self.get_rule(rule_id)

        update_data = rule_update.dict(exclude_unset=True)
        for field, value in update_data.items():
            if hasattr(value, "value"):
                value = value.value
            setattr(db_rule, field, value)

        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(db_rule)

        logger.info("Updated pricing rule %s fields=%s", rule_id, sorted(update_data))
        return db_rule

    def delete_rule(self, rule_id: int) -> None:
        db_rule = self.get_rule(rule_id)
        self.db.delete(db_rule)
        self.db.commit()

        logger.info("Deleted pricing rule %s", rule_id)
