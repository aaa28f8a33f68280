"""
Database entity for subscription plans.
"""

from sqlalchemy import Column, String, Text, DateTime, Boolean, Integer, Float
from sqlalchemy.sql import func

from common.db.base import Base, JSONType


class PlanEntity(Base):
    """
    Subscription plan catalog entry.

    Display prices are informational; the Stripe price IDs are what
    checkout charges. Read-only for the billing engine.
    """

    __tablename__ = "plans"

    id = Column(String(64), primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)

    # Display prices in major currency units
    price_monthly = Column(Float, nullable=False, default=0, server_default="0")
    price_yearly = Column(Float, nullable=False, default=0, server_default="0")

    features = Column(JSONType, nullable=False, default=list)

    is_trial = Column(Boolean, nullable=False, default=False, server_default="false")
    trial_days = Column(Integer, nullable=True)
    is_active = Column(
        Boolean, nullable=False, default=True, server_default="true", index=True
    )
    is_coming_soon = Column(
        Boolean, nullable=False, default=False, server_default="false"
    )
    is_addon = Column(Boolean, nullable=False, default=False, server_default="false")

    # Stripe price IDs
    monthly_price_id = Column(String(255), nullable=True, index=True)
    yearly_price_id = Column(String(255), nullable=True, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
