"""
Database entity for subscription projections.
"""

from sqlalchemy import Column, String, DateTime, Boolean, ForeignKey, Index
from sqlalchemy.sql import func

from common.db.base import Base, JSONType


class SubscriptionEntity(Base):
    """
    Local projection of a Stripe subscription.

    Keyed by the Stripe subscription ID so that every webhook apply is a
    merge-write onto the same row. Rows are never deleted; a cancelled
    subscription keeps its final status.
    """

    __tablename__ = "subscriptions"

    # Stripe subscription ID (sub_...)
    id = Column(String(255), primary_key=True, index=True)
    tenant_id = Column(
        String(128),
        ForeignKey("tenants.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    # Stored verbatim from Stripe (trialing, active, past_due, canceled, ...)
    status = Column(String(50), nullable=False, index=True)
    plan_id = Column(String(64), nullable=True, index=True)

    # All item price IDs, and the items themselves ({id, price_id, quantity})
    price_ids = Column(JSONType, nullable=False, default=list)
    items = Column(JSONType, nullable=False, default=list)

    current_period_end = Column(DateTime(timezone=True), nullable=True)
    # Stripe creation time of the subscription
    created = Column(DateTime(timezone=True), nullable=True)
    cancel_at_period_end = Column(
        Boolean, nullable=False, default=False, server_default="false"
    )
    stripe_customer_id = Column(String(255), nullable=True, index=True)

    # Local bookkeeping; updated_at drives the change feed
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        index=True,
    )

    __table_args__ = (
        Index("idx_subscription_tenant_status", "tenant_id", "status"),
        Index("idx_subscription_tenant_updated", "tenant_id", "updated_at"),
    )
