"""
Domain models for subscription projections and tenant entitlement.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from packages.billing.models.domain.enums import SubscriptionStatus


class SubscriptionItem(BaseModel):
    """One line of a Stripe subscription."""

    id: str
    price_id: Optional[str] = None
    quantity: int = 1


class Subscription(BaseModel):
    """
    Tenant subscription projection.

    Mirrors the Stripe subscription it is keyed by:
    - Status as Stripe reports it
    - Plan resolved from checkout/subscription/item metadata
    - All item price IDs (base plan plus add-ons)
    - Renewal date and cancellation flag
    """

    id: str
    tenant_id: str
    status: str
    plan_id: Optional[str] = None
    price_ids: list[str] = Field(default_factory=list)
    items: list[SubscriptionItem] = Field(default_factory=list)
    current_period_end: Optional[datetime] = None
    created: Optional[datetime] = None
    cancel_at_period_end: bool = False
    stripe_customer_id: Optional[str] = None

    # Metadata
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    def has_access(self) -> bool:
        """Check if subscription allows product access."""
        return SubscriptionStatus.is_entitled(self.status)


class SubscriptionUpsertModel(BaseModel):
    """
    Merge-write for a projection.

    Only fields that are explicitly set are written. Leave plan_id unset
    (not None) when it could not be resolved so a stored value survives.
    """

    status: Optional[str] = None
    plan_id: Optional[str] = None
    price_ids: Optional[list[str]] = None
    items: Optional[list[SubscriptionItem]] = None
    current_period_end: Optional[datetime] = None
    created: Optional[datetime] = None
    cancel_at_period_end: Optional[bool] = None
    stripe_customer_id: Optional[str] = None


class Entitlement(BaseModel):
    """Whether a tenant may use the product, and why."""

    tenant_id: str
    has_access: bool
    is_vip: bool = False
    vip_instance_limit: Optional[int] = None
    subscription: Optional[Subscription] = None
