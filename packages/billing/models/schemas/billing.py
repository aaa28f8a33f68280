"""
API schemas for billing operations.

Request and response models for billing endpoints. Bodies are camelCase on
the wire; snake_case names are accepted too.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from packages.billing.models.domain.payment import ProviderPrice
from packages.billing.models.domain.subscription import Subscription


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================================
# Checkout Schemas
# ============================================================================


class CheckoutRequest(CamelModel):
    """Request to start a checkout or attach an add-on."""

    tenant_id: str = Field(..., min_length=1)
    price_id: str = Field(..., min_length=1)
    plan_id: str = Field(..., min_length=1)
    is_addon: bool = False


class CheckoutResponse(CamelModel):
    """
    Either a redirect to hosted checkout, or confirmation that an add-on
    was attached to the running subscription.
    """

    checkout_session_id: Optional[str] = None
    checkout_url: Optional[str] = None
    success: Optional[bool] = None
    message: Optional[str] = None


# ============================================================================
# Portal Schemas
# ============================================================================


class PortalRequest(CamelModel):
    """Request a customer portal link."""

    tenant_id: str = Field(..., min_length=1)


class PortalResponse(CamelModel):
    url: str = Field(..., description="Stripe customer portal URL")


# ============================================================================
# Subscription Schemas
# ============================================================================


class SubscriptionItemResponse(CamelModel):
    id: str
    price_id: Optional[str] = None
    quantity: int = 1


class SubscriptionResponse(CamelModel):
    """A subscription projection as the dashboard sees it."""

    id: str
    tenant_id: str
    status: str
    plan_id: Optional[str] = None
    price_ids: list[str] = Field(default_factory=list)
    items: list[SubscriptionItemResponse] = Field(default_factory=list)
    current_period_end: Optional[datetime] = None
    created: Optional[datetime] = None
    cancel_at_period_end: bool = False
    stripe_customer_id: Optional[str] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, subscription: Subscription) -> "SubscriptionResponse":
        return cls.model_validate(subscription.model_dump())


class SubscriptionListResponse(CamelModel):
    subscriptions: list[SubscriptionResponse]


class EntitlementResponse(CamelModel):
    tenant_id: str
    has_access: bool
    is_vip: bool = False
    vip_instance_limit: Optional[int] = None
    subscription: Optional[SubscriptionResponse] = None


# ============================================================================
# Plan & Price Schemas
# ============================================================================


class PlanResponse(CamelModel):
    id: str
    name: str
    description: Optional[str] = None
    price_monthly: float
    price_yearly: float
    features: list[str] = Field(default_factory=list)
    is_trial: bool = False
    trial_days: Optional[int] = None
    is_coming_soon: bool = False
    is_addon: bool = False
    monthly_price_id: Optional[str] = None
    yearly_price_id: Optional[str] = None


class PlansResponse(CamelModel):
    plans: list[PlanResponse]


class PricesResponse(CamelModel):
    monthly: list[ProviderPrice]
    yearly: list[ProviderPrice]


# ============================================================================
# Admin Schemas
# ============================================================================


class RevenueSummaryResponse(CamelModel):
    active_subscriptions: int
    trialing_subscriptions: int
    total_entitled_subscriptions: int
    estimated_monthly_revenue: float
    unmatched_subscriptions: int
