"""Domain models for billing."""

from packages.billing.models.domain.enums import (
    SubscriptionStatus,
    BillingInterval,
)
from packages.billing.models.domain.plan import Plan, PlanCreateModel
from packages.billing.models.domain.subscription import (
    Subscription,
    SubscriptionItem,
    SubscriptionUpsertModel,
    Entitlement,
)
from packages.billing.models.domain.payment import (
    CheckoutSessionResult,
    AddonAttachResult,
    ProviderPrice,
    ProviderPriceList,
)
from packages.billing.models.domain.revenue import RevenueSummary

__all__ = [
    # Enums
    "SubscriptionStatus",
    "BillingInterval",
    # Plans
    "Plan",
    "PlanCreateModel",
    # Subscription
    "Subscription",
    "SubscriptionItem",
    "SubscriptionUpsertModel",
    "Entitlement",
    # Payment
    "CheckoutSessionResult",
    "AddonAttachResult",
    "ProviderPrice",
    "ProviderPriceList",
    # Aggregates
    "RevenueSummary",
]
