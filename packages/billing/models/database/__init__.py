"""Database models for billing."""

from packages.billing.models.database.plan import PlanEntity
from packages.billing.models.database.subscription import SubscriptionEntity

__all__ = [
    "PlanEntity",
    "SubscriptionEntity",
]
