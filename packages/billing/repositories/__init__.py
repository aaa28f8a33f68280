"""Billing repositories."""

from packages.billing.repositories.subscription_repository import SubscriptionRepository
from packages.billing.repositories.plan_repository import PlanRepository

__all__ = [
    "SubscriptionRepository",
    "PlanRepository",
]
