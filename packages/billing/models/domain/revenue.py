"""Domain models for billing aggregates."""

from pydantic import BaseModel


class RevenueSummary(BaseModel):
    """
    Snapshot over entitled subscriptions.

    estimated_monthly_revenue is in the plans' display currency units,
    with yearly plans normalized to a twelfth. Add-on items are not priced.
    """

    active_subscriptions: int = 0
    trialing_subscriptions: int = 0
    total_entitled_subscriptions: int = 0
    estimated_monthly_revenue: float = 0.0
    unmatched_subscriptions: int = 0
