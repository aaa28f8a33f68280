"""
Billing enums - typed names for Stripe subscription states and billing intervals.
"""

from enum import Enum

from common.core.constants import ENTITLED_SUBSCRIPTION_STATUSES


class SubscriptionStatus(str, Enum):
    """
    Known Stripe subscription statuses.

    The projection stores whatever status string Stripe sends; these are
    the values the engine knows how to interpret.
    """

    INCOMPLETE = "incomplete"
    INCOMPLETE_EXPIRED = "incomplete_expired"
    TRIALING = "trialing"
    ACTIVE = "active"
    PAST_DUE = "past_due"
    CANCELED = "canceled"
    UNPAID = "unpaid"
    PAUSED = "paused"

    @staticmethod
    def is_entitled(status: str) -> bool:
        """Check if a raw status string grants product access."""
        return status in ENTITLED_SUBSCRIPTION_STATUSES


class BillingInterval(str, Enum):
    """Recurring price intervals."""

    MONTH = "month"
    YEAR = "year"
