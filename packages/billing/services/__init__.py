"""Billing services."""

from packages.billing.services.entitlement_service import EntitlementService
from packages.billing.services.checkout_service import CheckoutService
from packages.billing.services.portal_service import PortalService
from packages.billing.services.plans_service import PlansService
from packages.billing.services.revenue_service import RevenueService

__all__ = [
    "EntitlementService",
    "CheckoutService",
    "PortalService",
    "PlansService",
    "RevenueService",
]
