"""Service for the plan catalog and the Stripe price list."""

from typing import List

from common.core.otel_axiom_exporter import trace_span, get_logger
from packages.billing.models.domain.enums import BillingInterval
from packages.billing.models.domain.payment import ProviderPriceList
from packages.billing.models.domain.plan import Plan
from packages.billing.providers.payment.factory import get_payment_provider
from packages.billing.repositories.plan_repository import PlanRepository

logger = get_logger(__name__)


class PlansService:
    """Service for retrieving plan and price information."""

    def __init__(self):
        self.plan_repo = PlanRepository()
        self.payment_provider = get_payment_provider()

    @trace_span
    async def get_active_plans(self) -> List[Plan]:
        """Active plans, free plans first, then by monthly price."""
        plans = await self.plan_repo.get_active()
        return sorted(plans, key=lambda p: (not p.is_free, p.price_monthly, p.name))

    @trace_span
    async def get_provider_prices(self) -> ProviderPriceList:
        """
        Active recurring Stripe prices split by interval.

        Used by the plan editor to pick price IDs. Prices with other
        intervals (day, week) are left out.
        """
        prices = await self.payment_provider.list_recurring_prices()

        price_list = ProviderPriceList(
            monthly=[p for p in prices if p.interval == BillingInterval.MONTH.value],
            yearly=[p for p in prices if p.interval == BillingInterval.YEAR.value],
        )

        logger.info(
            "Fetched Stripe prices",
            extra={
                "monthly": len(price_list.monthly),
                "yearly": len(price_list.yearly),
            },
        )
        return price_list
