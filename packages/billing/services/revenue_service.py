"""Read-only billing aggregates for the admin dashboard."""

from common.core.otel_axiom_exporter import trace_span, get_logger
from common.db.context import readonly
from packages.billing.models.domain.enums import SubscriptionStatus
from packages.billing.models.domain.revenue import RevenueSummary
from packages.billing.repositories.plan_repository import PlanRepository
from packages.billing.repositories.subscription_repository import SubscriptionRepository

logger = get_logger(__name__)


class RevenueService:
    """Aggregates entitled subscriptions against the plan catalog."""

    def __init__(self):
        self.subscription_repo = SubscriptionRepository()
        self.plan_repo = PlanRepository()

    @readonly
    @trace_span
    async def get_summary(self) -> RevenueSummary:
        """
        Count trialing/active subscriptions and estimate monthly revenue.

        A subscription contributes its plan's monthly price when the plan's
        monthly price ID is among its price IDs, a twelfth of the yearly
        price when the yearly one is. Subscriptions whose plan is missing or
        whose prices match neither are counted but not priced.
        """
        subscriptions = await self.subscription_repo.get_all_entitled()
        plan_ids = list({s.plan_id for s in subscriptions if s.plan_id})
        plans = {p.id: p for p in await self.plan_repo.get_by_ids(plan_ids)}

        summary = RevenueSummary(total_entitled_subscriptions=len(subscriptions))
        revenue = 0.0

        for subscription in subscriptions:
            if subscription.status == SubscriptionStatus.ACTIVE.value:
                summary.active_subscriptions += 1
            elif subscription.status == SubscriptionStatus.TRIALING.value:
                summary.trialing_subscriptions += 1

            plan = plans.get(subscription.plan_id) if subscription.plan_id else None
            amount = plan.monthly_revenue_for(subscription.price_ids) if plan else None
            if amount is None:
                summary.unmatched_subscriptions += 1
                continue
            revenue += amount

        summary.estimated_monthly_revenue = round(revenue, 2)

        logger.info(
            "Computed revenue summary",
            extra={
                "entitled": summary.total_entitled_subscriptions,
                "unmatched": summary.unmatched_subscriptions,
            },
        )
        return summary
