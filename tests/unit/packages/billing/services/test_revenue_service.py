import pytest

from packages.billing.models.domain.subscription import SubscriptionUpsertModel
from packages.billing.repositories.subscription_repository import SubscriptionRepository
from packages.billing.services.revenue_service import RevenueService


@pytest.mark.asyncio
class TestRevenueSummary:
    """Tests for the admin revenue aggregate."""

    async def test_empty_store(self):
        summary = await RevenueService().get_summary()

        assert summary.total_entitled_subscriptions == 0
        assert summary.estimated_monthly_revenue == 0.0

    async def test_counts_and_normalizes_revenue(
        self, test_db, sample_subscription, sample_tenant, sample_plan
    ):
        repo = SubscriptionRepository(test_db)
        # Yearly plan: a twelfth of 290
        await repo.upsert(
            "sub_yearly",
            sample_tenant.id,
            SubscriptionUpsertModel(
                status="trialing", plan_id="pro", price_ids=["price_pro_yearly"]
            ),
        )
        # No plan recorded
        await repo.upsert(
            "sub_unknown",
            sample_tenant.id,
            SubscriptionUpsertModel(status="active", price_ids=["price_legacy"]),
        )
        # Not entitled, not counted
        await repo.upsert(
            "sub_canceled",
            sample_tenant.id,
            SubscriptionUpsertModel(
                status="canceled", plan_id="pro", price_ids=["price_pro_monthly"]
            ),
        )
        await test_db.commit()

        summary = await RevenueService().get_summary()

        assert summary.active_subscriptions == 2
        assert summary.trialing_subscriptions == 1
        assert summary.total_entitled_subscriptions == 3
        assert summary.unmatched_subscriptions == 1
        assert summary.estimated_monthly_revenue == round(29.0 + 290.0 / 12, 2)

    async def test_plan_missing_from_catalog_is_counted_but_not_priced(
        self, test_db, sample_subscription
    ):
        await SubscriptionRepository(test_db).upsert(
            "sub_retired",
            sample_subscription.tenant_id,
            SubscriptionUpsertModel(
                status="active", plan_id="gone", price_ids=["price_gone_monthly"]
            ),
        )
        await test_db.commit()

        summary = await RevenueService().get_summary()

        assert summary.active_subscriptions == 2
        assert summary.total_entitled_subscriptions == 2
        assert summary.unmatched_subscriptions == 1
        assert summary.estimated_monthly_revenue == 29.0
