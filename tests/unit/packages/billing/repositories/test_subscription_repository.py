"""
Unit tests for SubscriptionRepository.

Merge-writes keyed by the Stripe subscription ID, the change feed and the
entitled-subscription queries.
"""

import asyncio
import pytest

from packages.billing.models.domain.subscription import (
    SubscriptionItem,
    SubscriptionUpsertModel,
)
from packages.billing.repositories.subscription_repository import SubscriptionRepository


@pytest.mark.asyncio
class TestSubscriptionUpsert:
    """Tests for merge-write semantics."""

    async def test_upsert_inserts_on_first_sight(self, test_db, billable_tenant):
        repo = SubscriptionRepository(test_db)

        subscription = await repo.upsert(
            "sub_new",
            billable_tenant.id,
            SubscriptionUpsertModel(
                status="trialing",
                plan_id="pro",
                price_ids=["price_pro_monthly"],
                items=[SubscriptionItem(id="si_1", price_id="price_pro_monthly")],
            ),
        )

        assert subscription.id == "sub_new"
        assert subscription.tenant_id == billable_tenant.id
        assert subscription.status == "trialing"
        assert subscription.plan_id == "pro"
        assert subscription.price_ids == ["price_pro_monthly"]
        assert subscription.items[0].id == "si_1"
        assert subscription.cancel_at_period_end is False
        assert subscription.updated_at is not None

    async def test_upsert_keeps_unset_fields(self, test_db, sample_subscription):
        """A write without plan_id must not clear the stored plan."""
        repo = SubscriptionRepository(test_db)

        subscription = await repo.upsert(
            sample_subscription.id,
            sample_subscription.tenant_id,
            SubscriptionUpsertModel(status="past_due", cancel_at_period_end=True),
        )

        assert subscription.status == "past_due"
        assert subscription.cancel_at_period_end is True
        assert subscription.plan_id == "pro"
        assert subscription.price_ids == ["price_pro_monthly"]
        assert subscription.stripe_customer_id == "cus_bob"

    async def test_upsert_is_idempotent(self, test_db, billable_tenant):
        repo = SubscriptionRepository(test_db)
        model = SubscriptionUpsertModel(
            status="active",
            plan_id="pro",
            price_ids=["price_pro_monthly", "price_addon_monthly"],
        )

        first = await repo.upsert("sub_twice", billable_tenant.id, model)
        second = await repo.upsert("sub_twice", billable_tenant.id, model)

        assert first.model_dump(exclude={"updated_at"}) == second.model_dump(
            exclude={"updated_at"}
        )
        assert len(await repo.get_by_tenant(billable_tenant.id)) == 1

    async def test_upsert_with_status_merges_into_row_written_concurrently(
        self, test_db, sample_subscription
    ):
        """A first-sight write that finds the row already there updates it."""
        repo = SubscriptionRepository()

        subscription = await repo.upsert(
            sample_subscription.id,
            sample_subscription.tenant_id,
            SubscriptionUpsertModel(
                status="active",
                price_ids=["price_pro_monthly", "price_addon_monthly"],
            ),
        )

        assert subscription.price_ids == ["price_pro_monthly", "price_addon_monthly"]
        assert subscription.plan_id == "pro"
        assert subscription.items[0].id == "si_base"
        rows = await SubscriptionRepository(test_db).get_by_tenant(
            sample_subscription.tenant_id
        )
        assert [s.id for s in rows] == [sample_subscription.id]

    async def test_upsert_without_status_updates_existing_row(
        self, test_db, sample_subscription
    ):
        repo = SubscriptionRepository(test_db)

        subscription = await repo.upsert(
            sample_subscription.id,
            sample_subscription.tenant_id,
            SubscriptionUpsertModel(cancel_at_period_end=True),
        )

        assert subscription.status == "active"
        assert subscription.cancel_at_period_end is True

    async def test_upsert_without_status_on_insert_raises(
        self, test_db, billable_tenant
    ):
        repo = SubscriptionRepository(test_db)

        with pytest.raises(ValueError):
            await repo.upsert(
                "sub_incomplete",
                billable_tenant.id,
                SubscriptionUpsertModel(plan_id="pro"),
            )

    async def test_upsert_through_lazy_session(self, billable_tenant):
        """Without an explicit session the write commits on its own."""
        repo = SubscriptionRepository()

        await repo.upsert(
            "sub_lazy", billable_tenant.id, SubscriptionUpsertModel(status="active")
        )

        stored = await SubscriptionRepository().get("sub_lazy")
        assert stored is not None
        assert stored.status == "active"


@pytest.mark.asyncio
class TestSubscriptionQueries:
    """Tests for tenant reads and the change feed."""

    async def test_get_by_tenant_only_returns_that_tenant(
        self, test_db, sample_subscription, sample_tenant
    ):
        repo = SubscriptionRepository(test_db)
        await repo.upsert(
            "sub_alice", sample_tenant.id, SubscriptionUpsertModel(status="active")
        )

        bob = await repo.get_by_tenant(sample_subscription.tenant_id)
        alice = await repo.get_by_tenant(sample_tenant.id)

        assert [s.id for s in bob] == [sample_subscription.id]
        assert [s.id for s in alice] == ["sub_alice"]

    async def test_change_feed_returns_only_newer_writes(
        self, test_db, billable_tenant
    ):
        repo = SubscriptionRepository(test_db)

        first = await repo.upsert(
            "sub_a", billable_tenant.id, SubscriptionUpsertModel(status="active")
        )
        await asyncio.sleep(0.01)
        await repo.upsert(
            "sub_b", billable_tenant.id, SubscriptionUpsertModel(status="trialing")
        )

        changed = await repo.get_by_tenant(
            billable_tenant.id, updated_since=first.updated_at
        )

        assert [s.id for s in changed] == ["sub_b"]

    async def test_change_feed_picks_up_rewrites(self, test_db, billable_tenant):
        repo = SubscriptionRepository(test_db)

        first = await repo.upsert(
            "sub_a", billable_tenant.id, SubscriptionUpsertModel(status="active")
        )
        await asyncio.sleep(0.01)
        await repo.upsert(
            "sub_a", billable_tenant.id, SubscriptionUpsertModel(status="canceled")
        )

        changed = await repo.get_by_tenant(
            billable_tenant.id, updated_since=first.updated_at
        )

        assert len(changed) == 1
        assert changed[0].status == "canceled"

    async def test_get_entitled_by_tenant_filters_status(
        self, test_db, billable_tenant
    ):
        repo = SubscriptionRepository(test_db)
        for sub_id, status in [
            ("sub_active", "active"),
            ("sub_trial", "trialing"),
            ("sub_gone", "canceled"),
            ("sub_late", "past_due"),
        ]:
            await repo.upsert(
                sub_id, billable_tenant.id, SubscriptionUpsertModel(status=status)
            )

        entitled = await repo.get_entitled_by_tenant(billable_tenant.id)

        assert sorted(s.id for s in entitled) == ["sub_active", "sub_trial"]

    async def test_get_all_entitled_spans_tenants(
        self, test_db, sample_subscription, sample_tenant
    ):
        repo = SubscriptionRepository(test_db)
        await repo.upsert(
            "sub_alice", sample_tenant.id, SubscriptionUpsertModel(status="trialing")
        )
        await repo.upsert(
            "sub_old", sample_tenant.id, SubscriptionUpsertModel(status="canceled")
        )

        entitled = await repo.get_all_entitled()

        assert [s.id for s in entitled] == ["sub_alice", sample_subscription.id]
