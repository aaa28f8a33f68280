"""
Entitlement store - the local source of truth for "may this tenant use the product".

Stripe owns billing state; this service owns its projection. Writers are the
webhook reconciler (projections) and checkout/portal (customer link). Readers
are the dashboard and the revenue summary.
"""

from datetime import datetime
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession

from common.core.exceptions import NotFoundError
from common.core.otel_axiom_exporter import trace_span, get_logger
from common.db.context import readonly
from packages.billing.models.domain.subscription import (
    Entitlement,
    Subscription,
    SubscriptionUpsertModel,
)
from packages.billing.repositories.subscription_repository import SubscriptionRepository
from packages.tenants.models.domain.tenant import Tenant
from packages.tenants.services.tenant_service import TenantService

logger = get_logger(__name__)


class EntitlementService:
    """Reads and merge-writes of subscription projections and customer links."""

    def __init__(self, db_session: Optional[AsyncSession] = None):
        self.db_session = db_session
        self.subscription_repo = SubscriptionRepository(db_session)
        self.tenant_service = TenantService(db_session)

    @trace_span
    async def get_active_subscription(self, tenant_id: str) -> Optional[Subscription]:
        """
        The tenant's trialing/active projection, if any.

        At most one is expected. If several exist the newest by Stripe
        creation time wins and a warning is logged.
        """
        entitled = await self.subscription_repo.get_entitled_by_tenant(tenant_id)
        if not entitled:
            return None

        if len(entitled) > 1:
            logger.warning(
                "Tenant has more than one entitled subscription",
                extra={
                    "tenant_id": tenant_id,
                    "subscription_ids": [s.id for s in entitled],
                },
            )
        return entitled[0]

    @trace_span
    async def list_subscriptions(
        self, tenant_id: str, updated_since: Optional[datetime] = None
    ) -> List[Subscription]:
        """
        All projections of a tenant.

        With updated_since, only those written after the cursor; callers poll
        with the newest updated_at they have seen.
        """
        await self.tenant_service.require_tenant(tenant_id)
        return await self.subscription_repo.get_by_tenant(
            tenant_id, updated_since=updated_since
        )

    @trace_span
    async def upsert_subscription(
        self,
        tenant_id: str,
        subscription_id: str,
        upsert_model: SubscriptionUpsertModel,
    ) -> Subscription:
        """Merge-write the projection keyed by the Stripe subscription ID."""
        return await self.subscription_repo.upsert(
            subscription_id, tenant_id, upsert_model
        )

    @trace_span
    async def set_customer_id(self, tenant_id: str, customer_id: str) -> Tenant:
        """Merge the Stripe customer ID onto the tenant."""
        tenant = await self.tenant_service.set_stripe_customer_id(
            tenant_id, customer_id
        )
        if tenant is None:
            raise NotFoundError("Tenant not found")
        return tenant

    @readonly
    @trace_span
    async def get_entitlement(self, tenant_id: str) -> Entitlement:
        """
        Whether the tenant has product access.

        Access comes from a trialing/active subscription or the VIP override.
        """
        tenant = await self.tenant_service.require_tenant(tenant_id)
        subscription = await self.get_active_subscription(tenant_id)

        return Entitlement(
            tenant_id=tenant_id,
            has_access=subscription is not None or tenant.is_vip,
            is_vip=tenant.is_vip,
            vip_instance_limit=tenant.vip_instance_limit,
            subscription=subscription,
        )

    @readonly
    @trace_span
    async def list_active_subscriptions(self) -> List[Subscription]:
        """Trialing/active projections across all tenants."""
        return await self.subscription_repo.get_all_entitled()
