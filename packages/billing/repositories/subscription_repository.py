from datetime import datetime, timezone
from typing import List, Optional
from sqlalchemy import select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from common.core.constants import ENTITLED_SUBSCRIPTION_STATUSES
from common.core.otel_axiom_exporter import trace_span, get_logger
from common.repositories.base import BaseRepository
from packages.billing.models.database.subscription import SubscriptionEntity
from packages.billing.models.domain.subscription import (
    Subscription,
    SubscriptionUpsertModel,
)

logger = get_logger(__name__)


def _insert_for(dialect_name: str):
    """Dialect insert construct that supports ON CONFLICT."""
    if dialect_name == "sqlite":
        return sqlite.insert
    return postgresql.insert


class SubscriptionRepository(BaseRepository[SubscriptionEntity, Subscription]):
    """Repository for subscription projections, keyed by Stripe subscription ID."""

    def __init__(self, db_session: Optional[AsyncSession] = None):
        super().__init__(SubscriptionEntity, Subscription, db_session)

    @trace_span
    async def upsert(
        self,
        subscription_id: str,
        tenant_id: str,
        upsert_model: SubscriptionUpsertModel,
    ) -> Subscription:
        """
        Merge-write a projection in a single statement.

        With a status the row is inserted on first sight and otherwise updated
        in place (INSERT ... ON CONFLICT DO UPDATE), so concurrent first
        deliveries for one subscription converge instead of colliding.
        Without a status only an existing row can be updated.
        Only the fields set on upsert_model are written.
        """
        data = upsert_model.model_dump(exclude_unset=True)
        now = datetime.now(timezone.utc)
        changes = {"tenant_id": tenant_id, "updated_at": now, **data}

        async with self._get_session() as session:
            if "status" in data:
                statement = _insert_for(session.get_bind().dialect.name)(
                    SubscriptionEntity
                ).values(id=subscription_id, created_at=now, **changes)
                await session.execute(
                    statement.on_conflict_do_update(
                        index_elements=[SubscriptionEntity.id], set_=changes
                    )
                )
            else:
                result = await session.execute(
                    update(SubscriptionEntity)
                    .where(SubscriptionEntity.id == subscription_id)
                    .values(**changes)
                )
                if result.rowcount == 0:
                    raise ValueError(
                        f"Cannot create subscription {subscription_id} without a status"
                    )
            await session.flush()

        logger.info(
            "Upserted subscription projection",
            extra={
                "subscription_id": subscription_id,
                "tenant_id": tenant_id,
                "fields": sorted(data.keys()),
            },
        )

        return await self.get(subscription_id)

    @trace_span
    async def get_by_tenant(
        self, tenant_id: str, updated_since: Optional[datetime] = None
    ) -> List[Subscription]:
        """All projections of a tenant, optionally only those changed after a cursor."""
        query = select(SubscriptionEntity).where(
            SubscriptionEntity.tenant_id == tenant_id
        )
        if updated_since is not None:
            query = query.where(SubscriptionEntity.updated_at > updated_since)
        query = query.order_by(SubscriptionEntity.updated_at, SubscriptionEntity.id)

        async with self._get_session() as session:
            result = await session.execute(query)
            return self._entities_to_domain(result.scalars().all())

    @trace_span
    async def get_entitled_by_tenant(self, tenant_id: str) -> List[Subscription]:
        """Trialing/active projections of a tenant, newest Stripe creation first."""
        query = (
            select(SubscriptionEntity)
            .where(
                SubscriptionEntity.tenant_id == tenant_id,
                SubscriptionEntity.status.in_(ENTITLED_SUBSCRIPTION_STATUSES),
            )
            .order_by(
                SubscriptionEntity.created.desc().nulls_last(),
                SubscriptionEntity.updated_at.desc(),
            )
        )

        async with self._get_session() as session:
            result = await session.execute(query)
            return self._entities_to_domain(result.scalars().all())

    @trace_span
    async def get_all_entitled(self) -> List[Subscription]:
        """Trialing/active projections across all tenants."""
        query = (
            select(SubscriptionEntity)
            .where(SubscriptionEntity.status.in_(ENTITLED_SUBSCRIPTION_STATUSES))
            .order_by(SubscriptionEntity.id)
        )

        async with self._get_session() as session:
            result = await session.execute(query)
            return self._entities_to_domain(result.scalars().all())
