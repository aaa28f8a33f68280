from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from common.core.otel_axiom_exporter import trace_span
from common.repositories.base import BaseRepository
from packages.billing.models.database.plan import PlanEntity
from packages.billing.models.domain.plan import Plan


class PlanRepository(BaseRepository[PlanEntity, Plan]):
    """Read access to the plan catalog."""

    def __init__(self, db_session: Optional[AsyncSession] = None):
        super().__init__(PlanEntity, Plan, db_session)

    @trace_span
    async def get_active(self) -> List[Plan]:
        """Active plans, unordered."""
        async with self._get_session() as session:
            result = await session.execute(
                select(PlanEntity).where(PlanEntity.is_active == True)  # noqa
            )
            return self._entities_to_domain(result.scalars().all())
