from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession

from common.repositories.base import BaseRepository
from packages.tenants.models.database.tenant import TenantEntity
from packages.tenants.models.domain.tenant import Tenant


class TenantRepository(BaseRepository[TenantEntity, Tenant]):
    def __init__(self, db_session: Optional[AsyncSession] = None):
        super().__init__(TenantEntity, Tenant, db_session)
