from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession

from common.core.exceptions import NotFoundError
from packages.tenants.repositories.tenant_repository import TenantRepository
from packages.tenants.models.domain.tenant import Tenant, TenantUpdateModel
from common.core.otel_axiom_exporter import trace_span, get_logger

logger = get_logger(__name__)


class TenantService:
    """Service for tenant account reads and the billing customer link."""

    def __init__(self, db_session: Optional[AsyncSession] = None):
        self.db_session = db_session
        self.tenant_repo = TenantRepository(db_session)

    @trace_span
    async def get_tenant(self, tenant_id: str) -> Optional[Tenant]:
        """Get a tenant by ID."""
        return await self.tenant_repo.get(tenant_id)

    @trace_span
    async def require_tenant(self, tenant_id: str) -> Tenant:
        """Get a tenant by ID or raise NotFoundError."""
        tenant = await self.tenant_repo.get(tenant_id)
        if not tenant:
            raise NotFoundError("Tenant not found")
        return tenant

    @trace_span
    async def set_stripe_customer_id(
        self, tenant_id: str, customer_id: str
    ) -> Optional[Tenant]:
        """
        Link a Stripe customer to the tenant.

        Merge write: only stripe_customer_id is touched, and writing the same
        value twice is a no-op.
        """
        tenant = await self.tenant_repo.update(
            tenant_id, TenantUpdateModel(stripe_customer_id=customer_id)
        )
        if tenant is None:
            logger.warning(
                "Cannot link Stripe customer to unknown tenant",
                extra={"tenant_id": tenant_id, "customer_id": customer_id},
            )
            return None

        logger.info(
            "Linked Stripe customer to tenant",
            extra={"tenant_id": tenant_id, "customer_id": customer_id},
        )
        return tenant
