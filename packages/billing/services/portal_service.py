"""Customer portal links."""

from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession

from common.core.exceptions import PreconditionFailedError
from common.core.otel_axiom_exporter import trace_span, get_logger
from packages.billing.providers.payment.factory import get_payment_provider
from packages.billing.services.checkout_service import build_return_url
from packages.billing.services.entitlement_service import EntitlementService
from packages.tenants.services.tenant_service import TenantService

logger = get_logger(__name__)


class PortalService:
    """Issues Stripe customer portal links."""

    def __init__(self, db_session: Optional[AsyncSession] = None):
        self.db_session = db_session
        self.tenant_service = TenantService(db_session)
        self.entitlement_service = EntitlementService(db_session)
        self.payment_provider = get_payment_provider()

    @trace_span
    async def issue_portal_link(
        self, tenant_id: str, origin: Optional[str] = None
    ) -> str:
        """
        Create a portal session URL for the tenant.

        A tenant without a linked customer is healed by an email lookup at
        Stripe; the found customer is linked so later calls skip the lookup.

        Raises:
            NotFoundError: Unknown tenant
            PreconditionFailedError: No Stripe customer can be resolved
            ProviderError: Stripe rejected a call
        """
        tenant = await self.tenant_service.require_tenant(tenant_id)

        customer_id = tenant.stripe_customer_id
        if not customer_id:
            customer_id = await self.payment_provider.find_customer_by_email(
                tenant.email
            )
            if customer_id:
                logger.info(
                    "Recovered Stripe customer by email",
                    extra={"tenant_id": tenant_id, "customer_id": customer_id},
                )
                await self.entitlement_service.set_customer_id(tenant_id, customer_id)

        if not customer_id:
            raise PreconditionFailedError(
                "No billable customer found for this account"
            )

        return await self.payment_provider.create_portal_session(
            customer_id=customer_id,
            return_url=build_return_url(origin),
        )
