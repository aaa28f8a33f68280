"""
Checkout orchestration.

Turns "tenant wants plan X at price Y" into either a hosted Stripe checkout
session (new subscription) or an item attached to the tenant's running
subscription (add-on). Never writes a subscription projection itself; the
webhook that follows does.
"""

from typing import Optional, Union
from sqlalchemy.ext.asyncio import AsyncSession

from common.core.config import settings
from common.core.constants import BILLING_RETURN_PATH
from common.core.exceptions import NotFoundError, ValidationError
from common.core.otel_axiom_exporter import trace_span, get_logger
from packages.billing.models.domain.payment import (
    AddonAttachResult,
    CheckoutSessionResult,
)
from packages.billing.models.domain.plan import Plan
from packages.billing.providers.payment.factory import get_payment_provider
from packages.billing.repositories.plan_repository import PlanRepository
from packages.billing.services.entitlement_service import EntitlementService
from packages.tenants.models.domain.tenant import Tenant
from packages.tenants.services.tenant_service import TenantService

logger = get_logger(__name__)


def build_return_url(origin: Optional[str], path: str = BILLING_RETURN_PATH) -> str:
    """Absolute dashboard URL on the caller's origin, or the configured base."""
    base = (origin or settings.app_base_url).rstrip("/")
    return f"{base}{path}"


class CheckoutService:
    """Starts subscriptions and attaches add-ons through the payment provider."""

    def __init__(self, db_session: Optional[AsyncSession] = None):
        self.db_session = db_session
        self.plan_repo = PlanRepository(db_session)
        self.tenant_service = TenantService(db_session)
        self.entitlement_service = EntitlementService(db_session)
        self.payment_provider = get_payment_provider()

    @trace_span
    async def start_checkout(
        self,
        tenant_id: str,
        price_id: str,
        plan_id: str,
        is_addon: bool,
        origin: Optional[str] = None,
    ) -> Union[CheckoutSessionResult, AddonAttachResult]:
        """
        Start a purchase for the tenant.

        Raises:
            NotFoundError: Unknown tenant, or unknown/inactive plan
            ValidationError: price_id not offered by the plan, or is_addon
                does not match the plan
            ProviderError: Stripe rejected a call (propagated unchanged)
        """
        tenant = await self.tenant_service.require_tenant(tenant_id)
        plan = await self._require_purchasable_plan(plan_id, price_id, is_addon)

        customer_id = await self.ensure_customer(tenant)

        active = await self.entitlement_service.get_active_subscription(tenant_id)

        if is_addon and active is not None:
            item_id = await self.payment_provider.create_subscription_item(
                subscription_id=active.id, price_id=price_id, quantity=1
            )
            logger.info(
                "Attached add-on to active subscription",
                extra={
                    "tenant_id": tenant_id,
                    "plan_id": plan.id,
                    "price_id": price_id,
                    "subscription_id": active.id,
                },
            )
            return AddonAttachResult(
                success=True,
                message=f"{plan.name} added to your subscription",
                subscription_item_id=item_id,
            )

        if active is not None:
            logger.warning(
                "Starting checkout while an entitled subscription exists",
                extra={
                    "tenant_id": tenant_id,
                    "subscription_id": active.id,
                    "plan_id": plan.id,
                },
            )

        return_url = build_return_url(origin)
        session = await self.payment_provider.create_checkout_session(
            customer_id=customer_id,
            price_id=price_id,
            success_url=f"{return_url}?session_id={{CHECKOUT_SESSION_ID}}",
            cancel_url=return_url,
            metadata={
                "tenant_id": tenant_id,
                "plan_id": plan.id,
                "price_id": price_id,
            },
            subscription_metadata={
                "tenant_id": tenant_id,
                "plan_id": plan.id,
            },
            trial_period_days=plan.trial_period_days(),
        )

        logger.info(
            "Created checkout session",
            extra={
                "tenant_id": tenant_id,
                "plan_id": plan.id,
                "price_id": price_id,
                "session_id": session.checkout_session_id,
            },
        )
        return session

    @trace_span
    async def ensure_customer(self, tenant: Tenant) -> str:
        """
        Reuse the tenant's Stripe customer or create one and link it.

        Without a request session the link commits on its own before anything
        else is sent to Stripe, so a retried checkout after a failed Stripe
        call never creates a second customer.
        """
        if tenant.stripe_customer_id:
            return tenant.stripe_customer_id

        customer_id = await self.payment_provider.create_customer(
            tenant_id=tenant.id,
            email=tenant.email,
            name=tenant.display_name,
        )
        await self.entitlement_service.set_customer_id(tenant.id, customer_id)
        return customer_id

    async def _require_purchasable_plan(
        self, plan_id: str, price_id: str, is_addon: bool
    ) -> Plan:
        plan = await self.plan_repo.get(plan_id)
        if plan is None or not plan.is_active:
            raise NotFoundError("Plan not found")

        if not plan.offers_price(price_id):
            raise ValidationError("Price does not belong to the selected plan")

        if plan.is_addon != is_addon:
            raise ValidationError(
                "Add-on flag does not match the selected plan"
                if is_addon
                else "Add-on plans can only be purchased as add-ons"
            )
        return plan
