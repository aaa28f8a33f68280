"""
Billing API routes.

Checkout, customer portal and the tenant's entitlement view.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from common.core.config import settings
from common.db.session import get_db_readonly
from common.providers.rate_limiter.limiter import limiter
from packages.billing.models.domain.payment import AddonAttachResult
from packages.billing.services.checkout_service import CheckoutService
from packages.billing.services.entitlement_service import EntitlementService
from packages.billing.services.portal_service import PortalService
from packages.billing.models.schemas.billing import (
    CheckoutRequest,
    CheckoutResponse,
    EntitlementResponse,
    PortalRequest,
    PortalResponse,
    SubscriptionListResponse,
    SubscriptionResponse,
)

router = APIRouter()


# ============================================================================
# Checkout & Portal
# ============================================================================


@router.post(
    "/checkout", response_model=CheckoutResponse, response_model_exclude_none=True
)
@limiter.limit(settings.checkout_rate_limit)
async def create_checkout_session(request: Request, body: CheckoutRequest):
    """
    Start a subscription checkout or attach an add-on.

    - Add-on with an active subscription -> item attached, prorated invoice
    - Otherwise -> hosted Stripe checkout session to redirect to
    """
    checkout_service = CheckoutService()

    result = await checkout_service.start_checkout(
        tenant_id=body.tenant_id,
        price_id=body.price_id,
        plan_id=body.plan_id,
        is_addon=body.is_addon,
        origin=request.headers.get("origin"),
    )

    if isinstance(result, AddonAttachResult):
        return CheckoutResponse(success=result.success, message=result.message)

    return CheckoutResponse(
        checkout_session_id=result.checkout_session_id,
        checkout_url=result.checkout_url,
    )


@router.post("/portal", response_model=PortalResponse)
@limiter.limit(settings.portal_rate_limit)
async def create_portal_session(request: Request, body: PortalRequest):
    """
    Create a Stripe customer portal session.

    Customers manage payment methods, invoices and cancellation there.
    """
    portal_service = PortalService()

    url = await portal_service.issue_portal_link(
        tenant_id=body.tenant_id, origin=request.headers.get("origin")
    )

    return PortalResponse(url=url)


# ============================================================================
# Entitlement
# ============================================================================


@router.get("/entitlement", response_model=EntitlementResponse)
async def get_entitlement(
    tenant_id: str = Query(..., alias="tenantId"),
    db_session: AsyncSession = Depends(get_db_readonly),
):
    """Whether the tenant currently has product access."""
    entitlement_service = EntitlementService(db_session)

    entitlement = await entitlement_service.get_entitlement(tenant_id)

    return EntitlementResponse(
        tenant_id=entitlement.tenant_id,
        has_access=entitlement.has_access,
        is_vip=entitlement.is_vip,
        vip_instance_limit=entitlement.vip_instance_limit,
        subscription=(
            SubscriptionResponse.from_domain(entitlement.subscription)
            if entitlement.subscription
            else None
        ),
    )


@router.get("/subscriptions", response_model=SubscriptionListResponse)
async def list_subscriptions(
    tenant_id: str = Query(..., alias="tenantId"),
    updated_since: Optional[datetime] = Query(None, alias="updatedSince"),
    db_session: AsyncSession = Depends(get_db_readonly),
):
    """
    The tenant's subscription projections.

    Poll with updatedSince set to the newest updatedAt already seen to get
    only what changed since.
    """
    entitlement_service = EntitlementService(db_session)

    subscriptions = await entitlement_service.list_subscriptions(
        tenant_id, updated_since=updated_since
    )

    return SubscriptionListResponse(
        subscriptions=[SubscriptionResponse.from_domain(s) for s in subscriptions]
    )
