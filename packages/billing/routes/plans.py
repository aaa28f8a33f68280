"""
Plans API routes.

Public endpoints for the plan catalog and the Stripe price list.
"""

from fastapi import APIRouter

from packages.billing.services.plans_service import PlansService
from packages.billing.models.schemas.billing import (
    PlanResponse,
    PlansResponse,
    PricesResponse,
)

router = APIRouter()


@router.get("/plans", response_model=PlansResponse)
async def get_plans():
    """
    Get all active subscription plans.

    Free plans first, then by monthly price. No auth required; pricing
    pages call this.
    """
    plans_service = PlansService()
    plans = await plans_service.get_active_plans()
    return PlansResponse(
        plans=[PlanResponse.model_validate(p.model_dump()) for p in plans]
    )


@router.get("/prices", response_model=PricesResponse)
async def get_prices():
    """Active recurring Stripe prices, split into monthly and yearly."""
    plans_service = PlansService()
    prices = await plans_service.get_provider_prices()
    return PricesResponse(monthly=prices.monthly, yearly=prices.yearly)
