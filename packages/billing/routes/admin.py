"""
Admin billing routes.

Read-only aggregates over the subscription projections.
"""

from fastapi import APIRouter

from packages.billing.services.revenue_service import RevenueService
from packages.billing.models.schemas.billing import RevenueSummaryResponse

router = APIRouter()


@router.get("/summary", response_model=RevenueSummaryResponse)
async def get_revenue_summary():
    """Entitled subscription counts and estimated monthly revenue."""
    revenue_service = RevenueService()
    summary = await revenue_service.get_summary()
    return RevenueSummaryResponse(**summary.model_dump())
