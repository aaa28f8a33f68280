from fastapi import APIRouter

from api.v1.routes import (
    health,
)
from packages.billing.routes import admin, billing, plans, webhooks

api_router = APIRouter()

# Health check (no auth required)
api_router.include_router(health.router, prefix="/health", tags=["health"])

# Webhooks (no auth - signature verified internally)
api_router.include_router(webhooks.router, tags=["webhooks"])

# Plans and prices (no auth - public pricing info)
api_router.include_router(plans.router, prefix="/billing", tags=["billing"])

# Checkout, portal, entitlement
api_router.include_router(billing.router, prefix="/billing", tags=["billing"])

# Admin aggregates
api_router.include_router(
    admin.router, prefix="/admin/billing", tags=["billing-admin"]
)
