"""
Webhook endpoints for billing events.

Public endpoints (no auth required) for Stripe webhooks.
"""

from fastapi import APIRouter, Request

from packages.billing.webhooks.stripe_webhook import handle_stripe_webhook

router = APIRouter()


@router.post("/webhooks/stripe")
async def stripe_webhook(request: Request) -> dict:
    """
    Receive webhook events from Stripe.

    No authentication - the Stripe-Signature header is verified against the
    raw body before anything is applied.
    """
    return await handle_stripe_webhook(request)
