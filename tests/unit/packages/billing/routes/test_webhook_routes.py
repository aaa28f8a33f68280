"""
Unit tests for the Stripe webhook endpoint.

Payloads are signed locally and verified by the real Stripe provider;
only the subscription lookup is mocked.
"""

import hashlib
import hmac
import time
import pytest

from common.core.config import settings
from packages.billing.models.domain.stripe_webhooks import StripeSubscriptionData
from packages.billing.providers.payment.stripe_payment import StripePaymentProvider
from packages.billing.repositories.subscription_repository import SubscriptionRepository
from tests.factories.stripe_factory import StripeFactory

WEBHOOK_SECRET = "whsec_route_secret"
WEBHOOK_URL = "/api/v1/webhooks/stripe"


def signed_headers(body: bytes, secret: str = WEBHOOK_SECRET) -> dict:
    timestamp = int(time.time())
    signature = hmac.new(
        secret.encode(), f"{timestamp}.{body.decode()}".encode(), hashlib.sha256
    ).hexdigest()
    return {
        "stripe-signature": f"t={timestamp},v1={signature}",
        "content-type": "application/json",
    }


@pytest.fixture(autouse=True)
def verify_for_real(monkeypatch, mock_payment_provider):
    monkeypatch.setattr(settings, "stripe_webhook_secret", WEBHOOK_SECRET)
    mock_payment_provider.construct_event.side_effect = (
        StripePaymentProvider().construct_event
    )


@pytest.mark.asyncio
class TestStripeWebhookEndpoint:
    """Tests for POST /api/v1/webhooks/stripe."""

    async def test_subscription_update_is_applied(self, client, sample_subscription):
        body = StripeFactory.body(
            "customer.subscription.updated",
            StripeFactory.subscription(status="past_due"),
        )

        response = await client.post(WEBHOOK_URL, content=body, headers=signed_headers(body))

        assert response.status_code == 200
        assert response.json() == {"received": True}
        stored = await SubscriptionRepository().get(sample_subscription.id)
        assert stored.status == "past_due"

    async def test_forged_signature_is_400_and_writes_nothing(
        self, client, sample_subscription
    ):
        body = StripeFactory.body(
            "customer.subscription.deleted",
            StripeFactory.subscription(status="canceled"),
        )

        response = await client.post(
            WEBHOOK_URL, content=body, headers=signed_headers(body, secret="whsec_evil")
        )

        assert response.status_code == 400
        stored = await SubscriptionRepository().get(sample_subscription.id)
        assert stored.status == "active"

    async def test_missing_signature_is_400(self, client):
        body = StripeFactory.body("customer.created", {"id": "cus_x"})

        response = await client.post(
            WEBHOOK_URL, content=body, headers={"content-type": "application/json"}
        )

        assert response.status_code == 400

    async def test_unhandled_type_is_acknowledged(self, client):
        body = StripeFactory.body("payment_intent.created", {"id": "pi_1"})

        response = await client.post(WEBHOOK_URL, content=body, headers=signed_headers(body))

        assert response.status_code == 200
        assert response.json() == {"received": True}

    async def test_unattributable_event_is_500_for_retry(self, client, billable_tenant):
        body = StripeFactory.body(
            "customer.subscription.updated",
            StripeFactory.subscription(id="sub_orphan", tenant_id=None),
        )

        response = await client.post(WEBHOOK_URL, content=body, headers=signed_headers(body))

        assert response.status_code == 500
        assert response.json() == {"detail": "Webhook processing failed"}

    async def test_malformed_relevant_object_is_400(self, client):
        body = StripeFactory.body(
            "customer.subscription.updated", {"id": "sub_no_status"}
        )

        response = await client.post(WEBHOOK_URL, content=body, headers=signed_headers(body))

        assert response.status_code == 400
        assert response.json() == {"detail": "Invalid webhook payload"}

    async def test_checkout_then_update_keeps_plan(
        self, client, sample_tenant, mock_payment_provider
    ):
        mock_payment_provider.retrieve_subscription.return_value = (
            StripeFactory.subscription_data(
                id="sub_alice", tenant_id="uid_alice", customer="cus_alice"
            )
        )
        checkout = StripeFactory.body(
            "checkout.session.completed",
            StripeFactory.checkout_session(
                tenant_id="uid_alice", subscription="sub_alice", customer="cus_alice"
            ),
            id="evt_checkout",
        )
        update = StripeFactory.body(
            "customer.subscription.updated",
            StripeFactory.subscription(
                id="sub_alice",
                tenant_id="uid_alice",
                customer="cus_alice",
                cancel_at_period_end=True,
            ),
            id="evt_update",
        )

        for body in (checkout, update):
            response = await client.post(
                WEBHOOK_URL, content=body, headers=signed_headers(body)
            )
            assert response.status_code == 200

        response = await client.get(
            "/api/v1/billing/entitlement", params={"tenantId": "uid_alice"}
        )
        data = response.json()
        assert data["hasAccess"] is True
        assert data["subscription"]["planId"] == "pro"
        assert data["subscription"]["cancelAtPeriodEnd"] is True

    async def test_undecodable_stripe_read_during_apply_is_500_for_retry(
        self, client, sample_tenant, mock_payment_provider
    ):
        mock_payment_provider.retrieve_subscription.side_effect = (
            lambda subscription_id: StripeSubscriptionData.model_validate(
                {"id": subscription_id}
            )
        )
        body = StripeFactory.body(
            "checkout.session.completed",
            StripeFactory.checkout_session(
                tenant_id="uid_alice", subscription="sub_alice", customer="cus_alice"
            ),
        )

        response = await client.post(WEBHOOK_URL, content=body, headers=signed_headers(body))

        assert response.status_code == 500
        assert response.json() == {"detail": "Webhook processing failed"}
        assert await SubscriptionRepository().get("sub_alice") is None
