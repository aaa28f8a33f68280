"""
Stripe webhook handler.

Every event goes through verify -> filter -> decode -> apply:
- verify: signature over the raw body, before anything touches the store
- filter: only events that change entitlement are applied
- apply: merge-write onto the projection keyed by the Stripe subscription ID

There is no dedup ledger. Stripe delivers at least once and possibly out of
order; merge-writes make replays converge. A failure while applying answers
500 so Stripe redelivers.
"""

from typing import Optional, Union

from fastapi import Request, HTTPException, status
from pydantic import ValidationError

from common.core.exceptions import SignatureError, UnattributableEventError
from common.core.otel_axiom_exporter import get_logger, log_span_event, trace_span
from common.db.context import transactional
from packages.billing.models.domain.stripe_webhooks import (
    BillingEvent,
    CheckoutCompletedEvent,
    InvoicePaymentSucceededEvent,
    OtherEvent,
    StripeSubscriptionData,
    SubscriptionDeletedEvent,
    SubscriptionUpdatedEvent,
    decode_event,
    epoch_to_datetime,
)
from packages.billing.models.domain.subscription import (
    SubscriptionItem,
    SubscriptionUpsertModel,
)
from packages.billing.providers.payment.factory import get_payment_provider
from packages.billing.services.entitlement_service import EntitlementService
from packages.tenants.services.tenant_service import TenantService

logger = get_logger(__name__)


def to_upsert_model(
    subscription: StripeSubscriptionData, plan_id: Optional[str] = None
) -> SubscriptionUpsertModel:
    """
    Project a Stripe subscription onto the fields the store keeps.

    Fields the subscription does not carry (plan, dates, customer) are left
    unset, so a merge-write keeps whatever was stored before.
    """
    data = {
        "status": subscription.status,
        "price_ids": subscription.price_ids,
        "items": [
            SubscriptionItem(
                id=item.id,
                price_id=item.price.id,
                quantity=item.quantity if item.quantity is not None else 1,
            )
            for item in subscription.items.data
        ],
        "cancel_at_period_end": subscription.cancel_at_period_end,
        "current_period_end": epoch_to_datetime(subscription.period_end),
        "created": epoch_to_datetime(subscription.created),
        "stripe_customer_id": subscription.customer,
        "plan_id": subscription.resolve_plan_id(plan_id),
    }

    return SubscriptionUpsertModel(
        **{key: value for key, value in data.items() if value is not None}
    )


class StripeWebhookReconciler:
    """Applies verified Stripe events to the entitlement store."""

    def __init__(self):
        self.payment_provider = get_payment_provider()
        self.entitlement_service = EntitlementService()
        self.tenant_service = TenantService()

    @trace_span
    async def parse(
        self, payload_bytes: bytes, signature: Optional[str]
    ) -> Optional[BillingEvent]:
        """
        Verify and decode one delivery.

        Returns None for event types that never change entitlement.

        Raises:
            SignatureError: Missing or invalid signature (nothing was written)
            pydantic.ValidationError: Verified but undecodable payload
        """
        payload = await self.payment_provider.construct_event(payload_bytes, signature)

        log_span_event(
            f"Received Stripe webhook: {payload.type}",
            {
                "event_id": payload.id,
                "event_type": payload.type,
                "livemode": payload.livemode,
            },
        )

        if not payload.is_relevant:
            logger.info(
                f"Ignoring Stripe webhook type: {payload.type}",
                extra={"event_id": payload.id},
            )
            return None

        return decode_event(payload)

    async def process(self, payload_bytes: bytes, signature: Optional[str]) -> dict:
        """
        Verify, filter and apply one delivery.

        Raises what parse() raises, plus UnattributableEventError,
        ProviderError or database errors when apply failed and the delivery
        should be retried.
        """
        event = await self.parse(payload_bytes, signature)
        if event is not None:
            await self.apply(event)
        return {"received": True}

    @trace_span
    async def apply(self, event: BillingEvent) -> None:
        if isinstance(event, CheckoutCompletedEvent):
            await self._apply_checkout_completed(event)
        elif isinstance(event, (SubscriptionUpdatedEvent, SubscriptionDeletedEvent)):
            await self._apply_subscription_changed(event)
        elif isinstance(event, InvoicePaymentSucceededEvent):
            await self._apply_invoice_payment_succeeded(event)
        elif isinstance(event, OtherEvent):
            logger.warning(
                f"Unhandled Stripe webhook type: {event.event_type}",
                extra={"event_id": event.event_id},
            )

    async def _apply_checkout_completed(self, event: CheckoutCompletedEvent) -> None:
        """
        First sight of a new subscription.

        The session only carries references, so the subscription is fetched
        in full before the projection is written together with the tenant's
        customer link.
        """
        session = event.session
        tenant_id = session.metadata.tenant_id

        if not tenant_id or not session.subscription:
            raise UnattributableEventError(
                f"Checkout session {session.id} is missing tenant metadata or subscription"
            )

        if await self.tenant_service.get_tenant(tenant_id) is None:
            raise UnattributableEventError(
                f"Checkout session {session.id} references unknown tenant {tenant_id}"
            )

        subscription = await self.payment_provider.retrieve_subscription(
            session.subscription
        )
        upsert_model = to_upsert_model(subscription, plan_id=session.metadata.plan_id)
        customer_id = session.customer or subscription.customer

        await self._write_checkout(tenant_id, subscription.id, upsert_model, customer_id)

        logger.info(
            f"Checkout completed for tenant {tenant_id}",
            extra={
                "event_id": event.event_id,
                "tenant_id": tenant_id,
                "subscription_id": subscription.id,
                "status": subscription.status,
                "plan_id": upsert_model.plan_id,
            },
        )

    @transactional
    async def _write_checkout(
        self,
        tenant_id: str,
        subscription_id: str,
        upsert_model: SubscriptionUpsertModel,
        customer_id: Optional[str],
    ) -> None:
        await self.entitlement_service.upsert_subscription(
            tenant_id, subscription_id, upsert_model
        )
        if customer_id:
            await self.entitlement_service.set_customer_id(tenant_id, customer_id)

    async def _apply_subscription_changed(
        self, event: Union[SubscriptionUpdatedEvent, SubscriptionDeletedEvent]
    ) -> None:
        """
        Status, items, renewal or cancellation changed.

        The tenant comes from the subscription's own metadata only. A
        deleted subscription is stored with its final status, never removed.
        """
        subscription = event.subscription
        tenant_id = subscription.metadata.tenant_id

        if not tenant_id:
            raise UnattributableEventError(
                f"Subscription {subscription.id} has no tenant metadata"
            )

        await self.entitlement_service.upsert_subscription(
            tenant_id, subscription.id, to_upsert_model(subscription)
        )

        logger.info(
            f"Stripe subscription {subscription.status}: {subscription.id}",
            extra={
                "event_id": event.event_id,
                "tenant_id": tenant_id,
                "subscription_id": subscription.id,
                "deleted": isinstance(event, SubscriptionDeletedEvent),
            },
        )

    async def _apply_invoice_payment_succeeded(
        self, event: InvoicePaymentSucceededEvent
    ) -> None:
        """
        A paid invoice, e.g. the prorated charge for an add-on.

        Re-fetches the subscription so new items land in the projection.
        Invoices without a subscription, or subscriptions without tenant
        metadata, are acknowledged without a write.
        """
        invoice = event.invoice
        subscription_id = invoice.subscription_id

        if not subscription_id:
            logger.info(
                f"Invoice {invoice.id} has no subscription, nothing to apply",
                extra={"event_id": event.event_id},
            )
            return

        subscription = await self.payment_provider.retrieve_subscription(
            subscription_id
        )
        tenant_id = subscription.metadata.tenant_id

        if not tenant_id:
            logger.warning(
                f"Subscription {subscription_id} has no tenant metadata, skipping invoice {invoice.id}",
                extra={"event_id": event.event_id},
            )
            return

        await self.entitlement_service.upsert_subscription(
            tenant_id, subscription.id, to_upsert_model(subscription)
        )

        logger.info(
            f"Invoice paid for tenant {tenant_id}",
            extra={
                "event_id": event.event_id,
                "tenant_id": tenant_id,
                "subscription_id": subscription.id,
                "invoice_id": invoice.id,
                "amount_paid": invoice.amount_paid,
            },
        )


async def handle_stripe_webhook(request: Request) -> dict:
    """
    Handle incoming webhook from Stripe.

    400 when the signature or payload is bad, 500 when applying failed
    (including a bad Stripe read during apply), otherwise {"received": true}.
    """
    # Raw body, exactly as signed
    payload_bytes = await request.body()
    sig_header = request.headers.get("stripe-signature")

    reconciler = StripeWebhookReconciler()

    try:
        event = await reconciler.parse(payload_bytes, sig_header)
    except SignatureError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except ValidationError as e:
        logger.error(
            "Invalid Stripe webhook payload",
            extra={"validation_errors": str(e.errors())},
        )
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid webhook payload"
        )

    if event is None:
        return {"received": True}

    try:
        await reconciler.apply(event)
    except Exception as e:
        logger.error(
            f"Failed to process Stripe webhook: {str(e)}",
            extra={"error": str(e), "error_type": type(e).__name__},
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Webhook processing failed",
        )

    return {"received": True}
