"""
Stripe implementation of payment provider.
"""

from typing import Optional
import stripe

from common.core.config import settings
from common.core.exceptions import ProviderError, SignatureError
from common.core.otel_axiom_exporter import trace_span, get_logger
from packages.billing.models.domain.payment import (
    CheckoutSessionResult,
    ProviderPrice,
    ProviderPriceProduct,
)
from packages.billing.models.domain.stripe_webhooks import (
    StripeSubscriptionData,
    StripeWebhookPayload,
)
from packages.billing.providers.payment.interface import PaymentProviderInterface

logger = get_logger(__name__)


def _provider_error(e: stripe.StripeError) -> ProviderError:
    return ProviderError(
        message=str(e),
        provider_status=e.http_status or 502,
        user_message=e.user_message,
    )


class StripePaymentProvider(PaymentProviderInterface):
    """Stripe-based payment implementation."""

    def __init__(self):
        """Initialize Stripe with API credentials."""
        stripe.api_key = settings.stripe_secret_key
        # Stripe redelivers webhooks and the UI can retry; no hidden retries here
        stripe.max_network_retries = 0

    @trace_span
    async def create_customer(
        self,
        tenant_id: str,
        email: str,
        name: Optional[str] = None,
    ) -> str:
        """Create a Stripe customer tagged with the tenant ID."""
        try:
            customer = stripe.Customer.create(
                email=email,
                name=name,
                metadata={"tenant_id": tenant_id},
            )

            logger.info(
                "Created Stripe customer",
                extra={"tenant_id": tenant_id, "customer_id": customer.id},
            )

            return customer.id

        except stripe.StripeError as e:
            logger.error(
                f"Failed to create Stripe customer: {str(e)}",
                extra={"tenant_id": tenant_id, "error": str(e)},
            )
            raise _provider_error(e) from e

    @trace_span
    async def find_customer_by_email(self, email: str) -> Optional[str]:
        """Return the first Stripe customer with this email, if any."""
        try:
            customers = stripe.Customer.list(email=email, limit=1)
            if not customers.data:
                logger.info("No Stripe customer found by email")
                return None

            customer_id = customers.data[0].id
            logger.info(
                "Found Stripe customer by email", extra={"customer_id": customer_id}
            )
            return customer_id

        except stripe.StripeError as e:
            logger.error(
                f"Failed to search Stripe customers: {str(e)}",
                extra={"error": str(e)},
            )
            raise _provider_error(e) from e

    @trace_span
    async def retrieve_subscription(
        self, subscription_id: str
    ) -> StripeSubscriptionData:
        """Retrieve a Stripe subscription and its items."""
        try:
            subscription = stripe.Subscription.retrieve(subscription_id)
            return StripeSubscriptionData.model_validate(subscription.to_dict())

        except stripe.StripeError as e:
            logger.error(
                f"Failed to retrieve subscription: {str(e)}",
                extra={"subscription_id": subscription_id, "error": str(e)},
            )
            raise _provider_error(e) from e

    @trace_span
    async def create_subscription_item(
        self,
        subscription_id: str,
        price_id: str,
        quantity: int = 1,
    ) -> str:
        """
        Add a price to an existing Stripe subscription.

        Uses always_invoice so the prorated amount for the current period is
        charged now rather than on the next renewal.
        """
        try:
            item = stripe.SubscriptionItem.create(
                subscription=subscription_id,
                price=price_id,
                quantity=quantity,
                proration_behavior="always_invoice",
            )

            logger.info(
                "Added item to Stripe subscription",
                extra={
                    "subscription_id": subscription_id,
                    "price_id": price_id,
                    "item_id": item.id,
                },
            )

            return item.id

        except stripe.StripeError as e:
            logger.error(
                f"Failed to add subscription item: {str(e)}",
                extra={
                    "subscription_id": subscription_id,
                    "price_id": price_id,
                    "error": str(e),
                },
            )
            raise _provider_error(e) from e

    @trace_span
    async def create_checkout_session(
        self,
        customer_id: str,
        price_id: str,
        success_url: str,
        cancel_url: str,
        metadata: dict[str, str],
        subscription_metadata: dict[str, str],
        trial_period_days: Optional[int] = None,
    ) -> CheckoutSessionResult:
        """Create a Stripe checkout session in subscription mode."""
        try:
            subscription_data = {"metadata": subscription_metadata}
            if trial_period_days:
                subscription_data["trial_period_days"] = trial_period_days

            session = stripe.checkout.Session.create(
                customer=customer_id,
                payment_method_types=["card"],
                line_items=[
                    {
                        "price": price_id,
                        "quantity": 1,
                    }
                ],
                mode="subscription",
                success_url=success_url,
                cancel_url=cancel_url,
                metadata=metadata,
                subscription_data=subscription_data,
            )

            logger.info(
                "Created Stripe checkout session",
                extra={
                    "customer_id": customer_id,
                    "price_id": price_id,
                    "session_id": session.id,
                },
            )

            return CheckoutSessionResult(
                checkout_session_id=session.id, checkout_url=session.url
            )

        except stripe.StripeError as e:
            logger.error(
                f"Failed to create checkout session: {str(e)}",
                extra={"customer_id": customer_id, "error": str(e)},
            )
            raise _provider_error(e) from e

    @trace_span
    async def create_portal_session(
        self,
        customer_id: str,
        return_url: str,
    ) -> str:
        """Create Stripe customer portal session."""
        try:
            session = stripe.billing_portal.Session.create(
                customer=customer_id,
                return_url=return_url,
            )

            logger.info(
                "Created Stripe portal session", extra={"customer_id": customer_id}
            )

            return session.url

        except stripe.StripeError as e:
            logger.error(
                f"Failed to create portal session: {str(e)}",
                extra={"customer_id": customer_id, "error": str(e)},
            )
            raise _provider_error(e) from e

    @trace_span
    async def construct_event(
        self, payload: bytes, signature: Optional[str]
    ) -> StripeWebhookPayload:
        """
        Verify the Stripe-Signature header against the raw body.

        The envelope is decoded from the same bytes that were verified.
        """
        if not signature:
            raise SignatureError("Missing stripe-signature header")
        if not settings.stripe_webhook_secret:
            logger.error("Stripe webhook secret is not configured")
            raise SignatureError("Webhook secret not configured")

        try:
            stripe.Webhook.construct_event(
                payload, signature, settings.stripe_webhook_secret
            )
        except stripe.SignatureVerificationError as e:
            logger.error(f"Stripe webhook signature verification failed: {str(e)}")
            raise SignatureError("Invalid signature") from e
        except ValueError as e:
            logger.error(f"Stripe webhook payload is not valid JSON: {str(e)}")
            raise SignatureError("Invalid payload") from e

        return StripeWebhookPayload.model_validate_json(payload)

    @trace_span
    async def list_recurring_prices(self) -> list[ProviderPrice]:
        """List active recurring Stripe prices with products expanded."""
        try:
            prices = stripe.Price.list(
                active=True,
                type="recurring",
                expand=["data.product"],
                limit=100,
            )

            result = []
            for price in prices.auto_paging_iter():
                product = price.product
                if isinstance(product, str):
                    price_product = ProviderPriceProduct(id=product)
                elif product is not None:
                    price_product = ProviderPriceProduct(
                        id=product.id, name=getattr(product, "name", None)
                    )
                else:
                    price_product = None

                result.append(
                    ProviderPrice(
                        id=price.id,
                        unit_amount=price.unit_amount,
                        currency=price.currency,
                        interval=price.recurring.interval if price.recurring else None,
                        product=price_product,
                    )
                )

            logger.info("Listed Stripe prices", extra={"count": len(result)})
            return result

        except stripe.StripeError as e:
            logger.error(
                f"Failed to list Stripe prices: {str(e)}", extra={"error": str(e)}
            )
            raise _provider_error(e) from e

    @trace_span
    async def health_check(self) -> bool:
        """Check Stripe health."""
        try:
            # Try to retrieve account to verify API key works
            stripe.Account.retrieve()
            return True
        except stripe.StripeError as e:
            logger.error(f"Payment health check failed: {e}")
            return False
