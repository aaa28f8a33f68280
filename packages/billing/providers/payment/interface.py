"""
Interface for payment providers.

Abstracts payment processing away from specific platforms (Stripe, Paddle, etc.)
"""

from abc import ABC, abstractmethod
from typing import Optional

from packages.billing.models.domain.payment import (
    CheckoutSessionResult,
    ProviderPrice,
)
from packages.billing.models.domain.stripe_webhooks import (
    StripeSubscriptionData,
    StripeWebhookPayload,
)


class PaymentProviderInterface(ABC):
    """
    Abstract interface for payment providers.

    Every method is one remote request with no retries. Failures raise
    ProviderError; bad webhook signatures raise SignatureError.
    """

    @abstractmethod
    async def create_customer(
        self,
        tenant_id: str,
        email: str,
        name: Optional[str] = None,
    ) -> str:
        """
        Create a customer in the payment provider.

        Args:
            tenant_id: Internal tenant ID, stored in customer metadata
            email: Customer email
            name: Customer display name

        Returns:
            customer_id: Payment provider customer ID
        """
        pass

    @abstractmethod
    async def find_customer_by_email(self, email: str) -> Optional[str]:
        """
        Look up an existing customer by email.

        Returns:
            The first matching customer ID, or None
        """
        pass

    @abstractmethod
    async def retrieve_subscription(
        self, subscription_id: str
    ) -> StripeSubscriptionData:
        """
        Fetch the current state of a subscription.

        Args:
            subscription_id: Payment provider subscription ID
        """
        pass

    @abstractmethod
    async def create_subscription_item(
        self,
        subscription_id: str,
        price_id: str,
        quantity: int = 1,
    ) -> str:
        """
        Attach a price to an existing subscription.

        The partial period is prorated and invoiced immediately.

        Args:
            subscription_id: Payment provider subscription ID
            price_id: Price to add
            quantity: Item quantity

        Returns:
            subscription_item_id: ID of the created item
        """
        pass

    @abstractmethod
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
        """
        Create a hosted checkout session for a new subscription.

        Args:
            customer_id: Existing provider customer to bill
            price_id: Price to subscribe to
            success_url: URL to redirect on success
            cancel_url: URL to redirect on cancel
            metadata: Metadata on the checkout session
            subscription_metadata: Metadata on the resulting subscription
            trial_period_days: Optional trial period in days

        Returns:
            CheckoutSessionResult with session ID and redirect URL
        """
        pass

    @abstractmethod
    async def create_portal_session(
        self,
        customer_id: str,
        return_url: str,
    ) -> str:
        """
        Create a customer portal session for managing billing.

        Returns:
            portal_url: URL to customer portal
        """
        pass

    @abstractmethod
    async def construct_event(
        self, payload: bytes, signature: Optional[str]
    ) -> StripeWebhookPayload:
        """
        Verify a webhook signature over the raw body and decode the envelope.

        Args:
            payload: Raw request body, exactly as received
            signature: Value of the signature header

        Returns:
            The verified event envelope
        """
        pass

    @abstractmethod
    async def list_recurring_prices(self) -> list[ProviderPrice]:
        """List active recurring prices with their products."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Check if the payment backend is available and healthy.

        Returns:
            True if healthy, False otherwise
        """
        pass
