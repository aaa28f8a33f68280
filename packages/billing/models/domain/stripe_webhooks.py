"""
Domain models for Stripe webhook payloads.

Strongly-typed Pydantic models for the Stripe objects the billing engine
reads, plus the closed set of billing events a verified envelope decodes to.
"""

from datetime import datetime, timezone
from typing import Optional, Any, Union
from enum import Enum
from pydantic import BaseModel, Field, field_validator


class StripeWebhookType(str, Enum):
    """Stripe webhook event types that change entitlement state."""

    CHECKOUT_SESSION_COMPLETED = "checkout.session.completed"
    SUBSCRIPTION_UPDATED = "customer.subscription.updated"
    SUBSCRIPTION_DELETED = "customer.subscription.deleted"
    INVOICE_PAYMENT_SUCCEEDED = "invoice.payment_succeeded"


RELEVANT_EVENT_TYPES = frozenset(t.value for t in StripeWebhookType)


def _expandable_id(v: Any) -> Any:
    """Stripe fields like customer/subscription may arrive expanded."""
    if isinstance(v, dict):
        return v.get("id")
    return v


def epoch_to_datetime(value: Optional[int]) -> Optional[datetime]:
    if value is None:
        return None
    return datetime.fromtimestamp(value, tz=timezone.utc)


class StripeMetadata(BaseModel):
    """Stripe metadata (tenant and plan attribution live here)."""

    tenant_id: Optional[str] = None
    plan_id: Optional[str] = None
    price_id: Optional[str] = None


class StripeItemPrice(BaseModel):
    id: str


class StripeSubscriptionItemData(BaseModel):
    """Stripe subscription item object."""

    id: str
    price: StripeItemPrice
    quantity: Optional[int] = 1
    metadata: StripeMetadata = Field(default_factory=StripeMetadata)
    # Newer API versions report the billing period per item
    current_period_end: Optional[int] = None


class StripeSubscriptionItemList(BaseModel):
    data: list[StripeSubscriptionItemData] = Field(default_factory=list)


class StripeSubscriptionData(BaseModel):
    """Stripe subscription object."""

    id: str
    customer: Optional[str] = None
    status: str
    current_period_end: Optional[int] = None
    created: Optional[int] = None
    cancel_at_period_end: bool = False
    metadata: StripeMetadata = Field(default_factory=StripeMetadata)
    items: StripeSubscriptionItemList = Field(
        default_factory=StripeSubscriptionItemList
    )

    @field_validator("customer", mode="before")
    @classmethod
    def validate_customer(cls, v):
        return _expandable_id(v)

    @property
    def first_item(self) -> Optional[StripeSubscriptionItemData]:
        return self.items.data[0] if self.items.data else None

    @property
    def price_ids(self) -> list[str]:
        return [item.price.id for item in self.items.data]

    @property
    def period_end(self) -> Optional[int]:
        """Subscription period end, falling back to the first item's."""
        if self.current_period_end is not None:
            return self.current_period_end
        if self.first_item is not None:
            return self.first_item.current_period_end
        return None

    def resolve_plan_id(self, explicit_plan_id: Optional[str] = None) -> Optional[str]:
        """
        Resolve the plan this subscription is for.

        Precedence: explicit (checkout session) > subscription metadata >
        first item metadata.
        """
        if explicit_plan_id:
            return explicit_plan_id
        if self.metadata.plan_id:
            return self.metadata.plan_id
        if self.first_item is not None and self.first_item.metadata.plan_id:
            return self.first_item.metadata.plan_id
        return None


class StripeSubscriptionDetails(BaseModel):
    subscription: Optional[str] = None
    metadata: StripeMetadata = Field(default_factory=StripeMetadata)

    @field_validator("subscription", mode="before")
    @classmethod
    def validate_subscription(cls, v):
        return _expandable_id(v)


class StripeInvoiceParent(BaseModel):
    subscription_details: Optional[StripeSubscriptionDetails] = None


class StripeInvoiceData(BaseModel):
    """Stripe invoice object."""

    id: str
    customer: Optional[str] = None
    # Older API versions
    subscription: Optional[str] = None
    # Newer API versions
    parent: Optional[StripeInvoiceParent] = None
    amount_paid: Optional[int] = None
    currency: Optional[str] = None
    billing_reason: Optional[str] = None

    @field_validator("customer", "subscription", mode="before")
    @classmethod
    def validate_ids(cls, v):
        return _expandable_id(v)

    @property
    def subscription_id(self) -> Optional[str]:
        if self.subscription:
            return self.subscription
        if self.parent and self.parent.subscription_details:
            return self.parent.subscription_details.subscription
        return None


class StripeCheckoutSessionData(BaseModel):
    """Stripe checkout session object."""

    id: str
    customer: Optional[str] = None
    subscription: Optional[str] = None
    mode: Optional[str] = None
    payment_status: Optional[str] = None
    metadata: StripeMetadata = Field(default_factory=StripeMetadata)

    @field_validator("customer", "subscription", mode="before")
    @classmethod
    def validate_ids(cls, v):
        return _expandable_id(v)


class StripeEventData(BaseModel):
    """Stripe event data wrapper."""

    object: dict[str, Any]  # The actual object (session, subscription, invoice)


class StripeWebhookPayload(BaseModel):
    """Complete Stripe webhook envelope."""

    id: str
    type: str
    data: StripeEventData
    created: Optional[int] = None
    livemode: bool = False

    @property
    def is_relevant(self) -> bool:
        return self.type in RELEVANT_EVENT_TYPES


# ============================================================================
# Billing events
# ============================================================================


class CheckoutCompletedEvent(BaseModel):
    event_id: str
    session: StripeCheckoutSessionData


class SubscriptionUpdatedEvent(BaseModel):
    event_id: str
    subscription: StripeSubscriptionData


class SubscriptionDeletedEvent(BaseModel):
    event_id: str
    subscription: StripeSubscriptionData


class InvoicePaymentSucceededEvent(BaseModel):
    event_id: str
    invoice: StripeInvoiceData


class OtherEvent(BaseModel):
    event_id: str
    event_type: str


BillingEvent = Union[
    CheckoutCompletedEvent,
    SubscriptionUpdatedEvent,
    SubscriptionDeletedEvent,
    InvoicePaymentSucceededEvent,
    OtherEvent,
]


def decode_event(payload: StripeWebhookPayload) -> BillingEvent:
    """
    Decode a verified envelope into a billing event.

    Raises pydantic.ValidationError when a relevant event carries an object
    that does not match its type.
    """
    obj = payload.data.object

    if payload.type == StripeWebhookType.CHECKOUT_SESSION_COMPLETED.value:
        return CheckoutCompletedEvent(
            event_id=payload.id, session=StripeCheckoutSessionData(**obj)
        )
    if payload.type == StripeWebhookType.SUBSCRIPTION_UPDATED.value:
        return SubscriptionUpdatedEvent(
            event_id=payload.id, subscription=StripeSubscriptionData(**obj)
        )
    if payload.type == StripeWebhookType.SUBSCRIPTION_DELETED.value:
        return SubscriptionDeletedEvent(
            event_id=payload.id, subscription=StripeSubscriptionData(**obj)
        )
    if payload.type == StripeWebhookType.INVOICE_PAYMENT_SUCCEEDED.value:
        return InvoicePaymentSucceededEvent(
            event_id=payload.id, invoice=StripeInvoiceData(**obj)
        )
    return OtherEvent(event_id=payload.id, event_type=payload.type)
