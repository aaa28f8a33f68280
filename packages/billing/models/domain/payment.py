"""
Domain models for payment provider results.

The provider client returns these instead of raw SDK objects.
"""

from typing import Optional
from pydantic import BaseModel, Field


class CheckoutSessionResult(BaseModel):
    """A hosted checkout session the user is redirected to."""

    checkout_session_id: str
    checkout_url: Optional[str] = None


class AddonAttachResult(BaseModel):
    """An add-on price attached to an existing subscription."""

    success: bool = True
    message: str
    subscription_item_id: Optional[str] = None


class ProviderPriceProduct(BaseModel):
    id: str
    name: Optional[str] = None


class ProviderPrice(BaseModel):
    """An active recurring price from the provider catalog."""

    id: str
    unit_amount: Optional[int] = None
    currency: str
    interval: Optional[str] = None
    product: Optional[ProviderPriceProduct] = None


class ProviderPriceList(BaseModel):
    """Active recurring prices split by billing interval."""

    monthly: list[ProviderPrice] = Field(default_factory=list)
    yearly: list[ProviderPrice] = Field(default_factory=list)
