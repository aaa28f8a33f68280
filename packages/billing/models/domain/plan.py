"""Domain models for billing plans."""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class Plan(BaseModel):
    """Subscription plan from the catalog."""

    id: str
    name: str
    description: Optional[str] = None
    price_monthly: float = 0
    price_yearly: float = 0
    features: list[str] = Field(default_factory=list)
    is_trial: bool = False
    trial_days: Optional[int] = None
    is_active: bool = True
    is_coming_soon: bool = False
    is_addon: bool = False
    monthly_price_id: Optional[str] = None
    yearly_price_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    @property
    def price_ids(self) -> list[str]:
        """Stripe price IDs this plan can be bought with."""
        return [p for p in (self.monthly_price_id, self.yearly_price_id) if p]

    @property
    def is_free(self) -> bool:
        return self.price_monthly == 0 and self.price_yearly == 0

    def offers_price(self, price_id: str) -> bool:
        return price_id in self.price_ids

    def trial_period_days(self) -> Optional[int]:
        """Trial length to put on a new subscription, if any."""
        if self.is_trial and self.trial_days:
            return self.trial_days
        return None

    def monthly_revenue_for(self, price_ids: list[str]) -> Optional[float]:
        """
        Normalized monthly revenue of a subscription billed with price_ids.

        Monthly price wins when both match. None when neither matches.
        """
        if self.monthly_price_id and self.monthly_price_id in price_ids:
            return self.price_monthly
        if self.yearly_price_id and self.yearly_price_id in price_ids:
            return self.price_yearly / 12
        return None


class PlanCreateModel(BaseModel):
    """Model for seeding a plan."""

    id: str
    name: str
    description: Optional[str] = None
    price_monthly: float = 0
    price_yearly: float = 0
    features: list[str] = Field(default_factory=list)
    is_trial: bool = False
    trial_days: Optional[int] = None
    is_active: bool = True
    is_coming_soon: bool = False
    is_addon: bool = False
    monthly_price_id: Optional[str] = None
    yearly_price_id: Optional[str] = None
