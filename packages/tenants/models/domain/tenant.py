from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class Tenant(BaseModel):
    id: str
    email: str
    full_name: Optional[str] = None
    stripe_customer_id: Optional[str] = None
    is_vip: bool = False
    vip_instance_limit: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    @property
    def display_name(self) -> str:
        return self.full_name or self.email


class TenantCreateModel(BaseModel):
    """Model for creating a tenant account."""

    id: str
    email: str
    full_name: Optional[str] = None
    is_vip: bool = False
    vip_instance_limit: Optional[int] = None


class TenantUpdateModel(BaseModel):
    """
    Model for updating a tenant.

    The billing engine only ever sets stripe_customer_id.
    """

    email: Optional[str] = None
    full_name: Optional[str] = None
    stripe_customer_id: Optional[str] = None
    is_vip: Optional[bool] = None
    vip_instance_limit: Optional[int] = None
