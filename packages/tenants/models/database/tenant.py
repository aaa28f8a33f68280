from sqlalchemy import Column, String, DateTime, Boolean, Integer
from sqlalchemy.sql import func

from common.db.base import Base


class TenantEntity(Base):
    __tablename__ = "tenants"

    # Identity provider UID
    id = Column(String(128), primary_key=True, index=True)
    email = Column(String(320), nullable=False, index=True)
    full_name = Column(String, nullable=True)

    # Stripe customer ID - one billable customer per tenant
    stripe_customer_id = Column(String(255), nullable=True, unique=True, index=True)

    # Manual access override, independent of any subscription
    is_vip = Column(Boolean, nullable=False, default=False, server_default="false")
    vip_instance_limit = Column(Integer, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
