"""Billing API routes."""

from packages.billing.routes import admin, billing, plans, webhooks

__all__ = ["admin", "billing", "plans", "webhooks"]
