"""
Billing package - keeps tenant entitlement in sync with Stripe.

This package integrates with:
- Stripe: checkout, customer portal, subscriptions and webhooks

Stripe is the system of record; the subscriptions table is a projection
maintained by the webhook reconciler.
"""
