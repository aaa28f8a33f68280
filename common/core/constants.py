from enum import Enum


class Environment(str, Enum):
    """Environment profiles."""

    LOCAL = "local"
    DEV = "dev"
    STAGING = "staging"
    PRODUCTION = "production"


# Statuses that entitle a tenant to the product
ENTITLED_SUBSCRIPTION_STATUSES = ("trialing", "active")

# Redirect target for checkout and billing portal
BILLING_RETURN_PATH = "/dashboard/profile"
