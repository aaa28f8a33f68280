"""Global rate limiter instance for SlowAPI."""

from slowapi import Limiter
from slowapi.util import get_remote_address
from common.core.config import settings

# memory:// limits per process; point rate_limit_storage_uri at redis://
# to share limits across API pods.
# Route-level limits (checkout, portal) come from settings.
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["10/second", "300/minute"],
    storage_uri=settings.rate_limit_storage_uri,
)
