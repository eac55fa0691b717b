"""Rate limiting configuration using slowapi."""

from slowapi import Limiter
from slowapi.util import get_remote_address

from registration_api.config import get_settings

settings = get_settings()

# headers_enabled=False: endpoints return Pydantic models, which slowapi
# cannot inject rate-limit headers into.
limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=settings.rate_limit_storage_uri,
    headers_enabled=False,
    enabled=settings.rate_limit_enabled,
)


def submit_limit() -> str:
    """Get form submission rate limit."""
    return settings.rate_limit_submit


def reference_limit() -> str:
    """Get standalone reference generation rate limit."""
    return settings.rate_limit_reference
