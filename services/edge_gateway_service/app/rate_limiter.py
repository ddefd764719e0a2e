from __future__ import annotations

from slowapi import Limiter
from slowapi.util import get_remote_address

from services.edge_gateway_service.config import Settings, settings


def rate_limit_expression(config: Settings) -> str:
    return f"{config.RATE_LIMIT_MAX_REQUESTS} per {config.RATE_LIMIT_WINDOW_SECONDS} seconds"


# In-memory storage: limits are per gateway process, keyed by client IP.
limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)

_active_limit = rate_limit_expression(settings)


def current_rate_limit() -> str:
    return _active_limit


# Every route shares one bucket per client, like an app-wide limiter.
gateway_rate_limit = limiter.shared_limit(current_rate_limit, scope="gateway")


def configure_limiter(config: Settings) -> Limiter:
    """Apply ``config`` to the shared limiter and start from empty counters."""
    global _active_limit
    _active_limit = rate_limit_expression(config)
    limiter.enabled = config.RATE_LIMIT_ENABLED
    limiter.reset()
    return limiter
