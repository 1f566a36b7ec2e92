"""Per-client request limiting applied to every route of the app."""

import logging

from fastapi import Request
from limits import RateLimitItem, parse
from slowapi import Limiter
from slowapi.util import get_remote_address

from leaveflow.core.config import settings
from leaveflow.core.exceptions import RateLimited

logger = logging.getLogger(__name__)

RATE_LIMIT_SCOPE = "leaveflow"


def build_limiter(enabled: bool = None) -> Limiter:
    if enabled is None:
        enabled = settings.RATE_LIMITING_ACTIVE
    return Limiter(key_func=get_remote_address, enabled=enabled)


def parse_rate_limit(rate: str = None) -> RateLimitItem:
    return parse(rate or settings.RATE_LIMIT)


def enforce_rate_limit(request: Request) -> None:
    """
    App-wide dependency that counts each routed call against the client IP.
    It runs before the authorization gate, so rejected calls are counted too.
    The counters live in ``app.state.limiter`` and the allowance in
    ``app.state.rate_limit``.
    """
    limiter: Limiter = request.app.state.limiter
    if not limiter.enabled:
        return
    client = get_remote_address(request)
    if not limiter.limiter.hit(request.app.state.rate_limit, RATE_LIMIT_SCOPE, client):
        logger.warning(f"Rate limit exceeded for {client}")
        raise RateLimited()
