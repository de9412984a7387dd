# backend/slotbook/middleware/rate_limit.py
"""
Per-IP rate limiting for the abuse-prone endpoints.

Limits (per settings.rate_limit_window_seconds):
- POST /bookings     - settings.booking_rate_limit
- POST /auth/login   - settings.login_rate_limit

Fixed windows in Redis (INCR + EXPIRE). Never used for capacity
correctness: if Redis is unreachable requests go through.
"""

import logging
from typing import NamedTuple, Optional

from fastapi import Request
from redis.exceptions import RedisError

from ..config import settings
from ..errors import MSG_RATE_LIMITED, error_response
from ..redis_client import redis_client
from ..utils.client_ip import client_ip

logger = logging.getLogger(__name__)

KEY_PREFIX = "rl"


class RateRule(NamedTuple):
    name: str
    setting: str  # Settings attribute holding the limit
    message: str


RATE_RULES = {
    ("POST", "/bookings"): RateRule("booking", "booking_rate_limit", MSG_RATE_LIMITED),
    ("POST", "/auth/login"): RateRule(
        "login", "login_rate_limit", "Too many login attempts. Please wait."
    ),
}


# ── Core ─────────────────────────────────────────────────────────────────


def check_limit(key: str, limit: int, window: int) -> tuple[bool, Optional[int]]:
    """
    Count one hit. Returns (allowed, retry_after).

    limit=0 disables the check.
    """
    if limit <= 0:
        return True, None

    try:
        pipe = redis_client.pipeline()
        pipe.incr(key)
        pipe.ttl(key)
        count, ttl = pipe.execute()

        if ttl == -1:
            redis_client.expire(key, window)
            ttl = window

        if count > limit:
            return False, ttl

        return True, None

    except RedisError as e:
        logger.error(f"Rate limit check failed: {e}")
        return True, None  # fail open


# ── Middleware ───────────────────────────────────────────────────────────


async def rate_limit_middleware(request: Request, call_next):
    rule = RATE_RULES.get((request.method, request.url.path))
    if rule is None:
        return await call_next(request)

    ip = client_ip(request)
    window = settings.rate_limit_window_seconds
    allowed, retry = check_limit(
        f"{KEY_PREFIX}:{rule.name}:{ip}",
        getattr(settings, rule.setting),
        window,
    )

    if not allowed:
        logger.warning(f"Rate limit hit: {rule.name} from {ip}")
        response = error_response(429, rule.message)
        response.headers["Retry-After"] = str(retry or window)
        return response

    return await call_next(request)
