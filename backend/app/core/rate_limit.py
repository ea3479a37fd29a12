"""Per-client request limits.

One shared budget covers every API route; login and registration carry their
own tighter limits. Limits are read from settings on each check.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from app.core.config import settings

API_LIMIT_MESSAGE = "Too many requests from this IP"
LOGIN_LIMIT_MESSAGE = "Too many login attempts, please try again later"
REGISTER_LIMIT_MESSAGE = "Too many authentication attempts, please try again later"


def api_limit() -> str:
    return settings.RATE_LIMIT_DEFAULT


def login_limit() -> str:
    return settings.LOGIN_RATE_LIMIT


def register_limit() -> str:
    return settings.REGISTER_RATE_LIMIT


limiter = Limiter(
    key_func=get_remote_address,
    application_limits=[api_limit],
    enabled=settings.RATE_LIMIT_ENABLED,
)
