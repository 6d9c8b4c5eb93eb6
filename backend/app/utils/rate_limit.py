import os

from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.requests import Request


def get_real_ip(request: Request) -> str:
    """Client IP used as the rate-limit key.

    X-Forwarded-For is only trusted when TRUSTED_PROXY_COUNT > 0; the entry
    added by the outermost trusted proxy is used so clients cannot spoof it.
    """
    trusted_proxy_count = int(os.getenv("TRUSTED_PROXY_COUNT", "0"))
    if trusted_proxy_count > 0:
        forwarded = request.headers.get("X-Forwarded-For", "")
        if forwarded:
            ips = [ip.strip() for ip in forwarded.split(",")]
            return ips[max(0, len(ips) - trusted_proxy_count)]
    return get_remote_address(request)


def _get_storage_uri() -> str | None:
    """Share counters through Redis when a non-local Redis is configured."""
    from app.config import settings

    if settings.REDIS_URL and "localhost" not in settings.REDIS_URL:
        return settings.REDIS_URL
    return None


_is_dev = os.getenv("APP_ENV", "development") == "development"

limiter = Limiter(
    key_func=get_real_ip,
    storage_uri=_get_storage_uri(),
    default_limits=["200/minute" if _is_dev else "60/minute"],
)

# Login, registration and password reset endpoints
AUTH_RATE_LIMIT = "30/minute" if _is_dev else "5/minute"
LIST_RATE_LIMIT = "100/minute" if _is_dev else "30/minute"
