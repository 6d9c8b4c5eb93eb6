"""Per-email login lockout.

Primary store: Redis ``INCR`` + ``EXPIRE`` on ``login_attempts:{email}`` so the
counter is shared across workers. Fallback: an in-process dict when Redis is
unreachable (development and tests).
"""

import time
from collections import defaultdict
from datetime import datetime, timedelta, timezone

import structlog

from app.config import settings

logger = structlog.get_logger()

MAX_LOGIN_ATTEMPTS = 5
LOCKOUT_WINDOW_SECONDS = 15 * 60
_MAX_TRACKED_EMAILS = 10000

_LOGIN_ATTEMPTS: dict[str, list[datetime]] = defaultdict(list)

_redis_client = None
_redis_retry_after: float = 0  # monotonic timestamp; retry Redis after this time


async def _get_redis_client():
    """Return a shared async Redis client, or None if Redis is unavailable."""
    global _redis_client, _redis_retry_after
    if time.monotonic() < _redis_retry_after:
        return None
    if _redis_client is not None:
        return _redis_client
    try:
        import redis.asyncio as aioredis

        client = aioredis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=2,
        )
        await client.ping()
        _redis_client = client
        return _redis_client
    except Exception:
        _redis_retry_after = time.monotonic() + 60
        logger.debug("redis_unavailable_for_login_lockout")
        return None


def _key(email: str) -> str:
    return f"login_attempts:{email.lower()}"


def _prune(cutoff: datetime) -> None:
    stale = [k for k, v in _LOGIN_ATTEMPTS.items() if all(t <= cutoff for t in v)]
    for k in stale:
        del _LOGIN_ATTEMPTS[k]
    if len(_LOGIN_ATTEMPTS) > _MAX_TRACKED_EMAILS:
        oldest_first = sorted(_LOGIN_ATTEMPTS, key=lambda k: max(_LOGIN_ATTEMPTS[k], default=cutoff))
        for k in oldest_first[: len(_LOGIN_ATTEMPTS) - _MAX_TRACKED_EMAILS]:
            del _LOGIN_ATTEMPTS[k]


async def is_locked_out(email: str) -> bool:
    r = await _get_redis_client()
    if r is not None:
        try:
            count = await r.get(_key(email))
            return count is not None and int(count) >= MAX_LOGIN_ATTEMPTS
        except Exception:
            logger.warning("login_lockout_redis_read_failed")

    cutoff = datetime.now(timezone.utc) - timedelta(seconds=LOCKOUT_WINDOW_SECONDS)
    _prune(cutoff)
    recent = [t for t in _LOGIN_ATTEMPTS.get(_key(email), []) if t > cutoff]
    if recent:
        _LOGIN_ATTEMPTS[_key(email)] = recent
    return len(recent) >= MAX_LOGIN_ATTEMPTS


async def record_failed_attempt(email: str) -> None:
    r = await _get_redis_client()
    if r is not None:
        try:
            pipe = r.pipeline()
            pipe.incr(_key(email))
            pipe.expire(_key(email), LOCKOUT_WINDOW_SECONDS)
            await pipe.execute()
            return
        except Exception:
            logger.warning("login_lockout_redis_write_failed")

    _LOGIN_ATTEMPTS[_key(email)].append(datetime.now(timezone.utc))


async def clear_attempts(email: str) -> None:
    r = await _get_redis_client()
    if r is not None:
        try:
            await r.delete(_key(email))
        except Exception:
            logger.warning("login_lockout_redis_clear_failed")

    _LOGIN_ATTEMPTS.pop(_key(email), None)


def reset_local_attempts() -> None:
    """Forget every in-process counter."""
    _LOGIN_ATTEMPTS.clear()
