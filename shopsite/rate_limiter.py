"""
Fixed-window rate limiting for the public booking and notification endpoints.

Counts are kept per process and pushed to Redis every few seconds when REDIS_URL
is set, so workers converge on a shared count without a round trip per request.
"""

import logging
import os
import time
from dataclasses import dataclass
from threading import Lock
from typing import NamedTuple, Optional

import redis
from fastapi import HTTPException, Request, status

from .auth import get_client_ip

logger = logging.getLogger(__name__)

RATE_LIMIT_ENABLED = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"

REDIS_SYNC_SECONDS = 10
REDIS_RETRY_SECONDS = 30
PURGE_EVERY_SECONDS = 60


@dataclass
class WindowCounter:
    count: int
    window_ends: int
    synced_at: int


class RateLimitResult(NamedTuple):
    allowed: bool
    count: int
    retry_after: int


_redis: Optional[redis.Redis] = None
_counters: dict[str, WindowCounter] = {}
_counters_lock = Lock()
_last_purge = 0
_redis_retry_at = 0.0


def _mask_redis_url(url: str) -> str:
    if "@" not in url:
        return "****"
    scheme, host = url.split("://", 1)[0], url.rsplit("@", 1)[1]
    return f"{scheme}://****@{host}"


def get_redis_client() -> Optional[redis.Redis]:
    """
    Shared Redis client, created on first use.
    None when REDIS_URL is unset; raises when it is set but unreachable.
    After a failed connect, callers get the error straight away for REDIS_RETRY_SECONDS.
    """
    global _redis, _redis_retry_at

    if _redis is not None:
        return _redis

    redis_url = os.getenv("REDIS_URL")
    if not redis_url:
        return None

    if time.time() < _redis_retry_at:
        raise redis.ConnectionError("Redis unavailable, waiting before reconnecting")

    logger.info(f"📡 Connecting to Redis at {_mask_redis_url(redis_url)}")
    try:
        client = redis.from_url(
            redis_url,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5,
            retry_on_timeout=True,
            health_check_interval=30,
        )
        client.ping()
    except Exception as e:
        logger.error(f"❌ Redis unavailable: {e}")
        _redis_retry_at = time.time() + REDIS_RETRY_SECONDS
        raise

    _redis = client
    logger.info("✅ Redis connected")
    return _redis


def _purge_finished_windows(now: int) -> None:
    global _last_purge
    if now - _last_purge < PURGE_EVERY_SECONDS:
        return
    with _counters_lock:
        finished = [key for key, counter in _counters.items() if now >= counter.window_ends]
        for key in finished:
            del _counters[key]
    _last_purge = now
    if finished:
        logger.debug(f"🧹 Dropped {len(finished)} finished rate limit windows")


def _counter_from_redis(key: str, window_seconds: int, now: int, client: Optional[redis.Redis]) -> WindowCounter:
    """Resume a window another worker started, or open a new one"""
    if client is not None:
        try:
            stored, ttl = client.get(key), client.ttl(key)
            if stored and ttl > 0:
                return WindowCounter(count=int(stored), window_ends=now + ttl, synced_at=now)
        except Exception as e:
            logger.warning(f"⚠️ Could not read {key} from Redis, counting locally: {e}")
    return WindowCounter(count=0, window_ends=now + window_seconds, synced_at=now)


def check_rate_limit(
    key: str, limit: int, window_seconds: int, client: Optional[redis.Redis]
) -> RateLimitResult:
    """Record one request against `key` and say whether it fits in the current window"""
    now = int(time.time())
    _purge_finished_windows(now)

    with _counters_lock:
        counter = _counters.get(key)
        if counter is None:
            counter = _counters[key] = _counter_from_redis(key, window_seconds, now, client)
        elif now >= counter.window_ends:
            counter.count, counter.window_ends, counter.synced_at = 0, now + window_seconds, 0

        allowed = counter.count < limit
        if allowed:
            counter.count += 1

        if client is not None and now - counter.synced_at >= REDIS_SYNC_SECONDS:
            try:
                client.set(key, counter.count, ex=window_seconds)
                counter.synced_at = now
            except Exception as e:
                logger.warning(f"⚠️ Could not push {key} to Redis: {e}")

        return RateLimitResult(allowed, counter.count, max(0, counter.window_ends - now))


async def enforce_rate_limit(request: Request, limit: int, window_seconds: int, key_prefix: str, per_ip: bool):
    """Raise 429 with Retry-After once the caller has used up the window"""
    if not RATE_LIMIT_ENABLED:
        return

    try:
        client = get_redis_client()
    except Exception:
        client = None

    key = f"{key_prefix}:{get_client_ip(request) if per_ip else 'global'}"

    try:
        result = check_rate_limit(key, limit, window_seconds, client)
    except Exception as e:
        logger.error(f"❌ Rate limit check failed for {key}: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Rate limiting service temporarily unavailable",
        ) from e

    if not result.allowed:
        logger.warning(f"🚫 Rate limit hit for {key} ({limit} per {window_seconds}s)")
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail={
                "message": "Too many requests. Please wait a moment and try again.",
                "retry_after": result.retry_after,
                "limit": limit,
                "window_seconds": window_seconds,
            },
            headers={"Retry-After": str(result.retry_after)},
        )

    request.state.rate_limit_remaining = limit - result.count


def create_rate_limiter(limit: int, window_seconds: int, key_prefix: str = "rate_limit", per_ip: bool = True):
    """Build a dependency that limits an endpoint, e.g. `Depends(create_rate_limiter(10, 60, "booking"))`"""

    async def rate_limiter(request: Request):
        await enforce_rate_limit(request, limit, window_seconds, key_prefix, per_ip)

    return rate_limiter
