"""Redis connection pool.

Only the rate limiter uses Redis; live push stays in-process. The pool is
initialized in the app lifespan and everything that touches it must cope
with it being absent (tests, local runs without Redis).
"""

from typing import Optional

import redis.asyncio as aioredis

from hireboard.config import settings

# Global Redis connection pool (initialized in lifespan)
_redis: Optional[aioredis.Redis] = None


async def init_redis() -> aioredis.Redis:
    """Initialize the Redis connection pool and verify it answers."""
    global _redis
    _redis = aioredis.from_url(
        settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
    )
    try:
        await _redis.ping()
    except Exception:
        await _redis.aclose()
        _redis = None
        raise
    return _redis


async def close_redis() -> None:
    """Close the Redis connection pool."""
    global _redis
    if _redis:
        await _redis.aclose()
        _redis = None


def get_redis() -> aioredis.Redis:
    """Get the Redis connection (must be initialized first)."""
    if _redis is None:
        raise RuntimeError("Redis not initialized. Call init_redis() first.")
    return _redis
