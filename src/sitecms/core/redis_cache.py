# src/sitecms/core/redis_cache.py
import logging
from typing import Optional

from fastapi import Request
from redis.asyncio import Redis

from src.sitecms.core.config import Settings, async_retry

logger = logging.getLogger(__name__)


@async_retry(max_attempts=4, base_delay=0.5, max_delay=3.0)
async def init_async_redis(settings: Settings) -> Redis:
    url = settings.REDIS_URL or f"redis://{settings.REDIS_HOST}:{settings.REDIS_PORT}"
    client = Redis.from_url(
        url,
        encoding="utf-8",
        decode_responses=True,
        max_connections=settings.POOL_SIZE,
    )
    pong = await client.ping()
    logger.info("Redis initialized at %s (ping=%s)", url, pong)
    return client


def get_redis(request: Request) -> Optional[Redis]:
    return getattr(request.app.state, "redis", None)


#  blacklist helpers
async def blacklist_token(redis: Redis, jti: str, expire_seconds: int):
    if not jti:
        return
    # an already-expired token needs no entry
    if expire_seconds <= 0:
        return
    await redis.setex(f"blacklist:{jti}", expire_seconds, "1")


async def is_token_blacklisted(redis: Optional[Redis], jti: Optional[str]) -> bool:
    if redis is None or not jti:
        return False
    return await redis.exists(f"blacklist:{jti}") == 1
