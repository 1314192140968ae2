# config/cache.py
from typing import Optional
from redis.asyncio import Redis, from_url
from config.settings import settings

# Redis only backs the request rate limiter; evaluations are never stored.
_client: Optional[Redis] = None


def rate_limit_enabled() -> bool:
    return bool(settings.REDIS_URL)


async def get_redis() -> Redis:
    """
    Lazily connect to REDIS_URL and ping once, so a misconfigured limiter
    fails at start-up instead of on the first throttled request.
    """
    global _client
    if not rate_limit_enabled():
        raise RuntimeError("Rate limiting is disabled: REDIS_URL is not set")
    if _client is None:
        client = from_url(
            settings.REDIS_URL,
            encoding="utf-8",
            decode_responses=True,  # fastapi-limiter reads string counters
            health_check_interval=30,
        )
        await client.ping()
        _client = client
    return _client


async def close_redis() -> None:
    global _client
    if _client is not None:
        client, _client = _client, None
        await client.aclose()
