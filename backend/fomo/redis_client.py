import redis

from .config import settings

redis_client = redis.Redis.from_url(
    settings.redis_url,
    decode_responses=True,
    socket_timeout=2.0,
)


def get_redis() -> redis.Redis:
    """Dependency for FastAPI routes."""
    return redis_client
