# backend/fomo/services/analytics/cache.py
"""
Redis cache for analytics reports.

Key format: analytics:{kind}:{business_id}:{start}:{end}
Value: report JSON, expires after analytics_cache_ttl_seconds.

Redis being down never fails a request: reads miss, writes are skipped.
"""

import json
import logging
from datetime import datetime
from typing import Optional

from redis import Redis
from redis.exceptions import RedisError

from ...config import settings

logger = logging.getLogger(__name__)


class AnalyticsCache:
    """JSON report cache keyed by business and query range."""

    KEY_PREFIX = "analytics"

    def __init__(self, redis: Redis, ttl_seconds: int | None = None):
        self.redis = redis
        self.ttl_seconds = ttl_seconds or settings.analytics_cache_ttl_seconds

    def _key(self, kind: str, business_id: str, start: datetime, end: datetime) -> str:
        return f"{self.KEY_PREFIX}:{kind}:{business_id}:{start.isoformat()}:{end.isoformat()}"

    def get(self, kind: str, business_id: str, start: datetime, end: datetime) -> Optional[dict]:
        key = self._key(kind, business_id, start, end)
        try:
            raw = self.redis.get(key)
        except RedisError as e:
            logger.warning(f"Analytics cache read failed for {key}: {e}")
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning(f"Discarding corrupt analytics cache entry {key}")
            return None

    def set(self, kind: str, business_id: str, start: datetime, end: datetime, payload: dict) -> None:
        key = self._key(kind, business_id, start, end)
        try:
            self.redis.set(key, json.dumps(payload, default=str), ex=self.ttl_seconds)
        except RedisError as e:
            logger.warning(f"Analytics cache write failed for {key}: {e}")

    def invalidate_business(self, business_id: str) -> int:
        """Drop every cached report of a business. Returns the number of keys removed."""
        pattern = f"{self.KEY_PREFIX}:*:{business_id}:*"
        try:
            keys = list(self.redis.scan_iter(match=pattern))
            if not keys:
                return 0
            return self.redis.delete(*keys)
        except RedisError as e:
            logger.warning(f"Analytics cache invalidation failed for {business_id}: {e}")
            return 0
