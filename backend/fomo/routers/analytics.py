# backend/fomo/routers/analytics.py
"""
Analytics API endpoints.

GET    /analytics/{business_id}/boost-value - with vs without boost comparison
GET    /analytics/{business_id}/guidance    - busiest weekday / 2-hour windows
DELETE /analytics/{business_id}/cache       - drop cached reports of a business

Both reports are cached in Redis per (business, range).
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from redis import Redis
from sqlalchemy.orm import Session

from ..config import settings as app_settings
from ..database import get_db
from ..redis_client import get_redis
from ..schemas.analytics import BoostValueRead, GuidanceRead
from ..services.analytics import (
    AnalyticsCache,
    QueryRange,
    build_boost_value_report,
    build_guidance_report,
    parse_timestamp,
)
from ..services.slots.repository import get_business

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/analytics", tags=["analytics"])


def _query_range(start: datetime | None, end: datetime | None) -> QueryRange:
    # Minute precision so repeated default-range requests share a cache key
    now = datetime.now(timezone.utc).replace(second=0, microsecond=0)
    default = QueryRange.last_days(app_settings.analytics_default_days, now)
    start = parse_timestamp(start) if start else default.start
    end = parse_timestamp(end) if end else default.end
    if start > end:
        raise HTTPException(status_code=400, detail="start must not be after end")
    return QueryRange(start=start, end=end)


def _require_business(db: Session, business_id: str) -> None:
    if not get_business(db, business_id):
        raise HTTPException(status_code=404, detail="Business not found")


@router.get("/{business_id}/boost-value", response_model=BoostValueRead)
def get_boost_value(
    business_id: str,
    start: datetime | None = None,
    end: datetime | None = None,
    db: Session = Depends(get_db),
    redis: Redis = Depends(get_redis),
):
    """Views / interactions / visits with vs without boost over the range."""
    q = _query_range(start, end)
    cache = AnalyticsCache(redis)

    cached = cache.get("boost-value", business_id, q.start, q.end)
    if cached is not None:
        return BoostValueRead(**cached, cached=True)

    _require_business(db, business_id)
    report = build_boost_value_report(db, business_id, q, tz_name=app_settings.business_timezone)
    response = BoostValueRead.model_validate(report.to_dict())

    # Degraded reports are not cached so the next request retries the failed section
    if not any(s.degraded for s in (response.profile, response.offers, response.events)):
        cache.set("boost-value", business_id, q.start, q.end, response.model_dump(mode="json", exclude={"cached"}))
    return response


@router.get("/{business_id}/guidance", response_model=GuidanceRead)
def get_guidance(
    business_id: str,
    start: datetime | None = None,
    end: datetime | None = None,
    db: Session = Depends(get_db),
    redis: Redis = Depends(get_redis),
):
    """Busiest weekday / 2-hour windows per section and recommended times."""
    q = _query_range(start, end)
    cache = AnalyticsCache(redis)

    cached = cache.get("guidance", business_id, q.start, q.end)
    if cached is not None:
        return GuidanceRead(**cached, cached=True)

    _require_business(db, business_id)
    report = build_guidance_report(db, business_id, q, tz_name=app_settings.business_timezone)
    response = GuidanceRead.model_validate(report.to_dict())

    if not report.degraded:
        cache.set("guidance", business_id, q.start, q.end, response.model_dump(mode="json", exclude={"cached"}))
    return response


@router.delete("/{business_id}/cache")
def invalidate_analytics_cache(
    business_id: str,
    redis: Redis = Depends(get_redis),
):
    """Manually drop cached analytics of a business (admin endpoint)."""
    deleted = AnalyticsCache(redis).invalidate_business(business_id)
    return {"business_id": business_id, "deleted_keys": deleted}
