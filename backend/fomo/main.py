import logging

from fastapi import Depends, FastAPI
from redis import Redis

from .config import settings
from .redis_client import get_redis
from .routers import analytics, reservations

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="FOMO Reservations & Boost Analytics API")

app.include_router(reservations.router)
app.include_router(analytics.router)


@app.get("/health")
def health(redis: Redis = Depends(get_redis)):
    return {"redis": redis.ping()}
