# backend/fomo/schemas/analytics.py

from datetime import datetime
from pydantic import BaseModel, Field


class MetricComparisonRead(BaseModel):
    without: int
    with_: int = Field(serialization_alias="with")
    change: int

    model_config = {"from_attributes": True, "populate_by_name": True}


class ComparisonMetricsRead(BaseModel):
    views: MetricComparisonRead
    interactions: MetricComparisonRead
    visits: MetricComparisonRead
    degraded: bool = False

    model_config = {"from_attributes": True}


class BoostValueRead(BaseModel):
    business_id: str
    start: datetime
    end: datetime
    profile: ComparisonMetricsRead
    offers: ComparisonMetricsRead
    events: ComparisonMetricsRead
    best_days: dict[str, int] = Field(description="Weekday index, 0 = Sunday")
    cached: bool = False

    model_config = {"from_attributes": True}


class TimeWindowRead(BaseModel):
    day_index: int  # 0 = Sunday
    hours: str  # "18:00–20:00"
    count: int

    model_config = {"from_attributes": True}


class GuidanceSectionRead(BaseModel):
    views: list[TimeWindowRead]
    interactions: list[TimeWindowRead]
    visits: list[TimeWindowRead]
    totals: dict[str, int]
    degraded: bool = False

    model_config = {"from_attributes": True}


class GuidanceRead(BaseModel):
    business_id: str
    profile: GuidanceSectionRead
    offers: GuidanceSectionRead
    events: GuidanceSectionRead
    recommended: dict[str, TimeWindowRead]
    cached: bool = False

    model_config = {"from_attributes": True}
