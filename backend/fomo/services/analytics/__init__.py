# backend/fomo/services/analytics/__init__.py
"""
Boost attribution engine.

Windows:     boost / paid-plan rows → concrete intervals
Attribution: engagement events inside vs outside those intervals
Reports:     boost value comparison and audience timing guidance
"""

from .attribution import (
    Attribution,
    BoostPeriod,
    EngagementEvent,
    attribute_events,
    compute_change_percent,
    is_within_any_period,
)
from .cache import AnalyticsCache
from .guidance import GuidanceReport, TimeWindow, best_time_windows, build_guidance_report
from .intervals import Interval, QueryRange, is_timestamp_within_window, parse_timestamp
from .metrics import (
    BoostValueReport,
    ComparisonMetrics,
    MetricComparison,
    best_day_index,
    build_boost_value_report,
)
from .pagination import QueryCancelled, fetch_all_paginated
from .windows import (
    BoostRecord,
    PlanRecord,
    SubscriptionRecord,
    boost_windows,
    compute_boost_window,
    plan_history_windows,
    subscription_window,
)

__all__ = [
    "Attribution",
    "BoostPeriod",
    "EngagementEvent",
    "attribute_events",
    "compute_change_percent",
    "is_within_any_period",
    "AnalyticsCache",
    "GuidanceReport",
    "TimeWindow",
    "best_time_windows",
    "build_guidance_report",
    "Interval",
    "QueryRange",
    "is_timestamp_within_window",
    "parse_timestamp",
    "BoostValueReport",
    "ComparisonMetrics",
    "MetricComparison",
    "best_day_index",
    "build_boost_value_report",
    "QueryCancelled",
    "fetch_all_paginated",
    "BoostRecord",
    "PlanRecord",
    "SubscriptionRecord",
    "boost_windows",
    "compute_boost_window",
    "plan_history_windows",
    "subscription_window",
]
