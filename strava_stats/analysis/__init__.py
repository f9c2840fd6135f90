"""
Analysis Module

Unit conversion, season arithmetic, location matching and aggregation.
"""

from .aggregation import (
    bucket,
    cumulative_series,
    group_by_location,
    group_by_sport,
    group_by_sport_and_year,
    group_by_winter_season,
    group_by_year,
    LocationView,
    season_comparisons,
    summarize,
    unique_days,
    value_at,
    year_comparisons,
)
from .geo_matcher import (
    BACKCOUNTRY_SPORTS,
    effective_radius,
    GeoMatcher,
    haversine_distance_km,
    LocationMatcher,
    nearest_location,
    WINTER_SPORTS,
)
from .models import (
    Activity,
    ActivitySummary,
    CumulativePoint,
    Match,
    Peak,
    Resort,
    StatsBucket,
    StatsBundle,
)
from .seasons import day_of_season, day_of_year, season_for
from .stats import calculate_all_stats, compute_all, StatsContext

__all__ = [
    "Activity",
    "ActivitySummary",
    "CumulativePoint",
    "Match",
    "Peak",
    "Resort",
    "StatsBucket",
    "StatsBundle",
    "StatsContext",
    "GeoMatcher",
    "LocationMatcher",
    "LocationView",
    "WINTER_SPORTS",
    "BACKCOUNTRY_SPORTS",
    "effective_radius",
    "haversine_distance_km",
    "nearest_location",
    "season_for",
    "day_of_season",
    "day_of_year",
    "bucket",
    "unique_days",
    "summarize",
    "group_by_sport",
    "group_by_year",
    "group_by_sport_and_year",
    "group_by_winter_season",
    "group_by_location",
    "cumulative_series",
    "value_at",
    "year_comparisons",
    "season_comparisons",
    "compute_all",
    "calculate_all_stats",
]
