"""
Stats Orchestrator

Assembles the complete StatsBundle from activities and prefetched
location matches.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Optional, Sequence

from .aggregation import (
    LocationView,
    group_by_location,
    group_by_sport,
    group_by_sport_and_year,
    group_by_winter_season,
    group_by_year,
    season_comparisons,
    summarize,
    year_comparisons,
)
from .models import Activity, Peak, Resort, StatsBundle

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StatsContext:
    """Inputs shared by every aggregation of one stats run"""

    activities: Sequence[Activity]
    resorts_by_activity: Dict[int, Resort] = field(default_factory=dict)
    peaks_by_activity: Dict[int, Peak] = field(default_factory=dict)
    today: date = field(default_factory=date.today)


def compute_all(
    activities: Sequence[Activity],
    resorts_by_activity: Dict[int, Resort],
    peaks_by_activity: Dict[int, Peak],
    today: Optional[date] = None,
) -> StatsBundle:
    """
    Compute every statistic the report shows.

    Args:
        activities: All activities
        resorts_by_activity: Activity id -> matched resort, fetched in one batch
        peaks_by_activity: Activity id -> matched peak, fetched in one batch
        today: Reference date for current year/season (defaults to today)

    Returns:
        StatsBundle
    """
    context = StatsContext(
        activities=list(activities),
        resorts_by_activity=resorts_by_activity,
        peaks_by_activity=peaks_by_activity,
        today=today or date.today(),
    )
    return compute_bundle(context)


def compute_bundle(context: StatsContext) -> StatsBundle:
    activities = context.activities
    by_sport_and_year = group_by_sport_and_year(activities)
    winter_by_season = group_by_winter_season(activities)

    logger.debug(f"Computing stats for {len(activities)} activities as of {context.today}")

    return StatsBundle(
        summary=summarize(activities),
        by_sport=group_by_sport(activities),
        by_year=group_by_year(activities),
        by_sport_and_year=by_sport_and_year,
        winter_by_season=winter_by_season,
        resorts_by_season=group_by_location(
            activities, context.resorts_by_activity, LocationView.RESORT
        ),
        backcountry_by_season=group_by_location(
            activities, context.resorts_by_activity, LocationView.BACKCOUNTRY
        ),
        peaks_by_season=group_by_location(
            activities, context.peaks_by_activity, LocationView.PEAK
        ),
        year_comparisons=year_comparisons(by_sport_and_year, activities, context.today),
        season_comparisons=season_comparisons(winter_by_season, activities, context.today),
    )


def calculate_all_stats(database, today: Optional[date] = None) -> StatsBundle:
    """
    Load activities and their matches from the store and compute the bundle.

    Matches are fetched with one query per location type for the whole
    activity id set.
    """
    activities = database.list_all_activities()
    activity_ids = {a.id for a in activities}

    return compute_all(
        activities,
        database.get_resort_matches_for(activity_ids),
        database.get_peak_matches_for(activity_ids),
        today=today,
    )
