"""
Activity Aggregation

Groups activity collections and builds the statistics shown in the
report:
- Buckets by sport, calendar year, sport x year and winter season
- Resort, backcountry region and peak breakdowns per season
- Day-indexed cumulative series for year-over-year and
  season-over-season comparisons

Every function is a pure function of its inputs. Raw units are summed
first and converted once per total.
"""

from bisect import bisect_right
from datetime import date, datetime
from enum import Enum
from typing import Callable, Dict, Hashable, Iterable, List, Optional, Sequence

import numpy as np

from .geo_matcher import WINTER_SPORTS
from .models import (
    Activity,
    ActivitySummary,
    CumulativePoint,
    DateRange,
    Location,
    LocationStats,
    PeriodData,
    Resort,
    SeasonComparison,
    SeasonStats,
    StatsBucket,
    Summary,
    YearComparison,
)
from .seasons import (
    day_of_season,
    day_of_year,
    local_date,
    parse_local_datetime,
    season_for,
    season_start_year,
    year_of,
)
from .units import meters_to_feet, meters_to_miles, round_calories, seconds_to_hours

RESORT_SPORTS = frozenset({"Snowboard", "AlpineSki"})
BACKCOUNTRY_REGION_SPORTS = frozenset({"BackcountrySki"})

UNKNOWN_REGION = "Unknown"


class LocationView(Enum):
    """Location breakdowns available per winter season"""

    RESORT = "resort"
    BACKCOUNTRY = "backcountry"
    PEAK = "peak"


def _group(
    activities: Iterable[Activity], key: Callable[[Activity], Hashable]
) -> Dict[Hashable, List[Activity]]:
    """Group activities by key, keeping first-seen key order"""
    groups: Dict[Hashable, List[Activity]] = {}
    for activity in activities:
        groups.setdefault(key(activity), []).append(activity)
    return groups


def _dated(activities: Iterable[Activity]) -> List[Activity]:
    return [a for a in activities if a.start_date_local is not None]


def unique_days(activities: Iterable[Activity]) -> int:
    """Count distinct local calendar dates"""
    return len({local_date(a.start_date_local) for a in _dated(activities)})


def activity_summary(activity: Activity) -> ActivitySummary:
    start = activity.start_date_local
    return ActivitySummary(
        id=activity.id,
        name=activity.name or "Activity",
        date=start.split("T")[0] if start else "",
        elevation=meters_to_feet(activity.total_elevation_gain),
        hours=seconds_to_hours(activity.moving_time, ndigits=2),
        miles=meters_to_miles(activity.distance),
        calories=round_calories(activity.calories),
    )


def bucket(activities: Sequence[Activity], include_summaries: bool = False) -> StatsBucket:
    """
    Fold a group of activities into a StatsBucket.

    Args:
        activities: Activities in the group
        include_summaries: Attach an ActivitySummary per activity

    Returns:
        StatsBucket with converted totals
    """
    result = StatsBucket(
        total_activities=len(activities),
        total_days=unique_days(activities),
        total_distance_miles=meters_to_miles(sum(a.distance or 0 for a in activities)),
        total_elevation_feet=meters_to_feet(
            sum(a.total_elevation_gain or 0 for a in activities)
        ),
        total_time_hours=seconds_to_hours(sum(a.moving_time or 0 for a in activities)),
        total_calories=round_calories(sum(a.calories or 0 for a in activities)),
    )

    if include_summaries:
        result.activities = [activity_summary(a) for a in activities]

    return result


def summarize(activities: Sequence[Activity]) -> Summary:
    """Overall totals plus sport count and first/last start dates"""
    totals = bucket(activities)
    dates = sorted(a.start_date_local for a in _dated(activities))

    return Summary(
        total_activities=totals.total_activities,
        total_sports=len({a.sport_type for a in activities}),
        total_days=totals.total_days,
        total_distance_miles=totals.total_distance_miles,
        total_elevation_feet=totals.total_elevation_feet,
        total_time_hours=totals.total_time_hours,
        total_calories=totals.total_calories,
        date_range=DateRange(first=dates[0], last=dates[-1]) if dates else None,
    )


def group_by_sport(activities: Sequence[Activity]) -> Dict[str, StatsBucket]:
    """Buckets per sport, most activities first (ties keep first-seen order)"""
    grouped = {
        sport: bucket(group, include_summaries=True)
        for sport, group in _group(activities, lambda a: a.sport_type).items()
    }
    return dict(sorted(grouped.items(), key=lambda item: -item[1].total_activities))


def group_by_year(activities: Sequence[Activity]) -> Dict[int, StatsBucket]:
    """Buckets per calendar year, ascending"""
    grouped = _group(_dated(activities), lambda a: year_of(a.start_date_local))
    return {
        year: bucket(grouped[year], include_summaries=True) for year in sorted(grouped)
    }


def group_by_sport_and_year(
    activities: Sequence[Activity],
) -> Dict[str, Dict[int, StatsBucket]]:
    """Sport (alphabetical) -> year (ascending) -> bucket"""
    by_sport = _group(_dated(activities), lambda a: a.sport_type)

    result = {}
    for sport in sorted(by_sport):
        by_year = _group(by_sport[sport], lambda a: year_of(a.start_date_local))
        result[sport] = {
            year: bucket(by_year[year], include_summaries=True) for year in sorted(by_year)
        }
    return result


def group_by_winter_season(activities: Sequence[Activity]) -> Dict[str, SeasonStats]:
    """
    Winter sport activities grouped by season, then by sport.

    Season labels are zero-padded so sorting them as strings is
    chronological.
    """
    winter = [a for a in _dated(activities) if a.sport_type in WINTER_SPORTS]
    grouped = _group(winter, lambda a: season_for(a.start_date_local))

    result = {}
    for season in sorted(grouped):
        season_activities = grouped[season]
        result[season] = SeasonStats(
            totals=bucket(season_activities, include_summaries=True),
            by_sport={
                sport: bucket(group, include_summaries=True)
                for sport, group in _group(season_activities, lambda a: a.sport_type).items()
            },
        )
    return result


def backcountry_region_name(activity: Activity, resort: Optional[Resort]) -> str:
    """
    Name the region a backcountry activity belongs to.

    A backcountry zone uses its own name, a regular resort becomes
    "<name> area", and unmatched activities fall back to state, then
    country, then "Unknown".
    """
    if resort is not None and resort.is_backcountry:
        return resort.name
    if resort is not None:
        return f"{resort.name} area"
    return activity.location_state or activity.location_country or UNKNOWN_REGION


def group_by_location(
    activities: Sequence[Activity],
    matches: Dict[int, Location],
    view: LocationView,
) -> Dict[str, Dict[str, LocationStats]]:
    """
    Group winter activities by season and location.

    Args:
        activities: All activities
        matches: Prefetched activity id -> matched location. Resorts for
            the RESORT and BACKCOUNTRY views, peaks for the PEAK view.
        view: Which breakdown to build

    Returns:
        Season (ascending) -> location name (ascending) -> LocationStats
    """
    sports = RESORT_SPORTS if view is LocationView.RESORT else BACKCOUNTRY_REGION_SPORTS

    grouped: Dict[str, Dict[str, List[Activity]]] = {}
    locations: Dict[str, Optional[Location]] = {}

    for activity in _dated(activities):
        if activity.sport_type not in sports:
            continue

        location = matches.get(activity.id)
        if view is LocationView.BACKCOUNTRY:
            name = backcountry_region_name(activity, location)
            location = None
        elif location is None:
            continue
        elif view is LocationView.RESORT and location.is_backcountry:
            continue
        else:
            name = location.name

        season = season_for(activity.start_date_local)
        grouped.setdefault(season, {}).setdefault(name, []).append(activity)
        locations.setdefault(name, location)

    return {
        season: {
            name: LocationStats(stats=bucket(by_name[name]), location=locations[name])
            for name in sorted(by_name)
        }
        for season, by_name in sorted(grouped.items())
    }


def cumulative_series(
    activities: Iterable[Activity], day_index: Callable[[datetime], int]
) -> List[CumulativePoint]:
    """
    Running totals in chronological order, one point per activity.

    Two activities on the same day produce two points with the same
    day_index.

    Args:
        activities: Activities of a single period
        day_index: Maps a start datetime to its day within the period

    Returns:
        List of CumulativePoint
    """
    dated = sorted(
        ((parse_local_datetime(a.start_date_local), a) for a in _dated(activities)),
        key=lambda pair: pair[0],
    )
    if not dated:
        return []

    hours = np.cumsum([a.moving_time or 0 for _, a in dated], dtype=float)
    meters = np.cumsum([a.distance or 0 for _, a in dated], dtype=float)
    gain = np.cumsum([a.total_elevation_gain or 0 for _, a in dated], dtype=float)
    calories = np.cumsum([a.calories or 0 for _, a in dated], dtype=float)

    return [
        CumulativePoint(
            day_index=day_index(moment),
            date_label=moment.strftime("%b %d"),
            activities=i + 1,
            hours=seconds_to_hours(float(hours[i])),
            miles=meters_to_miles(float(meters[i])),
            elevation=meters_to_feet(float(gain[i])),
            calories=round_calories(float(calories[i])),
        )
        for i, (moment, _) in enumerate(dated)
    ]


def yearly_cumulative(activities: Iterable[Activity], year: int) -> List[CumulativePoint]:
    """Cumulative series for one calendar year, indexed by day of year"""
    in_year = [a for a in _dated(activities) if year_of(a.start_date_local) == year]
    return cumulative_series(in_year, day_of_year)


def season_cumulative(activities: Iterable[Activity], season: str) -> List[CumulativePoint]:
    """Cumulative series for one winter season, indexed by days since Sep 1"""
    start_year = season_start_year(season)
    in_season = [a for a in _dated(activities) if season_for(a.start_date_local) == season]
    return cumulative_series(in_season, lambda moment: day_of_season(moment, start_year))


def value_at(series: Sequence[CumulativePoint], day: int) -> Optional[CumulativePoint]:
    """Last point with day_index <= day, or None before the first point"""
    idx = bisect_right([p.day_index for p in series], day)
    return series[idx - 1] if idx else None


def year_comparisons(
    by_sport_and_year: Dict[str, Dict[int, StatsBucket]],
    activities: Sequence[Activity],
    today: date,
) -> Dict[str, YearComparison]:
    """
    Year-over-year comparison data per sport.

    The current year is always offered, with an empty bucket when the
    sport has no activities in it yet. Cumulative series are built from
    the full activity list since buckets do not keep start times.

    Args:
        by_sport_and_year: Output of group_by_sport_and_year
        activities: Every activity
        today: Reference date for the current year and day

    Returns:
        Sport (alphabetical) -> YearComparison
    """
    current_year = today.year
    current_day = day_of_year(today)

    result = {}
    for sport in sorted(by_sport_and_year):
        years = by_sport_and_year[sport]
        sport_years = sorted(set(years) | {current_year}, reverse=True)
        sport_activities = [a for a in activities if a.sport_type == sport]

        result[sport] = YearComparison(
            available_years=sport_years,
            current_year=current_year,
            current_day=current_day,
            yearly_data={
                year: PeriodData(
                    stats=years.get(year) or StatsBucket.empty(),
                    cumulative=yearly_cumulative(sport_activities, year),
                )
                for year in sport_years
            },
        )
    return result


def season_comparisons(
    by_winter_season: Dict[str, SeasonStats],
    activities: Sequence[Activity],
    today: date,
) -> Dict[str, SeasonComparison]:
    """
    Season-over-season comparison data per winter sport.

    The current season is always offered, with an empty bucket when the
    sport has no activities in it yet.

    Args:
        by_winter_season: Output of group_by_winter_season
        activities: Every activity
        today: Reference date for the current season and day

    Returns:
        Sport (alphabetical) -> SeasonComparison
    """
    current_season = season_for(today)
    current_day = day_of_season(today, season_start_year(current_season))

    sports: Dict[str, None] = {}
    for season_stats in by_winter_season.values():
        sports.update(dict.fromkeys(season_stats.by_sport))

    result = {}
    for sport in sorted(sports):
        seasons = {
            season
            for season, season_stats in by_winter_season.items()
            if sport in season_stats.by_sport
        }
        sport_seasons = sorted(seasons | {current_season}, reverse=True)
        sport_activities = [a for a in activities if a.sport_type == sport]

        season_data = {}
        for season in sport_seasons:
            season_stats = by_winter_season.get(season)
            stats = season_stats.by_sport.get(sport) if season_stats else None
            season_data[season] = PeriodData(
                stats=stats or StatsBucket.empty(),
                cumulative=season_cumulative(sport_activities, season),
            )

        result[sport] = SeasonComparison(
            available_seasons=sport_seasons,
            current_season=current_season,
            current_day=current_day,
            season_data=season_data,
        )
    return result
