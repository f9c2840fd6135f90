"""
Activity Statistics Models

Typed records shared by the matcher, the aggregation engine and the
stats bundle handed to the renderer.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Union


@dataclass(frozen=True)
class Activity:
    """A single recorded exercise session"""

    id: int
    sport_type: str
    start_date_local: Optional[str]
    name: Optional[str] = None
    distance: Optional[float] = None  # meters
    total_elevation_gain: Optional[float] = None  # meters
    moving_time: Optional[float] = None  # seconds
    calories: Optional[float] = None  # kcal
    start_lat: Optional[float] = None
    start_lng: Optional[float] = None
    location_state: Optional[str] = None
    location_country: Optional[str] = None

    @property
    def has_coordinates(self) -> bool:
        return self.start_lat is not None and self.start_lng is not None

    @classmethod
    def from_strava(cls, raw: Dict[str, Any]) -> "Activity":
        """
        Build an Activity from a raw Strava activity payload.

        Args:
            raw: Activity dict as returned by the Strava API

        Returns:
            Activity instance
        """
        latlng = raw.get("start_latlng") or []

        return cls(
            id=int(raw["id"]),
            sport_type=raw.get("sport_type") or raw.get("type"),
            start_date_local=raw.get("start_date_local"),
            name=raw.get("name"),
            distance=raw.get("distance"),
            total_elevation_gain=raw.get("total_elevation_gain"),
            moving_time=raw.get("moving_time"),
            calories=raw.get("calories"),
            start_lat=latlng[0] if len(latlng) > 1 else None,
            start_lng=latlng[1] if len(latlng) > 1 else None,
            location_state=raw.get("location_state"),
            location_country=raw.get("location_country"),
        )


@dataclass(frozen=True)
class Resort:
    """A lift-served resort or a named backcountry zone"""

    id: int
    name: str
    latitude: float
    longitude: float
    radius_km: Optional[float] = None
    resort_type: str = "resort"  # "resort" or "backcountry"
    country: Optional[str] = None
    region: Optional[str] = None

    @property
    def is_backcountry(self) -> bool:
        return self.resort_type == "backcountry"


@dataclass(frozen=True)
class Peak:
    """A backcountry summit"""

    id: int
    name: str
    latitude: float
    longitude: float
    radius_km: Optional[float] = None
    elevation_meters: Optional[float] = None
    elevation_feet: Optional[float] = None
    country: Optional[str] = None
    region: Optional[str] = None


Location = Union[Resort, Peak]


@dataclass(frozen=True)
class Match:
    """Link between an activity and its nearest eligible location"""

    activity_id: int
    location_id: int
    distance_km: float


@dataclass
class ActivitySummary:
    """Drill-down projection of an activity"""

    id: int
    name: str
    date: str
    elevation: int  # feet
    hours: float
    miles: float
    calories: int


@dataclass
class StatsBucket:
    """Aggregated totals for a group of activities"""

    total_activities: int
    total_days: int
    total_distance_miles: float
    total_elevation_feet: int
    total_time_hours: float
    total_calories: int
    activities: Optional[List[ActivitySummary]] = None

    @classmethod
    def empty(cls) -> "StatsBucket":
        return cls(
            total_activities=0,
            total_days=0,
            total_distance_miles=0.0,
            total_elevation_feet=0,
            total_time_hours=0.0,
            total_calories=0,
        )


@dataclass
class DateRange:
    first: str
    last: str


@dataclass
class Summary:
    """Top-level totals across every activity"""

    total_activities: int
    total_sports: int
    total_days: int
    total_distance_miles: float
    total_elevation_feet: int
    total_time_hours: float
    total_calories: int
    date_range: Optional[DateRange] = None


@dataclass
class SeasonStats:
    """Winter season totals with a per-sport breakdown"""

    totals: StatsBucket
    by_sport: Dict[str, StatsBucket] = field(default_factory=dict)


@dataclass
class LocationStats:
    """Totals for one resort, peak or backcountry region within a season"""

    stats: StatsBucket
    location: Optional[Location] = None


@dataclass
class CumulativePoint:
    """Running totals up to and including one activity of a period"""

    day_index: int
    date_label: str
    activities: int
    hours: float
    miles: float
    elevation: int
    calories: int


@dataclass
class PeriodData:
    stats: StatsBucket
    cumulative: List[CumulativePoint] = field(default_factory=list)


@dataclass
class YearComparison:
    """Per-sport data for comparing calendar years"""

    available_years: List[int]
    current_year: int
    current_day: int
    yearly_data: Dict[int, PeriodData]


@dataclass
class SeasonComparison:
    """Per-sport data for comparing winter seasons"""

    available_seasons: List[str]
    current_season: str
    current_day: int
    season_data: Dict[str, PeriodData]


@dataclass
class StatsBundle:
    """Everything the report renderer consumes"""

    summary: Summary
    by_sport: Dict[str, StatsBucket]
    by_year: Dict[int, StatsBucket]
    by_sport_and_year: Dict[str, Dict[int, StatsBucket]]
    winter_by_season: Dict[str, SeasonStats]
    resorts_by_season: Dict[str, Dict[str, LocationStats]]
    backcountry_by_season: Dict[str, Dict[str, LocationStats]]
    peaks_by_season: Dict[str, Dict[str, LocationStats]]
    year_comparisons: Dict[str, YearComparison]
    season_comparisons: Dict[str, SeasonComparison]

    def to_dict(self) -> Dict[str, Any]:
        """Export the bundle as plain nested dicts and lists"""
        return asdict(self)
