"""
Geo Matcher

Assigns winter activities to the nearest known location:
- Resorts for every winter sport
- Peaks for backcountry sports

The location set is small (tens of entries), so every candidate is
checked against every activity start point.
"""

import logging
from math import asin, cos, radians, sin, sqrt
from pathlib import Path
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple

import yaml

from .models import Activity, Location, Match, Peak

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0

DEFAULT_RESORT_RADIUS_KM = 5.0
DEFAULT_PEAK_RADIUS_KM = 2.0

WINTER_SPORTS: FrozenSet[str] = frozenset(
    {"Snowboard", "AlpineSki", "BackcountrySki", "NordicSki", "Snowshoe"}
)

# Backcountry sports are additionally matched to peaks
BACKCOUNTRY_SPORTS: FrozenSet[str] = frozenset({"BackcountrySki", "Snowshoe"})


def haversine_distance_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Calculate the great-circle distance between two points.

    Args:
        lat1, lon1: First point coordinates (degrees)
        lat2, lon2: Second point coordinates (degrees)

    Returns:
        Distance in kilometers
    """
    lat1_rad = radians(lat1)
    lat2_rad = radians(lat2)
    delta_lat = radians(lat2 - lat1)
    delta_lon = radians(lon2 - lon1)

    a = sin(delta_lat / 2) ** 2 + cos(lat1_rad) * cos(lat2_rad) * sin(delta_lon / 2) ** 2
    c = 2 * asin(sqrt(a))

    return EARTH_RADIUS_KM * c


def effective_radius(location: Location) -> float:
    """Search radius for a location, falling back to its kind's default"""
    if location.radius_km is not None:
        return location.radius_km
    if isinstance(location, Peak):
        return DEFAULT_PEAK_RADIUS_KM
    return DEFAULT_RESORT_RADIUS_KM


def nearest_location(
    lat: float, lon: float, candidates: Iterable[Location]
) -> Optional[Tuple[Location, float]]:
    """
    Find the closest candidate whose radius contains the point.

    On an exact distance tie the candidate seen first wins.

    Args:
        lat, lon: Point coordinates (degrees)
        candidates: Resorts or peaks to search

    Returns:
        Tuple of (location, distance_km), or None if nothing is in range
    """
    nearest = None
    min_distance = float("inf")

    for candidate in candidates:
        distance = haversine_distance_km(lat, lon, candidate.latitude, candidate.longitude)
        if distance <= effective_radius(candidate) and distance < min_distance:
            min_distance = distance
            nearest = candidate

    if nearest is None:
        return None
    return nearest, min_distance


class GeoMatcher:
    """Nearest-location search over a fixed candidate set"""

    def __init__(self, candidates: Sequence[Location]):
        self.candidates = list(candidates)

    def nearest(self, lat: float, lon: float) -> Optional[Tuple[Location, float]]:
        return nearest_location(lat, lon, self.candidates)

    def match(self, activity: Activity) -> Optional[Match]:
        """
        Match one activity to its nearest candidate.

        Returns:
            Match, or None when the activity has no start point or no
            candidate is in range
        """
        if not activity.has_coordinates:
            return None

        hit = self.nearest(activity.start_lat, activity.start_lng)
        if hit is None:
            return None

        location, distance = hit
        return Match(activity_id=activity.id, location_id=location.id, distance_km=distance)

    def match_all(
        self, activities: Iterable[Activity], sports: FrozenSet[str]
    ) -> List[Match]:
        """
        Match every activity of the given sports that has a start point.

        Activities without coordinates (manual entries) are skipped.

        Args:
            activities: Activities to match
            sports: Sport tags eligible for matching

        Returns:
            List of Match, in activity order
        """
        matches = []

        for activity in activities:
            if activity.sport_type not in sports:
                continue

            match = self.match(activity)
            if match is not None:
                matches.append(match)

        return matches


def load_locations_file(path: Path) -> List[Dict[str, Any]]:
    """Load seed location entries from a YAML list, [] if the file is missing"""
    if not path.exists():
        return []

    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or []


class LocationMatcher:
    """Recomputes activity-to-location links held in the store"""

    def __init__(self, database, resorts_file: Path = None, peaks_file: Path = None):
        """
        Initialize matcher.

        Args:
            database: Store exposing activity, location and match operations
            resorts_file: YAML seed file for resorts
            peaks_file: YAML seed file for peaks
        """
        self.database = database
        self.resorts_file = resorts_file
        self.peaks_file = peaks_file

    def seed_resorts_if_empty(self) -> int:
        if self.database.count_resorts() > 0 or self.resorts_file is None:
            return 0

        logger.info("Seeding resort database...")
        for entry in load_locations_file(self.resorts_file):
            self.database.insert_resort(entry)
        seeded = self.database.count_resorts()
        logger.info(f"Seeded {seeded} resorts")
        return seeded

    def seed_peaks_if_empty(self) -> int:
        if self.database.count_peaks() > 0 or self.peaks_file is None:
            return 0

        logger.info("Seeding peaks database...")
        for entry in load_locations_file(self.peaks_file):
            self.database.insert_peak(entry)
        seeded = self.database.count_peaks()
        logger.info(f"Seeded {seeded} peaks")
        return seeded

    def match_all_activities(self) -> Dict[str, int]:
        """
        Clear and rebuild every resort match, then every peak match.

        Runs as one transaction so a failure leaves the previous links.

        Returns:
            Dict with resort_matches and peak_matches counts
        """
        with self.database.transaction():
            self.database.clear_resort_matches()

            activities = self.database.list_all_activities()
            matcher = GeoMatcher(self.database.list_resorts())
            matches = matcher.match_all(activities, WINTER_SPORTS)

            for match in matches:
                self.database.insert_resort_match(
                    match.activity_id, match.location_id, match.distance_km, matched_by="gps"
                )

            winter_count = sum(1 for a in activities if a.sport_type in WINTER_SPORTS)
            logger.info(
                f"Matched {len(matches)}/{winter_count} winter activities to resorts"
            )

            peak_matches = self.match_backcountry_to_peaks(activities)

        return {"resort_matches": len(matches), "peak_matches": peak_matches}

    def match_backcountry_to_peaks(self, activities: List[Activity] = None) -> int:
        """
        Clear and rebuild every peak match.

        Args:
            activities: Activities to match (fetched from the store if omitted)

        Returns:
            Number of activities matched to a peak
        """
        with self.database.transaction():
            self.database.clear_peak_matches()

            peaks = self.database.list_peaks()
            if not peaks:
                return 0

            if activities is None:
                activities = self.database.list_all_activities()

            matches = GeoMatcher(peaks).match_all(activities, BACKCOUNTRY_SPORTS)
            for match in matches:
                self.database.insert_peak_match(
                    match.activity_id, match.location_id, match.distance_km
                )

        backcountry_count = sum(1 for a in activities if a.sport_type in BACKCOUNTRY_SPORTS)
        if backcountry_count:
            logger.info(
                f"Matched {len(matches)}/{backcountry_count} backcountry activities to peaks"
            )
        return len(matches)
