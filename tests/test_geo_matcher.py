"""
Geo Matcher Tests

Tests for radius-constrained nearest-location search and the
store-driven matching pass.
"""

import pytest
from strava_stats.analysis.geo_matcher import (
    BACKCOUNTRY_SPORTS,
    DEFAULT_PEAK_RADIUS_KM,
    DEFAULT_RESORT_RADIUS_KM,
    EARTH_RADIUS_KM,
    effective_radius,
    GeoMatcher,
    haversine_distance_km,
    LocationMatcher,
    nearest_location,
    WINTER_SPORTS,
)
from strava_stats.analysis.models import Match, Peak, Resort
from strava_stats.storage import Database


RESORTS_YAML = """
- name: Vail
  latitude: 39.6403
  longitude: -106.3742
- name: Berthoud Pass
  latitude: 39.7983
  longitude: -105.7772
  radius_km: 4.0
  resort_type: backcountry
"""

PEAKS_YAML = """
- name: Quandary Peak
  latitude: 39.3973
  longitude: -106.1064
  elevation_feet: 14265
"""


class TestConstants:
    def test_earth_radius(self):
        assert EARTH_RADIUS_KM == 6371.0

    def test_sport_sets(self):
        assert WINTER_SPORTS == {
            "Snowboard", "AlpineSki", "BackcountrySki", "NordicSki", "Snowshoe"
        }
        assert BACKCOUNTRY_SPORTS == {"BackcountrySki", "Snowshoe"}


class TestHaversineDistance:
    """Tests for great-circle distance"""

    def test_same_point_returns_zero(self):
        assert haversine_distance_km(39.64, -106.374, 39.64, -106.374) == pytest.approx(0)

    def test_known_distance(self):
        """One degree of latitude is ~111km"""
        assert 110 < haversine_distance_km(0, 0, 1, 0) < 112


class TestEffectiveRadius:
    """Default radius substitution"""

    def test_explicit_radius_wins(self):
        resort = Resort(id=1, name="A", latitude=0, longitude=0, radius_km=1.5)
        assert effective_radius(resort) == 1.5

    def test_resort_default(self):
        resort = Resort(id=1, name="A", latitude=0, longitude=0)
        assert effective_radius(resort) == DEFAULT_RESORT_RADIUS_KM == 5.0

    def test_peak_default(self):
        peak = Peak(id=1, name="A", latitude=0, longitude=0)
        assert effective_radius(peak) == DEFAULT_PEAK_RADIUS_KM == 2.0


class TestNearest:
    """Tests for GeoMatcher.nearest"""

    def test_finds_resort_within_radius(self, vail):
        location, distance = GeoMatcher([vail]).nearest(39.6400, -106.3740)

        assert location == vail
        assert distance < 1.0

    def test_no_match_outside_radius(self):
        far = Resort(id=9, name="Far", latitude=39.6400 + 0.36, longitude=-106.3740, radius_km=5.0)

        assert haversine_distance_km(39.6400, -106.3740, far.latitude, far.longitude) > 39
        assert GeoMatcher([far]).nearest(39.6400, -106.3740) is None

    def test_respects_custom_radius(self):
        tight = Resort(id=1, name="Tight", latitude=39.6403, longitude=-106.3742, radius_km=0.01)
        assert GeoMatcher([tight]).nearest(39.6400, -106.3740) is None

    def test_default_radius_when_absent(self):
        # ~3.3km north: inside the 5km resort default, outside the 2km peak default
        resort = Resort(id=1, name="R", latitude=39.67, longitude=-106.374)
        peak = Peak(id=1, name="P", latitude=39.67, longitude=-106.374)

        assert GeoMatcher([resort]).nearest(39.64, -106.374) is not None
        assert GeoMatcher([peak]).nearest(39.64, -106.374) is None

    def test_closest_of_several_in_range(self, vail):
        near = Resort(id=2, name="Near", latitude=39.6401, longitude=-106.3740)
        location, _ = GeoMatcher([vail, near]).nearest(39.6400, -106.3740)

        assert location.name == "Near"

    def test_exact_tie_keeps_first_candidate(self):
        first = Resort(id=1, name="First", latitude=39.65, longitude=-106.37)
        second = Resort(id=2, name="Second", latitude=39.65, longitude=-106.37)

        location, _ = GeoMatcher([first, second]).nearest(39.64, -106.37)
        assert location.name == "First"

    def test_distance_never_exceeds_radius(self):
        candidates = [
            Resort(id=i, name=f"R{i}", latitude=39.60 + i * 0.01, longitude=-106.37, radius_km=1.0)
            for i in range(10)
        ]
        matcher = GeoMatcher(candidates)

        for step in range(20):
            hit = matcher.nearest(39.55 + step * 0.01, -106.37)
            if hit is not None:
                location, distance = hit
                assert distance <= effective_radius(location)

    def test_empty_candidates(self):
        assert GeoMatcher([]).nearest(39.64, -106.37) is None

    def test_module_function_takes_candidates(self, vail, quandary):
        location, distance = nearest_location(39.6400, -106.3740, [quandary, vail])

        assert location == vail
        assert distance < 1.0
        assert nearest_location(39.6400, -106.3740, []) is None

    def test_zero_radius_only_matches_exact_point(self):
        gate = Resort(id=1, name="Gate", latitude=39.64, longitude=-106.37, radius_km=0)

        assert nearest_location(39.64, -106.37, [gate]) == (gate, 0.0)
        assert nearest_location(39.6401, -106.37, [gate]) is None


class TestMatchAll:
    """Tests for GeoMatcher.match_all"""

    def test_match_returns_link(self, make_activity, vail):
        activity = make_activity("Snowboard", start_lat=39.6400, start_lng=-106.3740)
        match = GeoMatcher([vail]).match(activity)

        assert isinstance(match, Match)
        assert match.activity_id == activity.id
        assert match.location_id == vail.id
        assert match.distance_km < 1.0

    def test_match_without_coordinates(self, make_activity, vail):
        assert GeoMatcher([vail]).match(make_activity("Snowboard")) is None

    def test_only_listed_sports_are_matched(self, make_activity, vail):
        activities = [
            make_activity("Snowboard", start_lat=39.64, start_lng=-106.374),
            make_activity("Run", start_lat=39.64, start_lng=-106.374),
        ]

        matches = GeoMatcher([vail]).match_all(activities, WINTER_SPORTS)

        assert [m.activity_id for m in matches] == [activities[0].id]
        assert matches[0].location_id == vail.id

    def test_skips_activities_without_coordinates(self, make_activity, vail):
        activities = [make_activity("Snowboard"), make_activity("AlpineSki", start_lat=39.64)]
        assert GeoMatcher([vail]).match_all(activities, WINTER_SPORTS) == []

    def test_is_deterministic(self, make_activity, vail):
        activities = [make_activity("Snowboard", start_lat=39.64, start_lng=-106.374)]
        matcher = GeoMatcher([vail])

        assert matcher.match_all(activities, WINTER_SPORTS) == matcher.match_all(
            activities, WINTER_SPORTS
        )


def _raw(activity_id, sport_type, latlng, date="2024-01-15T10:00:00Z"):
    return {
        "id": activity_id,
        "name": f"{sport_type} {activity_id}",
        "sport_type": sport_type,
        "start_date": date,
        "start_date_local": date,
        "distance": 10000.0,
        "moving_time": 3600,
        "start_latlng": latlng,
    }


@pytest.fixture
def seeded(tmp_path):
    resorts_file = tmp_path / "resorts.yml"
    peaks_file = tmp_path / "peaks.yml"
    resorts_file.write_text(RESORTS_YAML)
    peaks_file.write_text(PEAKS_YAML)

    database = Database()
    database.upsert_activities([
        _raw(1, "Snowboard", [39.6400, -106.3740]),
        _raw(2, "BackcountrySki", [39.3980, -106.1060]),
        _raw(3, "Snowshoe", [39.7980, -105.7770]),
        _raw(4, "AlpineSki", []),
        _raw(5, "Run", [39.6400, -106.3740]),
    ])
    matcher = LocationMatcher(database, resorts_file=resorts_file, peaks_file=peaks_file)
    matcher.seed_resorts_if_empty()
    matcher.seed_peaks_if_empty()
    return database, matcher


class TestLocationMatcher:
    """Tests for the full matching pass against the store"""

    def test_seeds_locations(self, seeded):
        database, _ = seeded
        assert database.count_resorts() == 2
        assert database.count_peaks() == 1

    def test_does_not_reseed(self, seeded):
        database, matcher = seeded
        assert matcher.seed_resorts_if_empty() == 0
        assert database.count_resorts() == 2

    def test_missing_seed_file(self, tmp_path):
        matcher = LocationMatcher(Database(), resorts_file=tmp_path / "missing.yml")
        assert matcher.seed_resorts_if_empty() == 0

    def test_match_all_activities(self, seeded):
        database, matcher = seeded

        counts = matcher.match_all_activities()
        resorts = database.get_resort_matches_for({1, 2, 3, 4, 5})
        peaks = database.get_peak_matches_for({1, 2, 3, 4, 5})

        assert counts == {"resort_matches": 2, "peak_matches": 1}
        assert resorts[1].name == "Vail"
        assert resorts[3].name == "Berthoud Pass"
        assert set(resorts) == {1, 3}
        assert set(peaks) == {2}
        assert peaks[2].name == "Quandary Peak"

    def test_matching_is_idempotent(self, seeded):
        database, matcher = seeded

        matcher.match_all_activities()
        first = (database.get_resort_matches_for({1, 2, 3}), database.get_peak_matches_for({1, 2, 3}))
        matcher.match_all_activities()
        second = (database.get_resort_matches_for({1, 2, 3}), database.get_peak_matches_for({1, 2, 3}))

        assert first == second

    def test_rematch_drops_stale_links(self, seeded):
        database, matcher = seeded
        database.insert_resort_match(5, 1, 0.1)

        matcher.match_all_activities()

        assert database.get_resort_for_activity(5) is None

    def test_no_peaks_skips_peak_matching(self):
        database = Database()
        database.upsert_activity(_raw(1, "BackcountrySki", [39.3980, -106.1060]))

        assert LocationMatcher(database).match_backcountry_to_peaks() == 0
