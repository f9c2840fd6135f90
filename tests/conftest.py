"""
Shared test fixtures

Activity factories modelled on typical Strava payloads.
"""

import itertools

import pytest

from strava_stats.analysis.models import Activity, Peak, Resort

SPORT_DEFAULTS = {
    "Run": dict(name="Morning Run", distance=8000.0, total_elevation_gain=150.0,
                moving_time=2400, calories=500.0),
    "Ride": dict(name="Afternoon Ride", distance=30000.0, total_elevation_gain=500.0,
                 moving_time=5400, calories=800.0),
    "Snowboard": dict(name="Powder Day", distance=15000.0, total_elevation_gain=1500.0,
                      moving_time=14400, calories=1200.0, location_state="Colorado"),
    "AlpineSki": dict(name="Ski Day", distance=20000.0, total_elevation_gain=2000.0,
                      moving_time=18000, calories=1500.0, location_state="Utah"),
    "BackcountrySki": dict(name="Backcountry Tour", distance=8000.0,
                           total_elevation_gain=1000.0, moving_time=10800,
                           calories=900.0, location_state="Colorado"),
}


@pytest.fixture
def make_activity():
    """Factory for Activity records with per-sport defaults"""
    ids = itertools.count(1)

    def _make(sport_type="Run", date="2024-06-15T08:00:00Z", **overrides):
        fields = dict(location_country="USA")
        fields.update(SPORT_DEFAULTS.get(sport_type, {}))
        fields.update(overrides)
        fields.setdefault("id", next(ids))
        return Activity(sport_type=sport_type, start_date_local=date, **fields)

    return _make


@pytest.fixture
def vail():
    return Resort(id=1, name="Vail", latitude=39.6403, longitude=-106.3742, radius_km=5.0)


@pytest.fixture
def berthoud_pass():
    return Resort(
        id=2, name="Berthoud Pass", latitude=39.7983, longitude=-105.7772,
        radius_km=4.0, resort_type="backcountry",
    )


@pytest.fixture
def quandary():
    return Peak(id=1, name="Quandary Peak", latitude=39.3973, longitude=-106.1064)
