"""
Stats Tasks

Celery tasks for loading activities, matching them to locations and
computing the statistics bundle for the report.
"""

import logging
from datetime import date
from pathlib import Path
from typing import Any, Dict, List

from sqlalchemy.engine import make_url

from ..analysis import LocationMatcher, calculate_all_stats
from ..config import Settings, load_settings
from ..storage import Database
from . import app

logger = logging.getLogger(__name__)


def open_database(settings: Settings) -> Database:
    """Open the configured store, creating the SQLite directory if needed"""
    url = make_url(settings.database_url)
    if url.get_backend_name() == "sqlite" and url.database:
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)
    return Database(settings.database_url)


def ensure_locations_matched(database: Database, settings: Settings) -> Dict[str, int]:
    """Seed resorts and peaks if the store has none, then rematch every activity"""
    matcher = LocationMatcher(
        database,
        resorts_file=settings.resorts_file,
        peaks_file=settings.peaks_file,
    )
    matcher.seed_resorts_if_empty()
    matcher.seed_peaks_if_empty()

    return matcher.match_all_activities()


def _parse_today(today: str = None) -> date:
    return date.fromisoformat(today) if today else date.today()


@app.task(name="import_activities")
def import_activities(raw_activities: List[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Store raw Strava activity payloads fetched by the sync client.

    Args:
        raw_activities: Activity dicts as returned by the Strava API

    Returns:
        Dict with the number of activities stored
    """
    try:
        database = open_database(load_settings())
        count = database.upsert_activities(raw_activities)
        logger.info(f"Stored {count} activities")
        return {"success": True, "imported": count}

    except Exception as e:
        logger.exception("Activity import failed")
        return {"success": False, "error": str(e)}


@app.task(name="match_locations")
def match_locations() -> Dict[str, Any]:
    """
    Recompute every activity-to-resort and activity-to-peak link.

    Returns:
        Dict with resort_matches and peak_matches counts
    """
    try:
        settings = load_settings()
        database = open_database(settings)
        counts = ensure_locations_matched(database, settings)
        return {"success": True, **counts}

    except Exception as e:
        logger.exception("Location matching failed")
        return {"success": False, "error": str(e)}


@app.task(name="calculate_stats")
def calculate_stats(today: str = None) -> Dict[str, Any]:
    """
    Compute the statistics bundle from stored activities and matches.

    Args:
        today: ISO date used as the current day (defaults to today)

    Returns:
        Dict containing the bundle under "stats"
    """
    try:
        database = open_database(load_settings())
        bundle = calculate_all_stats(database, today=_parse_today(today))
        return {"success": True, "stats": bundle.to_dict()}

    except Exception as e:
        logger.exception("Stats calculation failed")
        return {"success": False, "error": str(e)}


@app.task(name="generate_stats")
def generate_stats(today: str = None) -> Dict[str, Any]:
    """
    Match locations, then compute the statistics bundle.

    Args:
        today: ISO date used as the current day (defaults to today)

    Returns:
        Dict containing match counts and the bundle under "stats"
    """
    try:
        settings = load_settings()
        database = open_database(settings)

        count = database.count_activities()
        if count == 0:
            logger.warning("No activities in database. Run a sync first.")
            return {"success": False, "error": "No activities in database"}

        logger.info(f"Processing {count} activities...")
        counts = ensure_locations_matched(database, settings)
        bundle = calculate_all_stats(database, today=_parse_today(today))

        return {"success": True, **counts, "stats": bundle.to_dict()}

    except Exception as e:
        logger.exception("Stats generation failed")
        return {"success": False, "error": str(e)}
