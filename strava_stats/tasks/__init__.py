"""
Strava Stats Worker Tasks Package
"""

from ..celery_app import app

# Import all tasks to ensure they're registered with Celery
from .stats_tasks import (
    calculate_stats,
    generate_stats,
    import_activities,
    match_locations,
)

__all__ = [
    "app",
    "calculate_stats",
    "generate_stats",
    "import_activities",
    "match_locations",
]
