"""
Strava Stats

Activity analytics for a personal Strava history:
- Rollups by sport, year and winter season
- Matching of winter sessions to ski resorts and backcountry peaks
- Cumulative series for year-over-year and season-over-season charts
"""

# Delay Celery import to allow using the analysis package without a broker
def get_celery_app():
    from .celery_app import app
    return app

__all__ = ['get_celery_app']
