"""
Celery Application Configuration
"""

from celery import Celery
from celery.signals import setup_logging

from .config import configure_logging, load_settings

settings = load_settings()

# Initialize Celery
app = Celery('strava_stats', broker=settings.redis_url, backend=settings.redis_url)

# Configure Celery
app.conf.update(
    task_serializer='json',
    accept_content=['json'],
    result_serializer='json',
    timezone='UTC',
    enable_utc=True,
    task_track_started=True,
    task_time_limit=300,  # 5 minutes max per task
)


@setup_logging.connect
def on_setup_logging(**kwargs):
    """Replace Celery's logging setup with ours when a worker starts"""
    configure_logging(load_settings().log_level)


# Auto-discover tasks
app.autodiscover_tasks(['strava_stats.tasks'])

__all__ = ['app']
