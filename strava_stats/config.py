"""
Configuration

Settings are read from environment variables.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

DATA_DIR = Path(__file__).resolve().parent / "data"


@dataclass(frozen=True)
class Settings:
    redis_url: str
    database_url: str
    resorts_file: Path
    peaks_file: Path
    log_level: str


def load_settings() -> Settings:
    log_level = os.getenv("STRAVA_STATS_LOG_LEVEL", "INFO").upper()
    if os.getenv("DEBUG"):
        log_level = "DEBUG"

    return Settings(
        redis_url=os.getenv("REDIS_URL", "redis://localhost:6379/0"),
        database_url=os.getenv("STRAVA_STATS_DATABASE_URL", "sqlite:///data/strava_stats.db"),
        resorts_file=Path(os.getenv("STRAVA_STATS_RESORTS_FILE", DATA_DIR / "resorts.yml")),
        peaks_file=Path(os.getenv("STRAVA_STATS_PEAKS_FILE", DATA_DIR / "peaks.yml")),
        log_level=log_level,
    )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
