"""
Database Management (SQLAlchemy)

Persistent store for activities, ski resorts, peaks and the
activity-to-location links produced by the matcher.
"""

import json
import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterable, Iterator, List, Optional, Set

from sqlalchemy import create_engine, delete, func, select
from sqlalchemy.orm import Session, sessionmaker

from ..analysis.models import Activity, Peak, Resort
from ..analysis.units import feet_to_meters, meters_to_feet
from .models import (
    ActivityPeakLink,
    ActivityRecord,
    ActivityResortLink,
    Base,
    PeakRecord,
    ResortRecord,
)

logger = logging.getLogger(__name__)


def _to_activity(record: ActivityRecord) -> Activity:
    return Activity(
        id=record.id,
        sport_type=record.sport_type,
        start_date_local=record.start_date_local,
        name=record.name,
        distance=record.distance,
        total_elevation_gain=record.total_elevation_gain,
        moving_time=record.moving_time,
        calories=record.calories,
        start_lat=record.start_lat,
        start_lng=record.start_lng,
        location_state=record.location_state,
        location_country=record.location_country,
    )


def _to_resort(record: ResortRecord) -> Resort:
    return Resort(
        id=record.id,
        name=record.name,
        latitude=record.latitude,
        longitude=record.longitude,
        radius_km=record.radius_km,
        resort_type=record.resort_type or 'resort',
        country=record.country,
        region=record.region,
    )


def _to_peak(record: PeakRecord) -> Peak:
    return Peak(
        id=record.id,
        name=record.name,
        latitude=record.latitude,
        longitude=record.longitude,
        radius_km=record.radius_km,
        elevation_meters=record.elevation_meters,
        elevation_feet=record.elevation_feet,
        country=record.country,
        region=record.region,
    )


class Database:
    """SQLAlchemy-backed activity and location store"""

    def __init__(self, database_url: str = 'sqlite://'):
        """
        Connect and create any missing tables.

        Args:
            database_url: SQLAlchemy URL, in-memory SQLite by default
        """
        self.engine = create_engine(database_url, echo=False)
        self._session_factory = sessionmaker(
            bind=self.engine, autoflush=False, expire_on_commit=False
        )
        self._session: Optional[Session] = None
        Base.metadata.create_all(bind=self.engine)
        logger.debug(f"Database ready at {self.engine.url}")

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """
        Session scope that commits on success and rolls back on error.

        Nested scopes join the outermost one.
        """
        if self._session is not None:
            yield self._session
            return

        session = self._session_factory()
        self._session = session
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            self._session = None
            session.close()

    def close(self) -> None:
        self.engine.dispose()

    # Activities

    def upsert_activity(self, raw: Dict[str, Any]) -> int:
        """
        Insert or replace an activity from a raw Strava payload.

        Args:
            raw: Activity dict as returned by the Strava API

        Returns:
            Activity id
        """
        activity = Activity.from_strava(raw)

        record = ActivityRecord(
            id=activity.id,
            athlete_id=(raw.get('athlete') or {}).get('id'),
            name=activity.name,
            sport_type=activity.sport_type,
            activity_type=raw.get('type'),
            start_date=raw.get('start_date'),
            start_date_local=activity.start_date_local,
            timezone=raw.get('timezone'),
            elapsed_time=raw.get('elapsed_time'),
            moving_time=activity.moving_time,
            distance=activity.distance,
            total_elevation_gain=activity.total_elevation_gain,
            calories=activity.calories,
            start_lat=activity.start_lat,
            start_lng=activity.start_lng,
            location_city=raw.get('location_city'),
            location_state=activity.location_state,
            location_country=activity.location_country,
            raw_json=json.dumps(raw),
        )

        with self.transaction() as session:
            session.merge(record)
            session.flush()
        return activity.id

    def upsert_activities(self, raws: Iterable[Dict[str, Any]]) -> int:
        count = 0
        with self.transaction():
            for raw in raws:
                self.upsert_activity(raw)
                count += 1
        return count

    def list_all_activities(self) -> List[Activity]:
        """All activities, newest first"""
        with self.transaction() as session:
            records = session.scalars(
                select(ActivityRecord).order_by(ActivityRecord.start_date.desc())
            ).all()
            return [_to_activity(r) for r in records]

    def count_activities(self) -> int:
        with self.transaction() as session:
            return session.scalar(select(func.count()).select_from(ActivityRecord))

    # Resorts

    def insert_resort(self, resort: Dict[str, Any]) -> int:
        record = ResortRecord(
            name=resort['name'],
            country=resort.get('country'),
            region=resort.get('region'),
            latitude=resort['latitude'],
            longitude=resort['longitude'],
            radius_km=resort.get('radius_km'),
            resort_type=resort.get('resort_type') or 'resort',
        )
        with self.transaction() as session:
            session.add(record)
            session.flush()
            return record.id

    def list_resorts(self) -> List[Resort]:
        with self.transaction() as session:
            records = session.scalars(select(ResortRecord).order_by(ResortRecord.name)).all()
            return [_to_resort(r) for r in records]

    def count_resorts(self) -> int:
        with self.transaction() as session:
            return session.scalar(select(func.count()).select_from(ResortRecord))

    # Peaks

    def insert_peak(self, peak: Dict[str, Any]) -> int:
        """Insert a peak, deriving whichever of meters/feet is missing"""
        meters = peak.get('elevation_meters')
        feet = peak.get('elevation_feet')

        record = PeakRecord(
            name=peak['name'],
            country=peak.get('country'),
            region=peak.get('region'),
            latitude=peak['latitude'],
            longitude=peak['longitude'],
            elevation_meters=feet_to_meters(feet) if feet is not None else meters,
            elevation_feet=meters_to_feet(meters) if meters is not None else feet,
            radius_km=peak.get('radius_km'),
        )
        with self.transaction() as session:
            session.add(record)
            session.flush()
            return record.id

    def list_peaks(self) -> List[Peak]:
        with self.transaction() as session:
            records = session.scalars(select(PeakRecord).order_by(PeakRecord.name)).all()
            return [_to_peak(r) for r in records]

    def count_peaks(self) -> int:
        with self.transaction() as session:
            return session.scalar(select(func.count()).select_from(PeakRecord))

    # Activity-location links

    def clear_resort_matches(self) -> None:
        with self.transaction() as session:
            session.execute(delete(ActivityResortLink))

    def clear_peak_matches(self) -> None:
        with self.transaction() as session:
            session.execute(delete(ActivityPeakLink))

    def insert_resort_match(
        self, activity_id: int, resort_id: int, distance_km: float, matched_by: str = None
    ) -> None:
        with self.transaction() as session:
            session.merge(ActivityResortLink(
                activity_id=activity_id,
                resort_id=resort_id,
                distance_km=distance_km,
                matched_by=matched_by,
            ))

    def insert_peak_match(self, activity_id: int, peak_id: int, distance_km: float) -> None:
        with self.transaction() as session:
            session.merge(ActivityPeakLink(
                activity_id=activity_id,
                peak_id=peak_id,
                distance_km=distance_km,
            ))

    def get_resort_for_activity(self, activity_id: int) -> Optional[Resort]:
        return self.get_resort_matches_for({activity_id}).get(activity_id)

    def get_peak_for_activity(self, activity_id: int) -> Optional[Peak]:
        return self.get_peak_matches_for({activity_id}).get(activity_id)

    def get_resort_matches_for(self, activity_ids: Set[int]) -> Dict[int, Resort]:
        """
        Batch lookup of matched resorts.

        Args:
            activity_ids: Activity ids to look up

        Returns:
            Dict of activity id -> Resort, for matched activities only
        """
        if not activity_ids:
            return {}

        with self.transaction() as session:
            rows = session.execute(
                select(ActivityResortLink.activity_id, ResortRecord)
                .join(ResortRecord, ActivityResortLink.resort_id == ResortRecord.id)
                .where(ActivityResortLink.activity_id.in_(sorted(activity_ids)))
            ).all()
            return {activity_id: _to_resort(record) for activity_id, record in rows}

    def get_peak_matches_for(self, activity_ids: Set[int]) -> Dict[int, Peak]:
        """
        Batch lookup of matched peaks.

        Args:
            activity_ids: Activity ids to look up

        Returns:
            Dict of activity id -> Peak, for matched activities only
        """
        if not activity_ids:
            return {}

        with self.transaction() as session:
            rows = session.execute(
                select(ActivityPeakLink.activity_id, PeakRecord)
                .join(PeakRecord, ActivityPeakLink.peak_id == PeakRecord.id)
                .where(ActivityPeakLink.activity_id.in_(sorted(activity_ids)))
            ).all()
            return {activity_id: _to_peak(record) for activity_id, record in rows}

    def get_activities_for_resort(self, resort_id: int) -> List[Activity]:
        with self.transaction() as session:
            records = session.scalars(
                select(ActivityRecord)
                .join(ActivityResortLink, ActivityResortLink.activity_id == ActivityRecord.id)
                .where(ActivityResortLink.resort_id == resort_id)
                .order_by(ActivityRecord.start_date.desc())
            ).all()
            return [_to_activity(r) for r in records]

    def get_activities_for_peak(self, peak_id: int) -> List[Activity]:
        with self.transaction() as session:
            records = session.scalars(
                select(ActivityRecord)
                .join(ActivityPeakLink, ActivityPeakLink.activity_id == ActivityRecord.id)
                .where(ActivityPeakLink.peak_id == peak_id)
                .order_by(ActivityRecord.start_date.desc())
            ).all()
            return [_to_activity(r) for r in records]
