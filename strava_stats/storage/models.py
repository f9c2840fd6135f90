"""
SQLAlchemy ORM Models
"""

from sqlalchemy import Column, Float, ForeignKey, Integer, String, Text, DateTime
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class ActivityRecord(Base):
    __tablename__ = 'activities'

    id = Column(Integer, primary_key=True)
    athlete_id = Column(Integer)
    name = Column(String)
    sport_type = Column(String, index=True)
    activity_type = Column(String)
    start_date = Column(String, index=True)
    start_date_local = Column(String)  # local wall-clock ISO string, kept verbatim
    timezone = Column(String)
    elapsed_time = Column(Integer)
    moving_time = Column(Integer)
    distance = Column(Float)
    total_elevation_gain = Column(Float)
    calories = Column(Float)
    start_lat = Column(Float)
    start_lng = Column(Float)
    location_city = Column(String)
    location_state = Column(String)
    location_country = Column(String)
    raw_json = Column(Text)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class ResortRecord(Base):
    __tablename__ = 'resorts'

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    country = Column(String)
    region = Column(String)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    radius_km = Column(Float)
    resort_type = Column(String, default='resort')
    created_at = Column(DateTime, server_default=func.now())


class PeakRecord(Base):
    __tablename__ = 'peaks'

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    country = Column(String)
    region = Column(String)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    elevation_meters = Column(Float)
    elevation_feet = Column(Float)
    radius_km = Column(Float)
    created_at = Column(DateTime, server_default=func.now())


class ActivityResortLink(Base):
    __tablename__ = 'activity_resorts'

    activity_id = Column(Integer, ForeignKey('activities.id'), primary_key=True)
    resort_id = Column(Integer, ForeignKey('resorts.id'), primary_key=True)
    distance_km = Column(Float)
    matched_by = Column(String)


class ActivityPeakLink(Base):
    __tablename__ = 'activity_peaks'

    activity_id = Column(Integer, ForeignKey('activities.id'), primary_key=True)
    peak_id = Column(Integer, ForeignKey('peaks.id'), primary_key=True)
    distance_km = Column(Float)
