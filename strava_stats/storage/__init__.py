"""
Storage Module

SQLAlchemy store for activities, locations and matches.
"""

from .database import Database

__all__ = ["Database"]
