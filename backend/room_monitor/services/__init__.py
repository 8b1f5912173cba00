"""
Services Package
================

These are the "workers" that do the actual work.

- ReadingStore: Reads/writes the sensor table (SQLAlchemy)
- ReadingService: Validates readings and picks the right query
"""

from .storage import ReadingStore, build_engine
from .reading_service import ReadingService

__all__ = [
    "ReadingStore",
    "ReadingService",
    "build_engine",
]
