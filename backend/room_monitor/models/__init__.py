"""
Models Package
==============

This is where all our data models live.
Import from here instead of the individual files.

Example:
    from room_monitor.models import SensorReading, RecordReadingRequest
"""

from .reading import (
    # Names for metrics and trends
    Metric,
    Trend,

    # What devices send us
    RecordReadingRequest,

    # What we send back
    SensorReading,
    MessageResponse,
    ErrorResponse,
    HealthResponse,
)

__all__ = [
    "Metric",
    "Trend",
    "RecordReadingRequest",
    "SensorReading",
    "MessageResponse",
    "ErrorResponse",
    "HealthResponse",
]
