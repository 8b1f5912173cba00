"""
Sensors API Router
==================

The two doors into the sensor table.

ALL ENDPOINTS:
-------------
GET  /sensors                      - Newest 10 readings, newest first
GET  /sensors?timestamp=<ISO time> - Readings after that time, oldest first
POST /sensors                      - Save a reading from a device

POST BODY:
---------
    {"lumen": 120, "suhu": 24.5, "kelembapan": 55}

    suhu = temperature (°C), kelembapan = humidity (%)
    All three are required; 0 is fine, null is not.

ERRORS:
------
Every error comes back as {"error": "..."}:
    400 Missing required fields      - a value was missing or null
    400 Invalid timestamp            - ?timestamp= isn't a date/time
    500 Failed to fetch sensor data  - database problem on GET
    500 Failed to save data          - database problem on POST
"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from room_monitor.exceptions import StorageError, ValidationError
from room_monitor.models import (
    ErrorResponse,
    MessageResponse,
    RecordReadingRequest,
    SensorReading,
)

logger = logging.getLogger(__name__)

# Create the router - this groups the sensor endpoints together
router = APIRouter(prefix="/sensors", tags=["sensors"])

_timestamp_adapter = TypeAdapter(datetime)


# =============================================================================
# DEPENDENCY INJECTION
# =============================================================================

_reading_service = None  # This gets set when the app starts


def set_reading_service(service):
    """Called at startup to hand the routers their ReadingService."""
    global _reading_service
    _reading_service = service


def get_reading_service():
    """Get the ReadingService for use in endpoints."""
    if _reading_service is None:
        raise HTTPException(status_code=500, detail="Server not fully started yet")
    return _reading_service


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.get(
    "",
    response_model=list[SensorReading],
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def get_sensor_readings(
    timestamp: Optional[str] = Query(
        None,
        description="Only return readings newer than this (ISO 8601). Omit for the newest 10.",
    ),
    service=Depends(get_reading_service),
):
    """
    Get readings.

    - No timestamp: the newest readings (up to 10), newest first
    - With timestamp: everything newer than it, oldest first, no limit
    """
    since = None
    if timestamp:
        try:
            since = _timestamp_adapter.validate_python(timestamp)
        except PydanticValidationError:
            raise HTTPException(status_code=400, detail="Invalid timestamp")

    try:
        return service.query(since=since)
    except StorageError:
        raise HTTPException(status_code=500, detail="Failed to fetch sensor data")


@router.post(
    "",
    response_model=MessageResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def record_sensor_reading(
    payload: Optional[RecordReadingRequest] = Body(None),
    service=Depends(get_reading_service),
):
    """
    Save a reading from a room sensor.

    The newest 10 readings are kept; anything older is deleted right away.
    """
    payload = payload or RecordReadingRequest()
    try:
        service.record(payload.lumen, payload.temperature, payload.humidity)
    except ValidationError as e:
        detail = "Missing required fields" if e.missing else "Invalid sensor payload"
        raise HTTPException(status_code=400, detail=detail)
    except StorageError:
        raise HTTPException(status_code=500, detail="Failed to save data")

    return MessageResponse(message="Data saved successfully")
