"""
Dashboard API Router
====================

Ready-made views of the newest readings for dashboards that don't want to
do the math themselves.

GET /dashboard/snapshot       - Latest reading + trend/avg/min/max per metric
GET /dashboard/gauge/{metric} - SVG gauge for lumen, temperature or humidity
"""

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from room_monitor.client.gauge import render_metric_gauge
from room_monitor.client.stats import Snapshot, snapshot
from room_monitor.exceptions import StorageError
from room_monitor.models import ErrorResponse, Metric
from room_monitor.routers.sensors import get_reading_service

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get(
    "/snapshot",
    response_model=Snapshot,
    responses={500: {"model": ErrorResponse}},
)
def get_snapshot(service=Depends(get_reading_service)):
    """Trends and stats over the stored window (oldest first, like the poller sees it)."""
    try:
        readings = list(reversed(service.query()))
    except StorageError:
        raise HTTPException(status_code=500, detail="Failed to fetch sensor data")
    return snapshot(readings)


@router.get(
    "/gauge/{metric}",
    response_class=Response,
    responses={
        200: {"content": {"image/svg+xml": {}}},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
def get_metric_gauge(metric: str, service=Depends(get_reading_service)):
    """
    Draw the gauge for the newest reading.

    Shows 0 when there are no readings yet.
    """
    try:
        selected = Metric(metric)
    except ValueError:
        raise HTTPException(status_code=404, detail=f"Unknown metric: {metric}")

    try:
        readings = service.query()
    except StorageError:
        raise HTTPException(status_code=500, detail="Failed to fetch sensor data")

    value = readings[0].value(selected) if readings else 0
    return Response(content=render_metric_gauge(selected, value), media_type="image/svg+xml")
