"""
Routers Package
===============

Routers are like the reception desk - they direct incoming requests
to the right place.
"""

from .sensors import router as sensors_router, set_reading_service, get_reading_service
from .dashboard import router as dashboard_router

__all__ = [
    "sensors_router",
    "dashboard_router",
    "set_reading_service",
    "get_reading_service",
]
