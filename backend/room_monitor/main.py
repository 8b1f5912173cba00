"""
Room Monitor - Backend API
==========================
FastAPI application that stores room sensor readings and serves them to
the dashboard.

ARCHITECTURE:

    [Room Sensor] --POST /sensors--> [This Backend] ---> [MySQL: sensor_ruangan]
                                           ^
                                           |  GET /sensors (every 5 s)
                                           |
                                      [Dashboard]

    Only the newest 10 readings are kept - every POST deletes older rows.

HOW TO RUN:
    # Install
    pip install -e .

    # Copy environment config
    cp env.example.txt .env
    # Edit .env with your database settings

    # Run the server
    uvicorn room_monitor.main:app --reload --port 8000

    # Watch the data from a terminal (another window)
    room-monitor-poll

API DOCUMENTATION:
    After starting the server, visit:
    - Swagger UI: http://localhost:8000/docs
    - ReDoc: http://localhost:8000/redoc
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from room_monitor.config import Settings
from room_monitor.exceptions import StorageError
from room_monitor.models import HealthResponse
from room_monitor.routers import dashboard_router, sensors_router, set_reading_service, get_reading_service
from room_monitor.services import ReadingService, ReadingStore, build_engine


# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)


# =============================================================================
# ERROR RESPONSES
# =============================================================================
# Every error goes out as {"error": "..."} - that's what the dashboard reads.

async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError):
    locations = {error["loc"][0] for error in exc.errors() if error.get("loc")}
    message = "Invalid sensor payload" if "body" in locations else "Invalid request"
    logger.warning(f"[api] {request.method} {request.url.path} rejected: {exc.errors()}")
    return JSONResponse(status_code=400, content={"error": message})


# =============================================================================
# APPLICATION FACTORY
# =============================================================================

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI app.

    Args:
        settings: Explicit settings (tests pass an in-memory SQLite config).
                  Defaults to Settings.from_env().
    """
    settings = settings or Settings.from_env()

    logging.basicConfig(
        level=settings.log_level,
        format='[%(asctime)s] %(message)s',
        datefmt='%H:%M:%S',
        handlers=[logging.StreamHandler(sys.stderr)]
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        STARTUP:
            1. Create the database engine (connection pool)
            2. Create the sensor table if it's missing
            3. Hand the ReadingService to the routers

        SHUTDOWN:
            1. Close all pooled connections
        """
        store = ReadingStore(build_engine(settings.database))
        try:
            store.create_schema()
        except StorageError:
            # Keep serving; requests will return 500 until the database is back
            logger.warning("[startup] Database unavailable, continuing without schema check")

        set_reading_service(ReadingService(store, retention_limit=settings.retention_limit))

        logger.info("=" * 60)
        logger.info("ROOM MONITOR - Backend started")
        logger.info(f"   Database: {store.engine.url.render_as_string(hide_password=True)}")
        logger.info(f"   Keeping the newest {settings.retention_limit} readings")
        logger.info(f"   CORS origins: {len(settings.cors_origins)} configured")
        logger.info("=" * 60)

        yield  # Application runs here

        logger.info("Shutting down...")
        set_reading_service(None)
        store.close()

    app = FastAPI(
        title="Room Monitor API",
        description="""
## Overview

Stores room sensor readings (light, temperature, humidity) and serves them
to the dashboard.

## How It Works

1. **Devices POST readings** to `/sensors`
2. **Only the newest 10 are kept** - older rows are deleted on every insert
3. **The dashboard polls** `/sensors` every 5 seconds, asking only for
   readings newer than the last one it has
        """,
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    app.include_router(sensors_router)
    app.include_router(dashboard_router)

    @app.get("/", summary="API Information")
    async def root():
        """Root endpoint with API overview."""
        return {
            "name": "Room Monitor API",
            "version": "1.0.0",
            "documentation": {
                "swagger": "/docs",
                "redoc": "/redoc",
                "openapi": "/openapi.json"
            },
            "endpoints": {
                "readings": "GET /sensors",
                "new_readings": "GET /sensors?timestamp=<ISO time>",
                "record": "POST /sensors",
                "snapshot": "GET /dashboard/snapshot",
                "gauge": "GET /dashboard/gauge/{lumen|temperature|humidity}",
            }
        }

    @app.get("/health", summary="Health Check", response_model=HealthResponse)
    def health():
        """Is the backend up, and can it reach the database?"""
        service = get_reading_service()
        try:
            count = service.count()
        except StorageError:
            return HealthResponse(status="degraded", retention_limit=service.retention_limit)
        return HealthResponse(status="healthy", readings=count, retention_limit=service.retention_limit)

    return app


app = create_app()
