"""
Configuration
=============

All the knobs for the backend and the polling client live here.

Values come from environment variables (a `.env` file is loaded by
`load_dotenv()` at startup, see env.example.txt). Nothing reads the
environment at import time - call `Settings.from_env()` or
`ClientConfig.from_env()` and pass the result where it's needed.
That way tests can hand in their own config (e.g. in-memory SQLite).

Environment Variables:
    DB_HOST, DB_PORT, DB_USER, DB_PASSWORD, DB_NAME: MySQL connection
    DATABASE_URL: Full SQLAlchemy URL, overrides the DB_* values
    RETENTION_LIMIT: How many readings to keep (default: 10)
    FRONTEND_URL: Dashboard origin for CORS
    LOG_LEVEL: Logging level (default: INFO)
    SENSOR_API_URL: Where the poller finds the API (default: http://localhost:8000)
    POLL_INTERVAL: Seconds between incremental polls (default: 5)
    REQUEST_TIMEOUT: HTTP timeout for the poller in seconds (default: 10)
"""

import os
from typing import Optional

from pydantic import BaseModel, Field
from sqlalchemy.engine import URL


class DatabaseConfig(BaseModel):
    """
    Where the sensor table lives.

    Defaults match a local MySQL install with a `sensor_db` database.
    """
    host: str = "localhost"
    port: int = 3306
    user: str = "root"
    password: str = ""
    name: str = "sensor_db"

    # Full SQLAlchemy URL (e.g. "sqlite://" for tests). Wins over the fields above.
    url: Optional[str] = None

    pool_size: int = Field(default=5, ge=1)
    pool_recycle: int = Field(default=3600, description="Seconds before a pooled connection is replaced")

    @classmethod
    def from_env(cls) -> "DatabaseConfig":
        return cls(
            host=os.getenv("DB_HOST", "localhost"),
            port=int(os.getenv("DB_PORT", "3306")),
            user=os.getenv("DB_USER", "root"),
            password=os.getenv("DB_PASSWORD", ""),
            name=os.getenv("DB_NAME", "sensor_db"),
            url=os.getenv("DATABASE_URL") or None,
        )

    def sqlalchemy_url(self):
        """The URL handed to `create_engine()`."""
        if self.url:
            return self.url
        return URL.create(
            "mysql+pymysql",
            username=self.user,
            password=self.password or None,
            host=self.host,
            port=self.port,
            database=self.name,
        )


class Settings(BaseModel):
    """Backend settings."""
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    retention_limit: int = Field(default=10, ge=1)
    log_level: str = "INFO"

    # Allowed CORS origins for the dashboard
    cors_origins: list[str] = Field(default_factory=lambda: [
        "http://localhost:3000",    # Next.js dev server
        "http://localhost:5173",    # Vite dev server
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
    ])

    @classmethod
    def from_env(cls) -> "Settings":
        settings = cls(
            database=DatabaseConfig.from_env(),
            retention_limit=int(os.getenv("RETENTION_LIMIT", "10")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
        frontend_url = os.getenv("FRONTEND_URL")
        if frontend_url and frontend_url not in settings.cors_origins:
            settings.cors_origins.insert(0, frontend_url)
        return settings


class ClientConfig(BaseModel):
    """Settings for the polling client."""
    base_url: str = "http://localhost:8000"
    poll_interval: float = Field(default=5.0, gt=0)
    request_timeout: float = Field(default=10.0, gt=0)
    max_readings: Optional[int] = Field(default=None, ge=1)

    @classmethod
    def from_env(cls) -> "ClientConfig":
        return cls(
            base_url=os.getenv("SENSOR_API_URL", "http://localhost:8000"),
            poll_interval=float(os.getenv("POLL_INTERVAL", "5")),
            request_timeout=float(os.getenv("REQUEST_TIMEOUT", "10")),
        )
