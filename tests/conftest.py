"""Shared fixtures: in-memory SQLite database, service, and API client."""

from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from room_monitor.config import DatabaseConfig, Settings
from room_monitor.main import create_app
from room_monitor.models import SensorReading
from room_monitor.services import ReadingService, ReadingStore, build_engine


@pytest.fixture
def settings():
    return Settings(database=DatabaseConfig(url="sqlite://"))


@pytest.fixture
def store():
    store = ReadingStore(build_engine(DatabaseConfig(url="sqlite://")))
    store.create_schema()
    yield store
    store.close()


@pytest.fixture
def service(store):
    return ReadingService(store, retention_limit=10)


@pytest.fixture
def broken_service():
    """A service whose table was never created, so every statement fails."""
    store = ReadingStore(build_engine(DatabaseConfig(url="sqlite://")))
    yield ReadingService(store)
    store.close()


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as client:
        yield client


@pytest.fixture
def make_reading():
    """Factory for readings one second apart, starting 2025-03-01 10:00:00."""
    def factory(index: int, lumen=100.0, temperature=20.0, humidity=50.0) -> SensorReading:
        return SensorReading(
            id=index,
            timestamp=datetime(2025, 3, 1, 10, 0, 0) + timedelta(seconds=index),
            lumen=lumen,
            temperature=temperature,
            humidity=humidity,
        )
    return factory
