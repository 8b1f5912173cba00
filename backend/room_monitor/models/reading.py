"""
Reading Models
==============
Pydantic models for what goes in and out of the /sensors API.

The wire names come from the original room sensor firmware and database:
- Devices POST `lumen`, `suhu` (temperature) and `kelembapan` (humidity)
- The API returns rows with their column names: `nilai_lumen`,
  `nilai_suhu`, `nilai_kelembapan`

Inside Python we always use the English names (lumen, temperature,
humidity). The aliases take care of translating at the edges.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# ENUMS
# =============================================================================

class Metric(str, Enum):
    """The three things every room sensor measures."""
    LUMEN = "lumen"
    TEMPERATURE = "temperature"
    HUMIDITY = "humidity"


class Trend(str, Enum):
    """Which way a metric moved between the last two readings."""
    UP = "up"
    DOWN = "down"
    STABLE = "stable"


# =============================================================================
# REQUEST MODELS - What devices send to the backend
# =============================================================================

class RecordReadingRequest(BaseModel):
    """
    Body for POST /sensors.

    Every field is optional at the schema level on purpose: a missing or
    null value has to come back as our own 400 "Missing required fields"
    instead of FastAPI's generic 422. The service does the actual check.

    Example Request:
        POST /sensors
        {
            "lumen": 120,
            "suhu": 24.5,
            "kelembapan": 55
        }
    """
    model_config = ConfigDict(populate_by_name=True)

    lumen: Optional[float] = Field(None, description="Light intensity (lm)")
    temperature: Optional[float] = Field(None, alias="suhu", description="Temperature (°C)")
    humidity: Optional[float] = Field(None, alias="kelembapan", description="Relative humidity (%)")


# =============================================================================
# RESPONSE MODELS - What the backend returns
# =============================================================================

class SensorReading(BaseModel):
    """
    One stored reading.

    Serialized with the database column names, e.g.:
        {
            "id": 42,
            "timestamp": "2025-03-01T10:15:00.123456",
            "nilai_lumen": 120.0,
            "nilai_suhu": 24.5,
            "nilai_kelembapan": 55.0
        }

    The poller parses the same JSON back into this model.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: int
    timestamp: datetime
    lumen: float = Field(..., alias="nilai_lumen")
    temperature: float = Field(..., alias="nilai_suhu")
    humidity: float = Field(..., alias="nilai_kelembapan")

    def value(self, metric: Metric) -> float:
        """Get one metric by name, e.g. reading.value(Metric.HUMIDITY)."""
        return getattr(self, Metric(metric).value)


class MessageResponse(BaseModel):
    """Acknowledgement for a saved reading."""
    message: str = Field(..., examples=["Data saved successfully"])


class ErrorResponse(BaseModel):
    """Shape of every error body."""
    error: str = Field(..., examples=["Missing required fields"])


class HealthResponse(BaseModel):
    status: str
    readings: Optional[int] = None
    retention_limit: int
