"""
Errors
======

Everything that can go wrong, in three flavors:

- ValidationError: the device sent an incomplete reading (-> HTTP 400)
- StorageError: the database said no (-> HTTP 500)
- TransportError: the poller couldn't get data from the API (-> dashboard error state)

Routers turn the first two into HTTP responses. The poller catches the
third and keeps polling.
"""

from typing import Optional


class TelemetryError(Exception):
    """Base class for all room monitor errors."""


class ValidationError(TelemetryError):
    """A reading is missing values, or has values we can't store (NaN, infinity)."""

    def __init__(self, missing: Optional[list[str]] = None, invalid: Optional[list[str]] = None):
        self.missing = missing or []
        self.invalid = invalid or []
        if self.missing:
            message = f"Missing required fields: {', '.join(self.missing)}"
        else:
            message = f"Invalid values: {', '.join(self.invalid)}"
        super().__init__(message)


class StorageError(TelemetryError):
    """A database connection or statement failed."""


class TransportError(TelemetryError):
    """Fetching readings from the API failed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)
