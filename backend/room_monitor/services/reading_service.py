"""
Reading Service
===============

The two things the backend actually does:

1. record() - a device sends a reading, we store it and throw away old ones
2. query()  - the dashboard asks for readings

QUERY MODES:
-----------
    query()                   -> newest 10 readings, NEWEST first
    query(since=<timestamp>)  -> every reading after that time, OLDEST first

The dashboard uses the first one when it loads, then the second one every
few seconds to pick up only what's new.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from room_monitor.exceptions import ValidationError
from room_monitor.models import SensorReading
from room_monitor.services.storage import ReadingStore
from room_monitor.utils.validation import missing_fields, validate_measurement

logger = logging.getLogger(__name__)

# query() with no timestamp never returns more than this, whatever the retention limit
INITIAL_FETCH_LIMIT = 10


class ReadingService:
    """
    Validates readings and talks to the store.

    HOW TO USE:
    ----------
    store = ReadingStore(build_engine(settings.database))
    service = ReadingService(store, retention_limit=10)

    service.record(lumen=120, temperature=24.5, humidity=55)
    newest = service.query()
    newer = service.query(since=newest[0].timestamp)
    """

    def __init__(self, store: ReadingStore, retention_limit: int = 10):
        self.store = store
        self.retention_limit = retention_limit

    def record(
        self,
        lumen: Optional[float],
        temperature: Optional[float],
        humidity: Optional[float],
    ) -> SensorReading:
        """
        Store a reading and prune the table down to the retention limit.

        `None` means "not sent". Zero is a perfectly good reading.

        Raises:
            ValidationError: A value is missing, NaN or infinite (nothing is stored)
            StorageError: The database failed
        """
        values = {"lumen": lumen, "suhu": temperature, "kelembapan": humidity}

        missing = missing_fields(values)
        if missing:
            logger.warning(f"[sensors] Rejected reading, missing: {', '.join(missing)}")
            raise ValidationError(missing=missing)

        invalid = [name for name, value in values.items() if not validate_measurement(value)]
        if invalid:
            logger.warning(f"[sensors] Rejected reading, not finite: {', '.join(invalid)}")
            raise ValidationError(invalid=invalid)

        reading = self.store.insert(lumen, temperature, humidity, keep=self.retention_limit)
        logger.info(
            f"[sensors] Saved reading #{reading.id}: "
            f"lumen={lumen} temp={temperature} humidity={humidity}"
        )
        return reading

    def query(self, since: Optional[datetime] = None) -> list[SensorReading]:
        """
        Get readings.

        Args:
            since: Only return readings strictly newer than this.
                   Timezone-aware values are converted to UTC first.

        Raises:
            StorageError: The database failed
        """
        if since is None:
            return self.store.latest(min(self.retention_limit, INITIAL_FETCH_LIMIT))

        if since.tzinfo is not None:
            since = since.astimezone(timezone.utc).replace(tzinfo=None)
        return self.store.since(since)

    def count(self) -> int:
        """How many readings are stored right now."""
        return self.store.count()
