"""
Sensor Poller
=============

The dashboard's side of the conversation with the backend.

HOW IT WORKS:
------------
1. Start: GET /sensors                    -> newest 10 readings (newest first)
   We flip them around so the list is OLDEST first.
2. Every 5 seconds: GET /sensors?timestamp=<timestamp of our newest reading>
   -> only the readings we don't have yet (oldest first)
   We tack them onto the end.

So `poller.readings` is always in time order and `poller.readings[-1]` is
always the newest reading.

WHEN THINGS GO WRONG:
--------------------
If a fetch fails (backend down, timeout, 500...) we remember the message in
`poller.error` so the dashboard can show it, and try again on the next
tick. The first successful fetch after that clears the error.
"""

import logging
from typing import Optional

import httpx
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from room_monitor.config import ClientConfig
from room_monitor.exceptions import TransportError
from room_monitor.models import SensorReading

logger = logging.getLogger(__name__)

_readings_adapter = TypeAdapter(list[SensorReading])


class SensorPoller:
    """
    Keeps an up-to-date window of readings from the backend.

    HOW TO USE:
    ----------
    poller = SensorPoller(ClientConfig(base_url="http://localhost:8000"))
    await poller.start()      # first load + schedule polling every 5 s

    poller.readings           # oldest first
    poller.error              # None, or what went wrong last time

    await poller.stop()
    """

    READINGS_PATH = "/sensors"

    def __init__(
        self,
        config: ClientConfig,
        http_client: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            config: Where the API is and how often to poll
            http_client: Bring your own client. You keep ownership: stop()
                         leaves it open.
            transport: Transport for the client we create ourselves when
                       http_client is omitted (tests use httpx.MockTransport).
                       That client is closed on stop() and rebuilt on start().
        """
        self.config = config
        self._transport = transport
        self._owns_client = http_client is None
        self.http_client = http_client or self._new_client()

        self.readings: list[SensorReading] = []
        self.error: Optional[str] = None

        self.scheduler: Optional[AsyncIOScheduler] = None

    def _new_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.config.base_url,
            timeout=self.config.request_timeout,
            transport=self._transport,
        )

    # =========================================================================
    # FETCHING
    # =========================================================================

    async def fetch(self, since: Optional[str] = None) -> list[SensorReading]:
        """
        One GET /sensors call.

        Raises:
            TransportError: Network problem, non-2xx response or a body we can't read
        """
        params = {"timestamp": since} if since else None
        try:
            response = await self.http_client.get(self.READINGS_PATH, params=params)
            response.raise_for_status()
            return _readings_adapter.validate_python(response.json())
        except httpx.HTTPStatusError as e:
            raise TransportError(
                f"Failed to fetch sensor data (HTTP {e.response.status_code})",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise TransportError(f"Failed to fetch sensor data: {e}") from e
        except (ValueError, PydanticValidationError) as e:
            raise TransportError(f"Unexpected sensor data: {e}") from e

    async def load_initial(self) -> list[SensorReading]:
        """Replace the window with the newest readings, oldest first."""
        try:
            newest_first = await self.fetch()
        except TransportError as e:
            self._fail(e)
            return self.readings

        self.readings = list(reversed(newest_first))
        self._trim()
        self.error = None
        logger.info(f"[poller] Loaded {len(self.readings)} reading(s)")
        return self.readings

    async def poll_once(self) -> list[SensorReading]:
        """
        Fetch readings newer than the last one we hold and append them.

        With nothing held yet this does a full load instead.

        Returns:
            The new readings (empty on failure or when nothing is new)
        """
        if not self.readings:
            return list(await self.load_initial())

        since = self.readings[-1].timestamp.isoformat()
        try:
            new_readings = await self.fetch(since=since)
        except TransportError as e:
            self._fail(e)
            return []

        self.readings.extend(new_readings)
        self._trim()
        self.error = None
        if new_readings:
            logger.info(f"[poller] {len(new_readings)} new reading(s)")
        return new_readings

    def _fail(self, error: TransportError) -> None:
        self.error = str(error)
        logger.warning(f"[poller] {error}")

    def _trim(self) -> None:
        limit = self.config.max_readings
        if limit and len(self.readings) > limit:
            del self.readings[:-limit]

    # =========================================================================
    # SCHEDULING
    # =========================================================================

    async def start(self) -> None:
        """Load the initial window, then poll every `poll_interval` seconds."""
        if self.scheduler is not None:
            return

        if self.http_client.is_closed:
            if not self._owns_client:
                raise RuntimeError("The HTTP client passed to SensorPoller has been closed")
            self.http_client = self._new_client()

        await self.load_initial()

        self.scheduler = AsyncIOScheduler()
        self.scheduler.add_job(
            self.poll_once,
            trigger=IntervalTrigger(seconds=self.config.poll_interval),
            id="sensor_poll",
            max_instances=1,    # never start a poll while the last one is still waiting
            coalesce=True,
        )
        self.scheduler.start()
        logger.info(f"[poller] Polling {self.config.base_url} every {self.config.poll_interval}s")

    async def stop(self) -> None:
        if self.scheduler is not None:
            self.scheduler.shutdown(wait=False)
            self.scheduler = None
        if self._owns_client:
            await self.http_client.aclose()
