"""Tests for SensorPoller using httpx.MockTransport (and the real app over ASGI)."""

import asyncio
from datetime import datetime

import httpx
import pytest

from room_monitor.client.poller import SensorPoller
from room_monitor.config import ClientConfig
from room_monitor.main import create_app
from room_monitor.routers import set_reading_service


class FakeBackend:
    """Answers GET /sensors the way the real backend does."""

    def __init__(self, readings):
        self.readings = list(readings)      # oldest first
        self.requests = []
        self.fail_next = None               # an exception or a status code

    def add(self, reading):
        self.readings.append(reading)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        failure, self.fail_next = self.fail_next, None
        if isinstance(failure, Exception):
            raise failure
        if isinstance(failure, int):
            return httpx.Response(failure, json={"error": "Failed to fetch sensor data"})

        since = request.url.params.get("timestamp")
        if since:
            cutoff = datetime.fromisoformat(since)
            rows = [r for r in self.readings if r.timestamp > cutoff]
        else:
            rows = list(reversed(self.readings))[:10]
        return httpx.Response(200, json=[r.model_dump(mode="json", by_alias=True) for r in rows])


def make_poller(backend, **config):
    http_client = httpx.AsyncClient(
        transport=httpx.MockTransport(backend),
        base_url="http://sensors.test",
    )
    return SensorPoller(ClientConfig(base_url="http://sensors.test", **config), http_client=http_client)


@pytest.fixture
def backend(make_reading):
    return FakeBackend(make_reading(i, lumen=i) for i in range(1, 13))


def test_initial_load_is_oldest_first(backend):
    poller = make_poller(backend)

    asyncio.run(poller.load_initial())

    assert [r.lumen for r in poller.readings] == [3, 4, 5, 6, 7, 8, 9, 10, 11, 12]
    assert "timestamp" not in backend.requests[0].url.params
    assert poller.error is None


def test_poll_appends_only_new_readings_in_order(backend, make_reading):
    poller = make_poller(backend)

    async def scenario():
        await poller.load_initial()
        backend.add(make_reading(13, lumen=13))
        backend.add(make_reading(14, lumen=14))
        return await poller.poll_once()

    new = asyncio.run(scenario())

    assert [r.lumen for r in new] == [13, 14]
    assert [r.lumen for r in poller.readings][-4:] == [11, 12, 13, 14]
    timestamps = [r.timestamp for r in poller.readings]
    assert timestamps == sorted(timestamps)
    assert backend.requests[-1].url.params["timestamp"] == make_reading(12).timestamp.isoformat()


def test_poll_with_nothing_new(backend):
    poller = make_poller(backend)

    async def scenario():
        await poller.load_initial()
        return await poller.poll_once()

    assert asyncio.run(scenario()) == []
    assert len(poller.readings) == 10


def test_poll_with_empty_window_does_initial_load(backend):
    poller = make_poller(backend)

    new = asyncio.run(poller.poll_once())

    assert len(new) == 10
    assert "timestamp" not in backend.requests[0].url.params


def test_failed_poll_sets_error_and_next_poll_recovers(backend, make_reading):
    poller = make_poller(backend)

    async def scenario():
        await poller.load_initial()

        backend.fail_next = httpx.ConnectError("connection refused")
        assert await poller.poll_once() == []
        error = poller.error

        backend.add(make_reading(13, lumen=13))
        new = await poller.poll_once()
        return error, new

    error, new = asyncio.run(scenario())

    assert "Failed to fetch sensor data" in error
    assert [r.lumen for r in new] == [13]
    assert poller.error is None


def test_server_error_is_reported_with_status(backend):
    poller = make_poller(backend)
    backend.fail_next = 500

    asyncio.run(poller.load_initial())

    assert poller.readings == []
    assert "HTTP 500" in poller.error


def test_malformed_body_is_a_transport_error():
    poller = make_poller(lambda request: httpx.Response(200, json={"not": "a list"}))

    asyncio.run(poller.load_initial())

    assert poller.error.startswith("Unexpected sensor data")


def test_max_readings_drops_oldest(backend, make_reading):
    poller = make_poller(backend, max_readings=5)

    async def scenario():
        await poller.load_initial()
        backend.add(make_reading(13, lumen=13))
        await poller.poll_once()

    asyncio.run(scenario())

    assert [r.lumen for r in poller.readings] == [9, 10, 11, 12, 13]


def test_start_schedules_polling_and_stop_cleans_up(backend):
    poller = make_poller(backend, poll_interval=60)

    async def scenario():
        await poller.start()
        jobs = poller.scheduler.get_jobs()
        await poller.stop()
        return jobs

    jobs = asyncio.run(scenario())

    assert [job.id for job in jobs] == ["sensor_poll"]
    assert jobs[0].max_instances == 1
    assert len(poller.readings) == 10
    assert poller.scheduler is None


def test_poller_against_real_app(settings, service):
    app = create_app(settings)
    set_reading_service(service)
    for i in range(1, 4):
        service.record(lumen=i, temperature=20, humidity=50)

    async def scenario():
        async with httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app),
            base_url="http://testserver",
        ) as http_client:
            poller = SensorPoller(ClientConfig(base_url="http://testserver"), http_client=http_client)
            await poller.load_initial()
            service.record(lumen=4, temperature=21, humidity=50)
            await poller.poll_once()
            return poller

    try:
        poller = asyncio.run(scenario())
    finally:
        set_reading_service(None)

    assert [r.lumen for r in poller.readings] == [1, 2, 3, 4]
    assert poller.error is None


def test_owned_client_is_rebuilt_when_restarted(backend, make_reading):
    poller = SensorPoller(
        ClientConfig(base_url="http://sensors.test", poll_interval=60),
        transport=httpx.MockTransport(backend),
    )

    async def scenario():
        await poller.start()
        first_client = poller.http_client
        await poller.stop()
        closed_after_stop = first_client.is_closed

        backend.add(make_reading(13, lumen=13))
        await poller.start()
        second_client = poller.http_client
        await poller.stop()
        return first_client, second_client, closed_after_stop

    first_client, second_client, closed_after_stop = asyncio.run(scenario())

    assert closed_after_stop
    assert second_client is not first_client
    assert second_client.is_closed
    assert [r.lumen for r in poller.readings][-1] == 13
    assert poller.error is None
    assert len(backend.requests) == 2


def test_restart_with_closed_borrowed_client_fails_loudly(backend):
    poller = make_poller(backend)

    async def scenario():
        await poller.http_client.aclose()
        await poller.start()

    with pytest.raises(RuntimeError, match="has been closed"):
        asyncio.run(scenario())
    assert poller.scheduler is None
