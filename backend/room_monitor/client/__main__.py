"""
Console Dashboard
=================

Poll the API and print the latest reading, trends and stats.

    python -m room_monitor.client
    # or, after pip install:
    room-monitor-poll

Reads SENSOR_API_URL / POLL_INTERVAL / REQUEST_TIMEOUT from the environment
(or a .env file). Ctrl+C to stop.
"""

import asyncio
import logging
import sys

from dotenv import load_dotenv

from room_monitor.client.poller import SensorPoller
from room_monitor.client.stats import snapshot
from room_monitor.config import ClientConfig

logger = logging.getLogger("room_monitor.client")

ARROWS = {"up": "↑", "down": "↓", "stable": "→"}


def format_snapshot(poller: SensorPoller) -> str:
    if poller.error:
        return f"ERROR: {poller.error}"

    view = snapshot(poller.readings)
    if view.latest is None:
        return "No readings yet"

    parts = [view.latest.timestamp.strftime("%H:%M:%S")]
    for summary in view.metrics.values():
        stats = summary.stats
        parts.append(
            f"{summary.metric.value}={summary.current:.1f}{ARROWS[summary.trend.value]} "
            f"(avg {stats.average:.1f}, min {stats.minimum:.1f}, max {stats.maximum:.1f})"
        )
    return " | ".join(parts)


async def run(config: ClientConfig) -> None:
    poller = SensorPoller(config)
    await poller.start()
    try:
        while True:
            logger.info(format_snapshot(poller))
            await asyncio.sleep(config.poll_interval)
    finally:
        await poller.stop()


def main() -> None:
    load_dotenv()
    logging.basicConfig(
        level=logging.INFO,
        format='[%(asctime)s] %(message)s',
        datefmt='%H:%M:%S',
        handlers=[logging.StreamHandler(sys.stderr)]
    )
    try:
        asyncio.run(run(ClientConfig.from_env()))
    except KeyboardInterrupt:
        logger.info("Stopped")


if __name__ == "__main__":
    main()
