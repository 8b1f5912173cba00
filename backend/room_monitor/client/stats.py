"""
Derived Values
==============

Small helpers that turn the poller's list of readings into what a
dashboard shows:

- latest()    -> the newest reading
- trend()     -> is a metric going up, down or staying put?
- summarize() -> average / min / max over the window
- snapshot()  -> all of the above in one go

The list is expected oldest-first (that's how SensorPoller keeps it).
"""

from typing import Optional, Sequence

from pydantic import BaseModel

from room_monitor.models import Metric, SensorReading, Trend


class MetricStats(BaseModel):
    average: float
    minimum: float
    maximum: float
    count: int


class MetricSummary(BaseModel):
    """Everything a sensor card needs for one metric."""
    metric: Metric
    current: Optional[float] = None
    trend: Trend = Trend.STABLE
    stats: Optional[MetricStats] = None


class Snapshot(BaseModel):
    latest: Optional[SensorReading] = None
    metrics: dict[Metric, MetricSummary]


def latest(readings: Sequence[SensorReading]) -> Optional[SensorReading]:
    return readings[-1] if readings else None


def trend(readings: Sequence[SensorReading], metric: Metric) -> Trend:
    """
    Compare the last two readings.

    Fewer than two readings, or no change, is STABLE.
    """
    if len(readings) < 2:
        return Trend.STABLE

    current = readings[-1].value(metric)
    previous = readings[-2].value(metric)
    if current > previous:
        return Trend.UP
    if current < previous:
        return Trend.DOWN
    return Trend.STABLE


def summarize(readings: Sequence[SensorReading], metric: Metric) -> Optional[MetricStats]:
    """Average, min and max of one metric. None if there's nothing to summarize."""
    if not readings:
        return None

    values = [reading.value(metric) for reading in readings]
    return MetricStats(
        average=sum(values) / len(values),
        minimum=min(values),
        maximum=max(values),
        count=len(values),
    )


def snapshot(readings: Sequence[SensorReading]) -> Snapshot:
    newest = latest(readings)
    metrics = {
        metric: MetricSummary(
            metric=metric,
            current=newest.value(metric) if newest else None,
            trend=trend(readings, metric),
            stats=summarize(readings, metric),
        )
        for metric in Metric
    }
    return Snapshot(latest=newest, metrics=metrics)
