"""
Client Package
==============

The dashboard side: poll the API, work out trends and stats, draw gauges.

- poller: SensorPoller fetches readings and keeps them in time order
- stats: latest / trend / summarize / snapshot
- gauge: SVG dial widget

The backend's dashboard router uses stats and gauge, so only those are
imported here. Import the poller from `room_monitor.client.poller`; it pulls
in APScheduler, which the API server has no use for.
"""

from .stats import MetricStats, MetricSummary, Snapshot, latest, snapshot, summarize, trend
from .gauge import ColorStop, PRESETS, render_gauge, render_metric_gauge

__all__ = [
    "MetricStats",
    "MetricSummary",
    "Snapshot",
    "latest",
    "snapshot",
    "summarize",
    "trend",
    "ColorStop",
    "PRESETS",
    "render_gauge",
    "render_metric_gauge",
]
