"""
Gauge Widget
============

Draws the semicircular dial from the dashboard as an SVG string.

WHAT IT LOOKS LIKE:
------------------
            . - ~ ~ ~ - .
        .'       |       '.        <- grey background arc (left to right over the top)
     |           |  needle   |     <- colored arc from the left end up to the value
     |           o           |     <- hub
                24.5°C             <- label

The colored arc (and the needle) cover `(value - min) / (max - min)` of the
half circle. The arc color is picked by blending between the color stops
around the value, e.g. for the temperature gauge:

    10 °C  -> blue   (#3b82f6)
    25 °C  -> green  (#22c55e)
    40 °C  -> orange (#f97316)

so 17.5 °C comes out halfway between blue and green.

No state, no I/O - same input, same SVG.
"""

import math
from typing import NamedTuple, Sequence
from xml.sax.saxutils import escape

from room_monitor.models import Metric


class ColorStop(NamedTuple):
    value: float
    color: str


class GaugePreset(NamedTuple):
    minimum: float
    maximum: float
    unit: str
    stops: tuple[ColorStop, ...]


# Dial ranges used by the dashboard
PRESETS: dict[Metric, GaugePreset] = {
    Metric.TEMPERATURE: GaugePreset(0, 40, "°C", (
        ColorStop(10, "#3b82f6"),
        ColorStop(25, "#22c55e"),
        ColorStop(40, "#f97316"),
    )),
    Metric.HUMIDITY: GaugePreset(0, 100, "%", (
        ColorStop(30, "#f97316"),
        ColorStop(50, "#22c55e"),
        ColorStop(100, "#3b82f6"),
    )),
    Metric.LUMEN: GaugePreset(0, 1000, " lm", (
        ColorStop(100, "#64748b"),
        ColorStop(500, "#eab308"),
        ColorStop(1000, "#facc15"),
    )),
}

BACKGROUND_COLOR = "#e5e7eb"
NEEDLE_COLOR = "#000"
ARC_WIDTH = 20
NEEDLE_WIDTH = 4


# =============================================================================
# MATH HELPERS
# =============================================================================

def gauge_fraction(value: float, minimum: float, maximum: float) -> float:
    """How far along the dial `value` sits, clamped to 0..1."""
    if maximum <= minimum:
        raise ValueError(f"Gauge maximum ({maximum}) must be greater than minimum ({minimum})")
    fraction = (value - minimum) / (maximum - minimum)
    return min(max(fraction, 0.0), 1.0)


def _parse_hex(color: str) -> tuple[int, int, int]:
    digits = color.lstrip("#")
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    if len(digits) != 6:
        raise ValueError(f"Not a hex color: {color!r}")
    try:
        return int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16)
    except ValueError:
        raise ValueError(f"Not a hex color: {color!r}") from None


def interpolate_color(value: float, stops: Sequence[ColorStop]) -> str:
    """
    Blend between the two stops around `value`.

    Below the first stop you get the first color, above the last stop the
    last color. Returns "#rrggbb".
    """
    if not stops:
        raise ValueError("Gauge needs at least one color stop")

    ordered = sorted((ColorStop(*stop) for stop in stops), key=lambda stop: stop.value)

    if value <= ordered[0].value:
        return "#%02x%02x%02x" % _parse_hex(ordered[0].color)
    if value >= ordered[-1].value:
        return "#%02x%02x%02x" % _parse_hex(ordered[-1].color)

    for lower, upper in zip(ordered, ordered[1:]):
        if lower.value <= value <= upper.value:
            span = upper.value - lower.value
            t = (value - lower.value) / span if span else 0.0
            start, end = _parse_hex(lower.color), _parse_hex(upper.color)
            blended = tuple(round(a + (b - a) * t) for a, b in zip(start, end))
            return "#%02x%02x%02x" % blended

    # unreachable: value is between the first and last stop
    return "#%02x%02x%02x" % _parse_hex(ordered[-1].color)


def _point(cx: float, cy: float, radius: float, angle: float) -> tuple[float, float]:
    return cx + radius * math.cos(angle), cy + radius * math.sin(angle)


def _arc_path(cx: float, cy: float, radius: float, start: float, end: float) -> str:
    x1, y1 = _point(cx, cy, radius, start)
    x2, y2 = _point(cx, cy, radius, end)
    return f"M {x1:.2f} {y1:.2f} A {radius:.2f} {radius:.2f} 0 0 1 {x2:.2f} {y2:.2f}"


# =============================================================================
# RENDERING
# =============================================================================

def render_gauge(
    value: float,
    minimum: float,
    maximum: float,
    label: str,
    stops: Sequence[ColorStop],
    width: int = 300,
    height: int = 200,
) -> str:
    """
    Draw a gauge as a standalone SVG document.

    Args:
        value: The reading to show
        minimum, maximum: Dial range (inclusive)
        label: Text under the hub, e.g. "24.5°C"
        stops: (threshold, "#rrggbb") pairs for the arc color
        width, height: SVG size in pixels

    Raises:
        ValueError: maximum <= minimum, no stops, or a bad color
    """
    fraction = gauge_fraction(value, minimum, maximum)
    color = interpolate_color(value, stops)

    cx, cy = width / 2, height / 2
    radius = min(width, height) / 2 * 0.8

    # Angles run clockwise from the left end (pi) over the top to the right end (2 pi)
    angle = math.pi + fraction * math.pi
    needle_x, needle_y = _point(cx, cy, radius * 0.8, angle)

    parts = [
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{width}" height="{height}" '
        f'viewBox="0 0 {width} {height}">',
        f'<path class="gauge-background" d="{_arc_path(cx, cy, radius, math.pi, 2 * math.pi)}" '
        f'fill="none" stroke="{BACKGROUND_COLOR}" stroke-width="{ARC_WIDTH}"/>',
    ]
    if fraction > 0:
        parts.append(
            f'<path class="gauge-value" d="{_arc_path(cx, cy, radius, math.pi, angle)}" '
            f'fill="none" stroke="{color}" stroke-width="{ARC_WIDTH}"/>'
        )
    parts += [
        f'<circle class="gauge-hub" cx="{cx:.2f}" cy="{cy:.2f}" r="{radius * 0.1:.2f}" fill="{NEEDLE_COLOR}"/>',
        f'<line class="gauge-needle" x1="{cx:.2f}" y1="{cy:.2f}" x2="{needle_x:.2f}" y2="{needle_y:.2f}" '
        f'stroke="{NEEDLE_COLOR}" stroke-width="{NEEDLE_WIDTH}"/>',
        f'<text class="gauge-label" x="{cx:.2f}" y="{cy + radius * 0.5:.2f}" text-anchor="middle" '
        f'dominant-baseline="middle" font-family="sans-serif" font-size="24" font-weight="bold">'
        f'{escape(label)}</text>',
        "</svg>",
    ]
    return "\n".join(parts)


def render_metric_gauge(metric: Metric, value: float) -> str:
    """Draw a gauge for one metric using its preset range and colors."""
    preset = PRESETS[Metric(metric)]
    label = f"{value:g}{preset.unit}"
    return render_gauge(value, preset.minimum, preset.maximum, label, preset.stops)
