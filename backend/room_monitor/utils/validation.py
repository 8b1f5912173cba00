"""
Input Validation Utilities
===========================

Common validation functions for sensor readings.
"""

import math
from typing import Any, Mapping


def missing_fields(values: Mapping[str, Any]) -> list[str]:
    """
    Names of the values that weren't sent.

    Only None counts as missing - 0, 0.0 and False are real values.

    Args:
        values: Field name -> value, e.g. {"lumen": 120, "suhu": None}

    Returns:
        e.g. ["suhu"]
    """
    return [name for name, value in values.items() if value is None]


def validate_measurement(value: float) -> bool:
    """
    Check that a measurement can be stored.

    Args:
        value: Sensor value

    Returns:
        True for a finite number, False for NaN or +/- infinity
    """
    return math.isfinite(value)
