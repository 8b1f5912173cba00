"""
Utility modules for the room monitor backend.
"""

from room_monitor.utils.validation import missing_fields, validate_measurement

__all__ = [
    "missing_fields",
    "validate_measurement",
]
