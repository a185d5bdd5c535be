"""
Validation Module

Physics-based sanitization of hardware readings.
Gates every downstream score: an impossible reading is hidden, never scored.
"""
from .metric_sanitizer import (
    MetricSanitizer,
    SanitizedValue,
    PlausibilityRange,
    CPU_TEMP_RANGE,
    GPU_TEMP_RANGE,
    DISK_TEMP_RANGE,
    TEMPERATURE_SENTINELS,
    COUNT_SENTINELS,
)
from .sensor_sanitization import SensorSanitizationPass

__all__ = [
    "MetricSanitizer",
    "SanitizedValue",
    "PlausibilityRange",
    "CPU_TEMP_RANGE",
    "GPU_TEMP_RANGE",
    "DISK_TEMP_RANGE",
    "TEMPERATURE_SENTINELS",
    "COUNT_SENTINELS",
    "SensorSanitizationPass",
]
