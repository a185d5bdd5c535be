"""
Metric Sanitization Module

Enforces hard physical-plausibility constraints on single hardware readings.
Detects sentinel placeholders, impossible values and NaN/Inf.
Pure functions only - the sanitizer never touches the metric it inspects.

Ranges are OPEN intervals: a CPU temperature of exactly 5.0 or 115.0 is
rejected just like 0 or 917541.
"""
import numbers
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Optional, Tuple

import numpy as np

from diagtrust.config import DEFAULT_VRAM_TOLERANCE
from diagtrust.core.models import Metric
from diagtrust.utils import SanitizationError, get_logger

logger = get_logger(__name__)

# Placeholder readings meaning "no real measurement".
TEMPERATURE_SENTINELS: FrozenSet[float] = frozenset({-1.0, -999.0, 0.0})
# 0 is a legitimate count, so it is not a sentinel here.
COUNT_SENTINELS: FrozenSet[float] = frozenset({-1.0, -999.0})
SENTINEL_TOLERANCE = 0.001

SMART_TEMP_MAX_REASONABLE = 200.0
QUEUE_LENGTH_MAX = 1000.0


@dataclass(frozen=True)
class PlausibilityRange:
    """Open interval (low, high) of physically plausible values."""
    low: float
    high: float
    unit: str = ""

    def __post_init__(self):
        if not self.low < self.high:
            raise SanitizationError(
                f"Plausibility range ({self.low}, {self.high}) is empty",
                details={"low": self.low, "high": self.high},
            )

    def contains(self, value: float) -> bool:
        return self.low < value < self.high

    def describe(self) -> str:
        return f"({self.low:g}, {self.high:g}){self.unit}"


CPU_TEMP_RANGE = PlausibilityRange(5.0, 115.0, "°C")
GPU_TEMP_RANGE = PlausibilityRange(5.0, 120.0, "°C")
DISK_TEMP_RANGE = PlausibilityRange(0.0, 90.0, "°C")


@dataclass(frozen=True)
class SanitizedValue:
    """Verdict for one reading: Valid(value, display) or Invalid(reason)."""
    value: Any = None
    is_valid: bool = False
    display_value: str = ""
    invalid_reason: Optional[str] = None

    @classmethod
    def valid(cls, value: Any, display: str) -> "SanitizedValue":
        return cls(value=value, is_valid=True, display_value=display)

    @classmethod
    def invalid(cls, reason: str) -> "SanitizedValue":
        return cls(
            is_valid=False,
            display_value=f"Unavailable ({reason})",
            invalid_reason=reason,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "value": self.value,
            "is_valid": self.is_valid,
            "display": self.display_value,
            "invalid_reason": self.invalid_reason,
        }


def as_finite_number(value: Any) -> Optional[float]:
    """Return value as a finite float, or None for anything else."""
    if isinstance(value, (bool, np.bool_)) or not isinstance(value, numbers.Real):
        return None
    number = float(value)
    if np.isnan(number) or np.isinf(number):
        return None
    return number


def is_sentinel(value: float, sentinels: FrozenSet[float]) -> bool:
    return any(abs(value - s) < SENTINEL_TOLERANCE for s in sentinels)


def _non_number_reason(value: Any) -> str:
    if isinstance(value, numbers.Real) and not isinstance(value, (bool, np.bool_)):
        return f"non-finite value ({value})"
    return f"non-numeric value ({value!r})"


class MetricSanitizer:
    """
    Validates raw readings against physical plausibility.

    Uses hard physics limits only - no statistics, no history.
    """

    def __init__(self, vram_tolerance: float = DEFAULT_VRAM_TOLERANCE):
        if vram_tolerance < 1.0:
            raise SanitizationError(
                f"vram_tolerance must be >= 1.0, got {vram_tolerance}",
                metric="vram",
            )
        self.vram_tolerance = vram_tolerance

    # ------------------------------------------------------------------
    # Generic rule
    # ------------------------------------------------------------------

    def validate(
        self,
        value: Any,
        plausible_range: PlausibilityRange,
        sentinels: FrozenSet[float] = TEMPERATURE_SENTINELS,
    ) -> SanitizedValue:
        """
        Validate one reading.

        Args:
            value:           Raw reading
            plausible_range: Open interval the value must lie strictly inside
            sentinels:       Context-specific placeholder values to reject

        Returns:
            SanitizedValue (Valid with a display string, or Invalid with a reason)
        """
        number = as_finite_number(value)
        if number is None:
            return SanitizedValue.invalid(_non_number_reason(value))

        if is_sentinel(number, sentinels):
            return SanitizedValue.invalid(f"sentinel value ({number:g})")

        if not plausible_range.contains(number):
            return SanitizedValue.invalid(
                f"out of range: {number:g} not in {plausible_range.describe()}"
            )

        return SanitizedValue.valid(number, f"{number:.1f}{plausible_range.unit}")

    def validate_metric(
        self,
        metric: Optional[Metric],
        plausible_range: PlausibilityRange,
        sentinels: FrozenSet[float] = TEMPERATURE_SENTINELS,
    ) -> SanitizedValue:
        """Validate a Metric; unavailable metrics are Invalid with their own reason."""
        if metric is None or not metric.available:
            reason = metric.reason if metric is not None and metric.reason else "sensor unavailable"
            return SanitizedValue.invalid(reason)
        return self.validate(metric.value, plausible_range, sentinels)

    # ------------------------------------------------------------------
    # Named temperature rules
    # ------------------------------------------------------------------

    def validate_cpu_temperature(self, value: Any) -> SanitizedValue:
        return self.validate(value, CPU_TEMP_RANGE, TEMPERATURE_SENTINELS)

    def validate_gpu_temperature(self, value: Any) -> SanitizedValue:
        return self.validate(value, GPU_TEMP_RANGE, TEMPERATURE_SENTINELS)

    def validate_disk_temperature(self, value: Any) -> SanitizedValue:
        return self.validate(value, DISK_TEMP_RANGE, TEMPERATURE_SENTINELS)

    def validate_smart_temperature(self, value: Any) -> SanitizedValue:
        """SMART attribute 194 is frequently corrupt (e.g. 917541) on some controllers."""
        number = as_finite_number(value)
        if number is None:
            return SanitizedValue.invalid(_non_number_reason(value))
        if is_sentinel(number, TEMPERATURE_SENTINELS):
            return SanitizedValue.invalid(f"SMART sentinel value ({number:g})")
        if number > SMART_TEMP_MAX_REASONABLE:
            return SanitizedValue.invalid(
                f"SMART corrupt ({number:.0f}°C > {SMART_TEMP_MAX_REASONABLE:g}°C)"
            )
        if number < 0:
            return SanitizedValue.invalid(f"SMART negative value ({number:g})")
        return SanitizedValue.valid(number, f"{number:.0f}°C")

    # ------------------------------------------------------------------
    # VRAM (composite)
    # ------------------------------------------------------------------

    def vram_total_issue(self, total: Any) -> Optional[str]:
        """Reason the VRAM total is implausible, or None."""
        number = as_finite_number(total)
        if number is None:
            return f"VRAM total {_non_number_reason(total)}"
        if number <= 0:
            return f"VRAM total invalid: {number:g} MB"
        return None

    def vram_used_issue(self, used: Any, total: Any = None) -> Optional[str]:
        """
        Reason the VRAM used value is implausible, or None.

        The upper bound is only checked when a plausible total is supplied.
        """
        number = as_finite_number(used)
        if number is None:
            return f"VRAM used {_non_number_reason(used)}"
        if number < 0:
            return f"VRAM used negative: {number:g} MB"
        if total is not None and self.vram_total_issue(total) is None:
            limit = float(total) * self.vram_tolerance
            if number > limit:
                return f"VRAM inconsistent: {number:.0f} MB > {float(total):.0f} MB"
        return None

    def validate_vram(self, total: Any, used: Any) -> SanitizedValue:
        """
        Validate the (total, used) pair.

        total > 0; 0 <= used <= total * vram_tolerance. The slack absorbs the
        sampling-instant skew between the two counters.
        """
        reason = self.vram_total_issue(total) or self.vram_used_issue(used, total)
        if reason:
            return SanitizedValue.invalid(reason)
        total_mb, used_mb = float(total), float(used)
        pair: Tuple[float, float] = (total_mb, used_mb)
        return SanitizedValue.valid(pair, f"{used_mb:.0f}/{total_mb:.0f} MB")

    # ------------------------------------------------------------------
    # Performance counters
    # ------------------------------------------------------------------

    def validate_perf_counter(self, value: Any, counter_name: str) -> SanitizedValue:
        """
        Validate a performance-counter sample.

        -1 is the "counter not supported" placeholder. Queue lengths must lie
        in [0, 1000] and percentages in [0, 100].
        """
        if value is None:
            return SanitizedValue.invalid(f"counter '{counter_name}' not collected")

        number = as_finite_number(value)
        if number is None:
            return SanitizedValue.invalid(_non_number_reason(value))

        if is_sentinel(number, COUNT_SENTINELS):
            return SanitizedValue.invalid(f"counter unsupported / sentinel ({number:g})")

        lowered = counter_name.lower()
        if "queue" in lowered and not 0 <= number <= QUEUE_LENGTH_MAX:
            return SanitizedValue.invalid(f"absurd queue length: {number:g}")
        if "percent" in lowered and not 0 <= number <= 100:
            return SanitizedValue.invalid(f"percentage outside 0-100: {number:g}%")

        return SanitizedValue.valid(number, f"{number:.2f}")
