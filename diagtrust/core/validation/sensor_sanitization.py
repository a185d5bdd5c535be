"""
Sensor Sanitization Pass

Applies MetricSanitizer across a hardware snapshot IN PLACE: every metric that
is still available and fails its plausibility rule is flipped to unavailable
with a reason. The returned action list is the audit trail of what was hidden.

Metrics already flagged unavailable are never re-examined, so running the
pass twice leaves the snapshot untouched and returns no actions.
"""
import logging
from typing import List, Optional

from diagtrust.config import PipelineConfig
from diagtrust.core.models import Metric, SensorSnapshot
from diagtrust.utils import get_logger

from .metric_sanitizer import MetricSanitizer, SanitizedValue

logger = get_logger(__name__)


class SensorSanitizationPass:
    """Invalidates physically impossible sensor readings on a snapshot."""

    def __init__(
        self,
        sanitizer: Optional[MetricSanitizer] = None,
        config: Optional[PipelineConfig] = None,
    ):
        self.config = config or PipelineConfig()
        self.sanitizer = sanitizer or MetricSanitizer(vram_tolerance=self.config.vram_tolerance)

    def run(self, snapshot: Optional[SensorSnapshot]) -> List[str]:
        """
        Sanitize every available metric of the snapshot.

        Args:
            snapshot: Snapshot owned by the calling scan session (mutated)

        Returns:
            Actions taken, one "<metric>: <reason>" entry per flipped metric
        """
        actions: List[str] = []
        if snapshot is None:
            return actions

        self._apply(snapshot.cpu_temp, "CPU Temp",
                    self.sanitizer.validate_cpu_temperature, actions)
        self._apply(snapshot.gpu_temp, "GPU Temp",
                    self.sanitizer.validate_gpu_temperature, actions)
        self._sanitize_vram(snapshot, actions)

        # Each disk stands on its own: one bad drive never hides another.
        for disk in snapshot.disks:
            self._apply(disk.temperature, f"Disk Temp ({disk.name})",
                        self.sanitizer.validate_disk_temperature, actions)
            if disk.smart_temperature is not None:
                self._apply(disk.smart_temperature, f"SMART Temp ({disk.name})",
                            self.sanitizer.validate_smart_temperature, actions)

        if actions:
            level = logging.INFO if self.config.audit_logging else logging.DEBUG
            for action in actions:
                logger.log(level, f"[SANITIZE] {action}")
            logger.warning(f"SensorSanitizationPass: invalidated {len(actions)} metric(s)")

        return actions

    def _apply(self, metric: Metric, label: str, rule, actions: List[str]) -> None:
        if not metric.available:
            return
        verdict: SanitizedValue = rule(metric.value)
        if not verdict.is_valid:
            self._invalidate(metric, label, verdict.invalid_reason, actions)

    def _sanitize_vram(self, snapshot: SensorSnapshot, actions: List[str]) -> None:
        total, used = snapshot.vram_total, snapshot.vram_used

        if total.available:
            reason = self.sanitizer.vram_total_issue(total.value)
            if reason:
                self._invalidate(total, "VRAM Total", reason, actions)

        if used.available:
            # The upper bound needs a trustworthy total
            reference = total.value if total.available else None
            reason = self.sanitizer.vram_used_issue(used.value, reference)
            if reason:
                self._invalidate(used, "VRAM Used", reason, actions)

    @staticmethod
    def _invalidate(metric: Metric, label: str, reason: str, actions: List[str]) -> None:
        metric.mark_unavailable(reason)
        actions.append(f"{label}: {reason}")
