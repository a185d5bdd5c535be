"""
Sensor Data Model

Materialized hardware-sensor readings as handed over by the sensor collector.
The snapshot is owned by a single scan session; the sanitization pass is the
only component allowed to mutate it.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

DEFAULT_UNAVAILABLE_REASON = "not collected"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Metric:
    """
    One collected reading.

    Attributes:
        value:     Raw value. Meaningless to every consumer when available=False.
        available: Whether the reading may be used.
        reason:    Why the reading is unavailable (always set when unavailable).
        source:    Sensor/counter the value came from (e.g. "CPU Package").
        timestamp: When the value was sampled.
    """
    value: Any = None
    available: bool = False
    reason: Optional[str] = None
    source: Optional[str] = None
    timestamp: datetime = field(default_factory=_utcnow)

    def __post_init__(self):
        if not self.available and not self.reason:
            self.reason = DEFAULT_UNAVAILABLE_REASON

    def mark_unavailable(self, reason: str) -> None:
        """Flip the metric to unavailable, recording why."""
        self.available = False
        self.reason = reason or DEFAULT_UNAVAILABLE_REASON

    @classmethod
    def reading(cls, value: Any, source: Optional[str] = None) -> "Metric":
        """Shortcut for an available reading."""
        return cls(value=value, available=True, source=source)

    @classmethod
    def from_dict(cls, data: Any) -> "Metric":
        """
        Read the collector's {value, available, reason} shape.

        Anything that is not a mapping yields an unavailable metric. Only a real
        boolean true marks the reading available; "false", 1 and the like do not.
        """
        if not isinstance(data, Mapping):
            return cls(available=False, reason="metric absent from sensor payload")
        return cls(
            value=data.get("value"),
            available=data.get("available") is True,
            reason=data.get("reason") if isinstance(data.get("reason"), str) else None,
            source=data.get("source") if isinstance(data.get("source"), str) else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "value": self.value,
            "available": self.available,
            "reason": self.reason,
            "source": self.source,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class DiskSensor:
    """Per-disk thermal readings."""
    name: str
    temperature: Metric = field(default_factory=Metric)
    smart_temperature: Optional[Metric] = None

    def metrics(self) -> Iterator[Metric]:
        yield self.temperature
        if self.smart_temperature is not None:
            yield self.smart_temperature

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "name": self.name,
            "temperature": self.temperature.to_dict(),
        }
        if self.smart_temperature is not None:
            data["smart_temperature"] = self.smart_temperature.to_dict()
        return data


@dataclass
class SensorSnapshot:
    """Hardware-metric snapshot for one scan."""
    cpu_temp: Metric = field(default_factory=Metric)
    gpu_temp: Metric = field(default_factory=Metric)
    vram_total: Metric = field(default_factory=Metric)
    vram_used: Metric = field(default_factory=Metric)
    disks: List[DiskSensor] = field(default_factory=list)
    collected_at: datetime = field(default_factory=_utcnow)

    def all_metrics(self) -> Iterator[Metric]:
        yield self.cpu_temp
        yield self.gpu_temp
        yield self.vram_total
        yield self.vram_used
        for disk in self.disks:
            yield from disk.metrics()

    def availability_summary(self) -> Tuple[int, int]:
        """Return (available, total) over every metric in the snapshot."""
        total = 0
        available = 0
        for metric in self.all_metrics():
            total += 1
            if metric.available:
                available += 1
        return available, total

    @classmethod
    def from_dict(cls, data: Any) -> "SensorSnapshot":
        """
        Build a snapshot from the sensor collector's JSON layout:

            {"cpu": {"cpuTempC": {...}},
             "gpu": {"gpuTempC": {...}, "vramTotalMB": {...}, "vramUsedMB": {...}},
             "disks": [{"name": {...}, "tempC": {...}, "smartTempC": {...}}]}

        Missing or wrongly typed sections produce unavailable metrics.
        """
        if not isinstance(data, Mapping):
            data = {}
        cpu = data.get("cpu") if isinstance(data.get("cpu"), Mapping) else {}
        gpu = data.get("gpu") if isinstance(data.get("gpu"), Mapping) else {}
        raw_disks = data.get("disks") if isinstance(data.get("disks"), list) else []

        disks = []
        for index, raw in enumerate(raw_disks):
            if not isinstance(raw, Mapping):
                continue
            disks.append(DiskSensor(
                name=_disk_name(raw.get("name"), index),
                temperature=Metric.from_dict(raw.get("tempC")),
                smart_temperature=(
                    Metric.from_dict(raw["smartTempC"]) if "smartTempC" in raw else None
                ),
            ))

        return cls(
            cpu_temp=Metric.from_dict(cpu.get("cpuTempC")),
            gpu_temp=Metric.from_dict(gpu.get("gpuTempC")),
            vram_total=Metric.from_dict(gpu.get("vramTotalMB")),
            vram_used=Metric.from_dict(gpu.get("vramUsedMB")),
            disks=disks,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cpu_temp": self.cpu_temp.to_dict(),
            "gpu_temp": self.gpu_temp.to_dict(),
            "vram_total": self.vram_total.to_dict(),
            "vram_used": self.vram_used.to_dict(),
            "disks": [d.to_dict() for d in self.disks],
            "collected_at": self.collected_at.isoformat(),
        }


def _disk_name(raw: Any, index: int) -> str:
    # Collector wraps the name in a metric; older payloads send a bare string
    if isinstance(raw, Mapping):
        raw = raw.get("value")
    if isinstance(raw, str) and raw:
        return raw
    return f"disk{index}"
