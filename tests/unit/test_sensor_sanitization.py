"""
Unit Tests for the Sensor Sanitization Pass

Tests for in-place invalidation, the action audit trail and idempotence.
"""
import logging

import pytest

from diagtrust.config import PipelineConfig
from diagtrust.core.models import DiskSensor, Metric, SensorSnapshot
from diagtrust.core.validation import SensorSanitizationPass


@pytest.fixture
def sanitization_pass() -> SensorSanitizationPass:
    """Pass with default configuration."""
    return SensorSanitizationPass()


class TestSensorSanitizationPass:
    """Tests for SensorSanitizationPass.run."""

    def test_healthy_snapshot_untouched(self, sanitization_pass, healthy_snapshot):
        actions = sanitization_pass.run(healthy_snapshot)
        assert actions == []
        assert healthy_snapshot.availability_summary() == (6, 6)

    def test_corrupt_snapshot(self, sanitization_pass, corrupt_snapshot):
        actions = sanitization_pass.run(corrupt_snapshot)

        assert len(actions) == 4
        assert actions[0].startswith("CPU Temp: sentinel value")
        assert actions[1].startswith("GPU Temp: out of range")
        assert actions[2].startswith("VRAM Used: VRAM inconsistent")
        assert actions[3].startswith("SMART Temp (WDC WD10EZEX): SMART corrupt")

        assert not corrupt_snapshot.cpu_temp.available
        assert corrupt_snapshot.cpu_temp.reason.startswith("sentinel value")
        assert not corrupt_snapshot.gpu_temp.available
        assert corrupt_snapshot.vram_total.available
        assert not corrupt_snapshot.vram_used.available
        assert corrupt_snapshot.disks[0].temperature.available
        assert not corrupt_snapshot.disks[0].smart_temperature.available

    def test_idempotent(self, sanitization_pass, corrupt_snapshot):
        """A second run finds nothing left to hide."""
        first = sanitization_pass.run(corrupt_snapshot)
        before = corrupt_snapshot.to_dict()

        second = sanitization_pass.run(corrupt_snapshot)

        assert first
        assert second == []
        assert corrupt_snapshot.to_dict() == before

    def test_unavailable_metrics_not_reexamined(self, sanitization_pass):
        snapshot = SensorSnapshot(cpu_temp=Metric(value=0.0, available=False, reason="no sensor"))
        assert sanitization_pass.run(snapshot) == []
        assert snapshot.cpu_temp.reason == "no sensor"

    def test_each_disk_independent(self, sanitization_pass):
        snapshot = SensorSnapshot(disks=[
            DiskSensor(name="C", temperature=Metric.reading(-1.0)),
            DiskSensor(name="D", temperature=Metric.reading(35.0)),
        ])
        actions = sanitization_pass.run(snapshot)
        assert actions == ["Disk Temp (C): sentinel value (-1)"]
        assert snapshot.disks[1].temperature.available

    def test_invalid_total_and_used(self, sanitization_pass):
        """Both VRAM metrics flip when both are broken."""
        snapshot = SensorSnapshot(
            vram_total=Metric.reading(0.0),
            vram_used=Metric.reading(-10.0),
        )
        actions = sanitization_pass.run(snapshot)
        assert len(actions) == 2
        assert actions[0].startswith("VRAM Total:")
        assert actions[1].startswith("VRAM Used:")

    def test_used_not_bounded_by_invalid_total(self, sanitization_pass):
        snapshot = SensorSnapshot(
            vram_total=Metric.reading(-1.0),
            vram_used=Metric.reading(3000.0),
        )
        actions = sanitization_pass.run(snapshot)
        assert actions == ["VRAM Total: VRAM total invalid: -1 MB"]
        assert snapshot.vram_used.available

    def test_none_snapshot(self, sanitization_pass):
        assert sanitization_pass.run(None) == []

    def test_tolerance_from_config(self):
        strict = SensorSanitizationPass(config=PipelineConfig(vram_tolerance=1.0))
        snapshot = SensorSnapshot(
            vram_total=Metric.reading(4096.0),
            vram_used=Metric.reading(4200.0),
        )
        assert len(strict.run(snapshot)) == 1

    def test_audit_logging_emits_one_info_line_per_action(self, corrupt_snapshot, caplog):
        caplog.set_level(logging.DEBUG, logger="diagtrust")
        audited = SensorSanitizationPass(config=PipelineConfig(audit_logging=True))

        actions = audited.run(corrupt_snapshot)

        sanitize = [r for r in caplog.records if r.getMessage().startswith("[SANITIZE] ")]
        assert [r.getMessage() for r in sanitize] == [f"[SANITIZE] {a}" for a in actions]
        assert len(sanitize) == 4
        assert all(r.levelno == logging.INFO for r in sanitize)

    def test_default_audit_lines_stay_at_debug(self, sanitization_pass, corrupt_snapshot, caplog):
        caplog.set_level(logging.DEBUG, logger="diagtrust")
        sanitization_pass.run(corrupt_snapshot)

        sanitize = [r for r in caplog.records if r.getMessage().startswith("[SANITIZE] ")]
        assert len(sanitize) == 4
        assert all(r.levelno == logging.DEBUG for r in sanitize)

    def test_healthy_snapshot_logs_nothing(self, healthy_snapshot, caplog):
        caplog.set_level(logging.DEBUG, logger="diagtrust")
        SensorSanitizationPass(config=PipelineConfig(audit_logging=True)).run(healthy_snapshot)
        assert not [r for r in caplog.records if r.getMessage().startswith("[SANITIZE] ")]


class TestSensorSnapshotFromDict:
    """Tests for reading the collector's sensor JSON layout."""

    def test_collector_layout(self):
        snapshot = SensorSnapshot.from_dict({
            "cpu": {"cpuTempC": {"value": 48.0, "available": True, "source": "CPU Package"}},
            "gpu": {
                "gpuTempC": {"value": 0.0, "available": True},
                "vramTotalMB": {"value": 8192, "available": True},
                "vramUsedMB": {"available": False, "reason": "counter missing"},
            },
            "disks": [{"name": {"value": "NVMe0"}, "tempC": {"value": 33, "available": True}}, "junk"],
        })
        assert snapshot.cpu_temp.available
        assert snapshot.cpu_temp.source == "CPU Package"
        assert snapshot.vram_used.reason == "counter missing"
        assert len(snapshot.disks) == 1
        assert snapshot.disks[0].name == "NVMe0"
        assert snapshot.disks[0].smart_temperature is None

    def test_garbage_payload(self):
        snapshot = SensorSnapshot.from_dict("not a payload")
        assert snapshot.availability_summary() == (0, 4)
        assert snapshot.cpu_temp.reason == "metric absent from sensor payload"

    @pytest.mark.parametrize("flag", ["false", "true", 1, "yes", None])
    def test_available_requires_json_boolean(self, flag):
        metric = Metric.from_dict({"value": 40.0, "available": flag})
        assert metric.available is False

    def test_string_false_stays_unavailable(self):
        snapshot = SensorSnapshot.from_dict({"cpu": {"cpuTempC": {"value": 40.0, "available": "false"}}})
        assert not snapshot.cpu_temp.available
        assert SensorSanitizationPass().run(snapshot) == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
