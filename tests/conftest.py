"""
Pytest Configuration and Fixtures

Shared fixtures for diagnostic trust pipeline tests.
"""
import pytest
from pathlib import Path
import sys
from typing import Any, Dict

# Add package root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from diagtrust.config import PipelineConfig
from diagtrust.core.models import DiskSensor, Metric, SensorSnapshot


@pytest.fixture
def config() -> PipelineConfig:
    """Default pipeline configuration."""
    return PipelineConfig()


@pytest.fixture
def healthy_snapshot() -> SensorSnapshot:
    """Sensor snapshot where every reading is plausible."""
    return SensorSnapshot(
        cpu_temp=Metric.reading(45.0, source="CPU Package"),
        gpu_temp=Metric.reading(52.0, source="GPU Core"),
        vram_total=Metric.reading(8192.0),
        vram_used=Metric.reading(2048.0),
        disks=[
            DiskSensor(
                name="Samsung SSD 980",
                temperature=Metric.reading(38.0),
                smart_temperature=Metric.reading(39.0),
            ),
        ],
    )


@pytest.fixture
def corrupt_snapshot() -> SensorSnapshot:
    """Sensor snapshot carrying the classic collector corruptions."""
    return SensorSnapshot(
        cpu_temp=Metric.reading(0.0),             # sentinel
        gpu_temp=Metric.reading(917541.0),        # out of range
        vram_total=Metric.reading(4096.0),
        vram_used=Metric.reading(9000.0),         # used > total * 1.05
        disks=[
            DiskSensor(
                name="WDC WD10EZEX",
                temperature=Metric.reading(41.0),
                smart_temperature=Metric.reading(917541.0),  # SMART corrupt
            ),
        ],
    )


@pytest.fixture
def clean_document() -> Dict[str, Any]:
    """Scan document with no errors, no missing data and no penalties."""
    return {
        "errors": [],
        "missingData": [],
        "scoreV2": {"score": 94, "topPenalties": []},
    }


@pytest.fixture
def degraded_document() -> Dict[str, Any]:
    """Scan document from an older collector with object-shaped sections."""
    return {
        "errors": [
            {"code": "WMI_TIMEOUT", "message": "Win32_Processor query timed out",
             "section": "Hardware", "exceptionType": "TimeoutException"},
            {"code": "EVT_ACCESS", "message": "EventLog access denied", "section": "Events"},
        ],
        "missingData": {"DiskTemperature": True, "ProcessList": "disabled"},
        "scoreV2": {"topPenalties": {"Startup": 4, "Network": {"penalty": "2", "msg": "slow DNS"}}},
    }
