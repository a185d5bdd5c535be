"""
Pipeline Configuration

Explicit configuration value handed to each pipeline component at
construction. Nothing here is process-wide: build one PipelineConfig per
host (or per scan session) and pass it down.

Environment variables (all optional, read by PipelineConfig.from_env):
    DIAGTRUST_VRAM_TOLERANCE          used <= total * tolerance (default 1.05)
    DIAGTRUST_RELIABILITY_FLOOR       lowest reportable DRS (default 40)
    DIAGTRUST_MISSING_PENALTY_CAP     max DRS deduction for missing data (default 20)
    DIAGTRUST_MIN_AUTOMATION_CONFIDENCE
    DIAGTRUST_MAX_AUTOMATION_ERRORS
    DIAGTRUST_AUDIT_LOGGING           "1"/"true" logs audit trails at INFO
"""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from dotenv import load_dotenv

from diagtrust.utils import ConfigurationError, get_logger

logger = get_logger(__name__)

ENV_PREFIX = "DIAGTRUST_"

# ── Defaults ────────────────────────────────────────────────────────────
# Sampling skew between the "total" and "used" VRAM counters.
DEFAULT_VRAM_TOLERANCE = 1.05
DEFAULT_RELIABILITY_FLOOR = 40
DEFAULT_MISSING_PENALTY_CAP = 20
DEFAULT_MIN_AUTOMATION_CONFIDENCE = 60
DEFAULT_MAX_AUTOMATION_ERRORS = 5

_TRUTHY = {"1", "true", "yes", "on"}


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(ENV_PREFIX + name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigurationError(
            f"{ENV_PREFIX + name} must be a number, got {raw!r}",
            config_field=name.lower(),
        ) from exc


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(ENV_PREFIX + name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(
            f"{ENV_PREFIX + name} must be an integer, got {raw!r}",
            config_field=name.lower(),
        ) from exc


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(ENV_PREFIX + name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


@dataclass(frozen=True)
class PipelineConfig:
    """Configuration for the confidence & data-integrity pipeline."""
    vram_tolerance: float = DEFAULT_VRAM_TOLERANCE
    reliability_floor: int = DEFAULT_RELIABILITY_FLOOR
    missing_penalty_cap: int = DEFAULT_MISSING_PENALTY_CAP
    min_automation_confidence: int = DEFAULT_MIN_AUTOMATION_CONFIDENCE
    max_automation_errors: int = DEFAULT_MAX_AUTOMATION_ERRORS

    # Log sanitization actions / DRS breakdown / triggered caps at INFO
    # instead of DEBUG.
    audit_logging: bool = False

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """Reject values that would break the bounded-score guarantees."""
        if self.vram_tolerance < 1.0:
            raise ConfigurationError(
                f"vram_tolerance must be >= 1.0, got {self.vram_tolerance}",
                config_field="vram_tolerance",
            )
        if not 0 <= self.reliability_floor <= 100:
            raise ConfigurationError(
                f"reliability_floor must lie in [0, 100], got {self.reliability_floor}",
                config_field="reliability_floor",
            )
        if self.missing_penalty_cap < 0:
            raise ConfigurationError(
                f"missing_penalty_cap must be non-negative, got {self.missing_penalty_cap}",
                config_field="missing_penalty_cap",
            )
        if not 0 <= self.min_automation_confidence <= 100:
            raise ConfigurationError(
                "min_automation_confidence must lie in [0, 100], "
                f"got {self.min_automation_confidence}",
                config_field="min_automation_confidence",
            )
        if self.max_automation_errors < 0:
            raise ConfigurationError(
                f"max_automation_errors must be non-negative, got {self.max_automation_errors}",
                config_field="max_automation_errors",
            )

    @classmethod
    def from_env(cls, env_file: Optional[Union[str, Path]] = None) -> "PipelineConfig":
        """
        Build a configuration from DIAGTRUST_* environment variables.

        Args:
            env_file: Optional .env file loaded first (existing environment
                      variables win over the file).

        Returns:
            Validated PipelineConfig
        """
        if env_file is not None:
            load_dotenv(env_file)
        else:
            load_dotenv()

        config = cls(
            vram_tolerance=_env_float("VRAM_TOLERANCE", DEFAULT_VRAM_TOLERANCE),
            reliability_floor=_env_int("RELIABILITY_FLOOR", DEFAULT_RELIABILITY_FLOOR),
            missing_penalty_cap=_env_int("MISSING_PENALTY_CAP", DEFAULT_MISSING_PENALTY_CAP),
            min_automation_confidence=_env_int(
                "MIN_AUTOMATION_CONFIDENCE", DEFAULT_MIN_AUTOMATION_CONFIDENCE
            ),
            max_automation_errors=_env_int(
                "MAX_AUTOMATION_ERRORS", DEFAULT_MAX_AUTOMATION_ERRORS
            ),
            audit_logging=_env_bool("AUDIT_LOGGING", False),
        )
        logger.debug(f"PipelineConfig loaded from environment: {config}")
        return config
