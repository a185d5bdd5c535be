"""
Custom Exception Hierarchy

Malformed scan documents and corrupt sensor readings are NOT exceptional in
this library: they degrade to empty collections or Invalid verdicts. The types
below cover programming/configuration mistakes and the last-resort failure
wrapped at the pipeline boundary.
"""
from typing import Optional, Dict, Any


class DiagTrustError(Exception):
    """Base exception for all diagtrust errors."""

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for audit output."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details
        }


class ConfigurationError(DiagTrustError):
    """Invalid pipeline configuration value."""

    def __init__(
        self,
        message: str,
        config_field: str = "unknown",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="CONFIG_ERROR",
            details={"config_field": config_field, **(details or {})}
        )
        self.config_field = config_field


class SanitizationError(DiagTrustError):
    """Impossible plausibility rule definition (not an invalid reading)."""

    def __init__(
        self,
        message: str,
        metric: str = "unknown",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="SANITIZATION_ERROR",
            details={"metric": metric, **(details or {})}
        )
        self.metric = metric


class PipelineError(DiagTrustError):
    """Unexpected failure caught at the outer pipeline boundary."""

    def __init__(
        self,
        message: str,
        stage: str = "unknown",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="PIPELINE_ERROR",
            details={"stage": stage, **(details or {})}
        )
        self.stage = stage
