"""
Utilities Package - Logging and Exception Handling
"""
from .logging import get_logger, setup_logging
from .exceptions import (
    DiagTrustError,
    ConfigurationError,
    SanitizationError,
    PipelineError,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "DiagTrustError",
    "ConfigurationError",
    "SanitizationError",
    "PipelineError",
]
