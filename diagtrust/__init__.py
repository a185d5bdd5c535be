"""
diagtrust - Diagnostic Confidence & Data-Integrity Pipeline

Decides how far a PC diagnostic scan can be trusted: hides impossible sensor
readings, folds collector failures into one diagnostics snapshot, scores the
reliability of the collection, caps the diagnostic confidence and gates
automated remediation.
"""
from .config import PipelineConfig
from .core.pipeline import DiagnosticTrustPipeline, TrustAssessment, EvidenceFlags

__version__ = "1.0.0"

__all__ = [
    "PipelineConfig",
    "DiagnosticTrustPipeline",
    "TrustAssessment",
    "EvidenceFlags",
]
