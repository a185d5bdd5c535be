"""
Scoring Module

Data Reliability Score, confidence gating and the automation safety gate.
Every output is bounded: confidence in [0, 100], DRS in [floor, 100].
"""
from .reliability import (
    ReliabilityScorer,
    ReliabilityBreakdown,
    MissingDataCategory,
    MISSING_DATA_CATEGORIES,
    classify_missing_entry,
)
from .confidence_gate import ConfidenceGate, CappedConfidence, ConfidenceCapRule, CONFIDENCE_CAP_RULES
from .safety_gate import AutomationSafetyGate, SafetyVerdict

__all__ = [
    "ReliabilityScorer",
    "ReliabilityBreakdown",
    "MissingDataCategory",
    "MISSING_DATA_CATEGORIES",
    "classify_missing_entry",
    "ConfidenceGate",
    "CappedConfidence",
    "ConfidenceCapRule",
    "CONFIDENCE_CAP_RULES",
    "AutomationSafetyGate",
    "SafetyVerdict",
]
