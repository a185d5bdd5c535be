"""
Collection Diagnostics Module

Turns a variant-shaped scan document plus the sanitization audit trail into
an immutable CollectionDiagnosticsSnapshot.
"""
from .base import CollectionStatus, ScanError, PenaltyEntry, CollectionDiagnosticsSnapshot
from .aggregator import CollectorErrorAggregator, parse_document

__all__ = [
    "CollectionStatus",
    "ScanError",
    "PenaltyEntry",
    "CollectionDiagnosticsSnapshot",
    "CollectorErrorAggregator",
    "parse_document",
]
