"""
Collection Diagnostics Base Types

Immutable data contracts produced by the collector-error aggregator and
consumed by the scorers, the gates and the UI layer.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Tuple


class CollectionStatus(str, Enum):
    """
    Outcome of the evidence collection.

    OK      – nothing missing, nothing invalidated, no collector error
    PARTIAL – some evidence missing or hidden; diagnosis still usable
    FAILED  – more than three logical errors; diagnosis is shaky
    """
    OK      = "OK"
    PARTIAL = "PARTIAL"
    FAILED  = "FAILED"


@dataclass(frozen=True)
class ScanError:
    """One entry of the scan document's errors[] array."""
    code: str = ""
    message: str = ""
    section: str = ""
    exception_type: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {
            "code": self.code,
            "message": self.message,
            "section": self.section,
            "exceptionType": self.exception_type,
        }


@dataclass(frozen=True)
class PenaltyEntry:
    """One normalized scoreV2.topPenalties entry."""
    source: str = ""
    penalty: int = 0
    message: str = ""
    type: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "penalty": self.penalty,
            "message": self.message,
            "type": self.type,
        }


@dataclass(frozen=True)
class CollectionDiagnosticsSnapshot:
    """
    Everything known about how well a scan was collected.

    Built once per ingested scan and never written back into the source
    document. Tuple fields keep the snapshot safe to share across threads.
    """
    # ── Extracted evidence ────────────────────────────────────────────────
    errors: Tuple[ScanError, ...] = ()
    missing_data: Tuple[str, ...] = ()                 # "key: reason" entries
    penalties: Tuple[PenaltyEntry, ...] = ()
    invalidated_metrics: Tuple[str, ...] = ()          # sanitization actions

    # ── Derived ───────────────────────────────────────────────────────────
    logical_error_count: int = 0
    status: CollectionStatus = CollectionStatus.OK
    status_message: str = ""

    # Degradation notes (malformed shapes encountered while extracting)
    notes: Tuple[str, ...] = field(default=(), compare=False)

    @property
    def is_collection_failed(self) -> bool:
        return self.logical_error_count > 0 or self.status == CollectionStatus.FAILED

    @property
    def is_partial(self) -> bool:
        return bool(self.missing_data) or bool(self.invalidated_metrics)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "errors": [e.to_dict() for e in self.errors],
            "missing_data": list(self.missing_data),
            "penalties": [p.to_dict() for p in self.penalties],
            "invalidated_metrics": list(self.invalidated_metrics),
            "logical_error_count": self.logical_error_count,
            "status": self.status.value,
            "status_message": self.status_message,
            "notes": list(self.notes),
        }
