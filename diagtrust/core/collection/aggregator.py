"""
Collector Error Aggregator

Reads a (possibly corrupt, version-dependent) scan document and folds it,
together with the sensors hidden by sanitization, into one immutable
CollectionDiagnosticsSnapshot.

Contract: a malformed document is diagnostic signal, not a crash. Every
extraction step degrades to an empty list and leaves a note; the resulting
status tells the caller how much was lost.

Usage:
    from diagtrust.core.collection import CollectorErrorAggregator

    aggregator = CollectorErrorAggregator()
    snapshot = aggregator.aggregate(document, invalidated_metrics=actions)
    print(snapshot.status, snapshot.logical_error_count)
"""
from __future__ import annotations

import json
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from diagtrust.utils import get_logger

from . import shapes
from .base import CollectionDiagnosticsSnapshot, CollectionStatus, PenaltyEntry, ScanError

logger = get_logger(__name__)

# More logical errors than this and the collection is considered failed
FAILED_ERROR_THRESHOLD = 3


def parse_document(document: Any) -> Any:
    """
    Accept an already decoded document or JSON text/bytes.

    Undecodable text comes back as None, which every extractor treats as a
    non-object root.
    """
    if isinstance(document, (bytes, bytearray)):
        try:
            document = document.decode("utf-8-sig")
        except UnicodeDecodeError:
            logger.warning("CollectorErrorAggregator: scan document is not valid UTF-8")
            return None
    if isinstance(document, str):
        try:
            return json.loads(document)
        except json.JSONDecodeError as exc:
            logger.warning(f"CollectorErrorAggregator: scan document is not valid JSON ({exc.msg})")
            return None
    return document


class CollectorErrorAggregator:
    """
    Extracts errors / missing data / penalties from a variant-shaped scan
    document and computes the logical error count and collection status.

    Stateless; the same instance may serve any number of scans.
    """

    def aggregate(
        self,
        document: Any,
        invalidated_metrics: Optional[Iterable[str]] = None,
    ) -> CollectionDiagnosticsSnapshot:
        """
        Build the diagnostics snapshot for one scan.

        Args:
            document:            Scan document (mapping, or JSON text/bytes)
            invalidated_metrics: Actions returned by SensorSanitizationPass
                                 (a single action string is accepted)

        Returns:
            Immutable CollectionDiagnosticsSnapshot
        """
        root = parse_document(document)
        notes: List[str] = []
        if not isinstance(root, Mapping):
            _note(notes, f"document root is {shapes.json_kind(root)}, expected object")

        errors = self.extract_errors(root, notes)
        missing = self.extract_missing_data(root, notes)
        penalties = self.extract_penalties(root, notes)
        if isinstance(invalidated_metrics, str):
            # A lone action string is one metric, not one per character
            invalidated_metrics = (invalidated_metrics,)
        invalidated = tuple(str(m) for m in (invalidated_metrics or ()))

        logical_error_count = len(errors) + len(invalidated)
        status = determine_status(logical_error_count, missing, invalidated)
        snapshot = CollectionDiagnosticsSnapshot(
            errors=tuple(errors),
            missing_data=tuple(missing),
            penalties=tuple(penalties),
            invalidated_metrics=invalidated,
            logical_error_count=logical_error_count,
            status=status,
            status_message=status_message(status, logical_error_count, missing, invalidated),
            notes=tuple(notes),
        )

        logger.info(
            f"CollectorDiagnostics: errors={len(errors)}, missing={len(missing)}, "
            f"invalidated={len(invalidated)}, logical_errors={logical_error_count}, "
            f"status={status.value}"
        )
        return snapshot

    # ------------------------------------------------------------------
    # Extraction steps
    # ------------------------------------------------------------------

    def extract_errors(self, root: Any, notes: Optional[List[str]] = None) -> List[ScanError]:
        """errors[] -> ScanError list; non-object elements are skipped."""
        return self._extract(root, ("errors",), shapes.ERRORS_SHAPES, "errors", notes)

    def extract_missing_data(self, root: Any, notes: Optional[List[str]] = None) -> List[str]:
        """missingData (array of strings / array of objects / object) -> "key: reason" list."""
        return self._extract(root, ("missingData",), shapes.MISSING_DATA_SHAPES, "missingData", notes)

    def extract_penalties(self, root: Any, notes: Optional[List[str]] = None) -> List[PenaltyEntry]:
        """scoreV2.topPenalties (array / object / {}) -> PenaltyEntry list."""
        return self._extract(
            root, ("scoreV2", "topPenalties"), shapes.TOP_PENALTIES_SHAPES,
            "scoreV2.topPenalties", notes,
        )

    def _extract(self, root, path, table, label, notes) -> list:
        raw = _lookup(root, path)
        if raw is _ABSENT:
            logger.debug(f"CollectorDiagnostics: {label} absent")
            return []

        try:
            normalized = shapes.normalize(raw, table)
        except (TypeError, ValueError, AttributeError) as exc:
            _note(notes, f"{label}: could not normalize ({exc})")
            return []

        if normalized is None:
            _note(notes, f"{label}: unexpected {shapes.json_kind(raw)} shape")
            return []

        if not normalized and shapes.json_kind(raw) == shapes.OBJECT:
            logger.debug(f"CollectorDiagnostics: {label} is an empty object, treated as empty list")
        return normalized


# ── Status ──────────────────────────────────────────────────────────────────

def determine_status(
    logical_error_count: int,
    missing_data: Sequence[str],
    invalidated_metrics: Sequence[str],
) -> CollectionStatus:
    if logical_error_count > FAILED_ERROR_THRESHOLD:
        return CollectionStatus.FAILED
    if logical_error_count > 0 or missing_data or invalidated_metrics:
        return CollectionStatus.PARTIAL
    return CollectionStatus.OK


def status_message(
    status: CollectionStatus,
    logical_error_count: int,
    missing_data: Sequence[str],
    invalidated_metrics: Sequence[str],
) -> str:
    if status == CollectionStatus.FAILED:
        return f"Collection failed ({logical_error_count} errors)"
    if status == CollectionStatus.PARTIAL:
        return (
            f"Partial collection ({len(missing_data)} missing data, "
            f"{len(invalidated_metrics)} invalid metrics)"
        )
    return "Collection complete"


# ── Helpers ─────────────────────────────────────────────────────────────────

_ABSENT = object()


def _lookup(root: Any, path: tuple) -> Any:
    """Walk nested objects; any non-object hop or missing key is _ABSENT."""
    node = root
    for key in path:
        if not isinstance(node, Mapping):
            logger.debug(
                f"CollectorDiagnostics: parent of '{key}' is {shapes.json_kind(node)}, not an object"
            )
            return _ABSENT
        if key not in node:
            return _ABSENT
        node = node[key]
    return node


def _note(notes: Optional[List[str]], message: str) -> None:
    logger.warning(f"CollectorDiagnostics: {message}")
    if notes is not None:
        notes.append(message)
