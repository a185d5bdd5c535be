"""
Confidence Gating

Caps an externally supplied base confidence (0–100) using what is known
about the collection. Rules are independent and cumulative: every triggered
rule applies min(running, cap), so the result is the lowest value consistent
with all of them.

| rule                                    | cap |
|-----------------------------------------|-----|
| logical errors > 5                      | 70  |
| 0 < logical errors <= 5                 | 85  |
| critical missing data (CPU/GPU/Memory/Disk) | 75 |
| invalidated metrics > 2                 | 65  |
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

import numpy as np

from diagtrust.core.collection import CollectionDiagnosticsSnapshot
from diagtrust.utils import get_logger

logger = get_logger(__name__)

CRITICAL_MISSING_PATTERN = re.compile(r"cpu|gpu|memory|disk", re.IGNORECASE)


def count_critical_missing(snapshot: CollectionDiagnosticsSnapshot) -> int:
    return sum(1 for entry in snapshot.missing_data if CRITICAL_MISSING_PATTERN.search(entry))


@dataclass(frozen=True)
class ConfidenceCapRule:
    """One independent cap: when `applies(snapshot)` is true, confidence <= cap."""
    name: str
    cap: int
    applies: Callable[[CollectionDiagnosticsSnapshot], bool]
    describe: Callable[[CollectionDiagnosticsSnapshot], str]


CONFIDENCE_CAP_RULES: Tuple[ConfidenceCapRule, ...] = (
    ConfidenceCapRule(
        name="many_collector_errors",
        cap=70,
        applies=lambda s: s.logical_error_count > 5,
        describe=lambda s: f"{s.logical_error_count} collector errors (>5)",
    ),
    ConfidenceCapRule(
        name="some_collector_errors",
        cap=85,
        applies=lambda s: 0 < s.logical_error_count <= 5,
        describe=lambda s: f"{s.logical_error_count} collector errors (1-5)",
    ),
    ConfidenceCapRule(
        name="critical_missing_data",
        cap=75,
        applies=lambda s: count_critical_missing(s) > 0,
        describe=lambda s: f"{count_critical_missing(s)} critical missing data",
    ),
    ConfidenceCapRule(
        name="invalidated_metrics",
        cap=65,
        applies=lambda s: len(s.invalidated_metrics) > 2,
        describe=lambda s: f"{len(s.invalidated_metrics)} invalidated metrics",
    ),
)


@dataclass(frozen=True)
class CappedConfidence:
    """Gated confidence plus the caps that produced it."""
    base: int
    value: int
    triggered: Tuple[Tuple[str, int], ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "base": self.base,
            "value": self.value,
            "triggered": [{"rule": name, "cap": cap} for name, cap in self.triggered],
        }


def clamp_confidence(value: Any) -> int:
    """Bound any numeric confidence to [0, 100]; non-numbers count as 0."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if np.isnan(number):
        return 0
    return int(np.clip(round(number) if np.isfinite(number) else number, 0, 100))


class ConfidenceGate:
    """Applies every triggered confidence cap to a base confidence."""

    def __init__(self, rules: Optional[Tuple[ConfidenceCapRule, ...]] = None):
        self.rules = rules if rules is not None else CONFIDENCE_CAP_RULES

    def apply(self, base_confidence: Any, snapshot: CollectionDiagnosticsSnapshot) -> int:
        """Capped confidence in [0, 100]."""
        return self.apply_detailed(base_confidence, snapshot).value

    def apply_detailed(
        self,
        base_confidence: Any,
        snapshot: CollectionDiagnosticsSnapshot,
    ) -> CappedConfidence:
        base = clamp_confidence(base_confidence)
        confidence = base
        triggered: List[Tuple[str, int]] = []

        for rule in self.rules:
            if not rule.applies(snapshot):
                continue
            confidence = min(confidence, rule.cap)
            triggered.append((rule.name, rule.cap))
            logger.info(f"[ConfidenceGating] Capped to {rule.cap} due to {rule.describe(snapshot)}")

        return CappedConfidence(base=base, value=confidence, triggered=tuple(triggered))
