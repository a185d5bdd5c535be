"""
Data Reliability Score (DRS)

Measures how far the COLLECTION PROCESS can be trusted, not how healthy the
machine is. Partial collection means reduced trust, not a failing PC; the
floor keeps a badly collected scan from ever reading like a dying machine.

Scoring, starting from 100:
  1. Collector errors follow a progressive curve:
       0 → 100, 1 → 95, 2 → 90, 3 → 84, 4 → 78, 5 → 72, then −4 per error
  2. Each missing-data entry is weighted by the first matching category;
     the summed deduction is capped at 20
  3. No security data at all: −10
  4. No SMART / storage-health data at all: −3
  5. Clamp to [floor, 100] (floor = 40)
"""
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

import numpy as np

from diagtrust.config import PipelineConfig
from diagtrust.utils import get_logger

logger = get_logger(__name__)

BASE_SCORE = 100

# index = logical error count, value = score
ERROR_CURVE: Tuple[int, ...] = (100, 95, 90, 84, 78, 72)
DEGRADATION_PER_EXTRA_ERROR = 4

NO_SECURITY_DATA_PENALTY = 10
NO_SMART_DATA_PENALTY = 3
UNMATCHED_MISSING_PENALTY = 1


@dataclass(frozen=True)
class MissingDataCategory:
    """Business-criticality weight for one family of missing evidence."""
    name: str
    pattern: str         # case-insensitive regex
    penalty: int

    def matches(self, entry: str) -> bool:
        return re.search(self.pattern, entry, re.IGNORECASE) is not None


# Short acronyms: a whole token in any case ("AV: off", "ram modules")
# or, case-sensitively, the capitalized prefix of a CamelCase key ("AVStatus",
# "RAMUsage", "AppList"). Substrings such as "unavailable" or "Program" never match.
_AV = r"(?<![a-z])av(?![a-z])|(?-i:(?<![A-Z])AV(?![a-z]|[A-Z]{2}))"
_RAM = r"(?<![a-z])ram(?![a-z])|(?-i:(?<![A-Z])RAM(?![a-z]|[A-Z]{2}))"
_APPS = r"(?<![a-z])apps?(?![a-z])|(?-i:(?<![A-Z])Apps?(?![a-z]))"

# Order matters: first match wins.
MISSING_DATA_CATEGORIES: Tuple[MissingDataCategory, ...] = (
    MissingDataCategory("Security",   rf"security|defender|firewall|malware|antivirus|{_AV}", 8),
    MissingDataCategory("SMART",      r"smart|predictfailure|reallocatedsectors", 4),
    MissingDataCategory("Storage",    r"disk|storage|volume", 4),
    MissingDataCategory("Hardware",   rf"memory|{_RAM}|gpu|vram", 3),
    MissingDataCategory("CPU_Temp",   r"cpu|temp", 2),
    MissingDataCategory("Monitoring", r"network|eventlog|reliability|bsod", 2),
    MissingDataCategory("Processes",  rf"process|startup|{_APPS}", 1),
)


def classify_missing_entry(entry: str) -> Tuple[str, int]:
    """Return (category, penalty) for one missing-data entry."""
    for category in MISSING_DATA_CATEGORIES:
        if category.matches(entry):
            return category.name, category.penalty
    return "Unknown", UNMATCHED_MISSING_PENALTY


def error_curve_score(logical_error_count: int, floor: int) -> int:
    """Score after collector errors alone."""
    if logical_error_count <= 0:
        return BASE_SCORE
    if logical_error_count < len(ERROR_CURVE):
        return ERROR_CURVE[logical_error_count]
    extra = logical_error_count - (len(ERROR_CURVE) - 1)
    return max(floor, ERROR_CURVE[-1] - DEGRADATION_PER_EXTRA_ERROR * extra)


@dataclass(frozen=True)
class ReliabilityBreakdown:
    """Audit trail of one DRS computation."""
    base_score: int = BASE_SCORE
    applied_penalties: Tuple[Tuple[str, int], ...] = ()
    final_score: int = BASE_SCORE
    missing_penalty_raw: int = 0
    missing_penalty_applied: int = 0
    floor_applied: bool = False

    def lines(self) -> List[str]:
        """Human-readable breakdown, one line per step."""
        lines = [f"Base: {self.base_score}"]
        lines.extend(f"{tag}: {-amount:+d}" for tag, amount in self.applied_penalties)
        if self.missing_penalty_raw != self.missing_penalty_applied:
            lines.append(
                f"Missing-data penalty capped: {self.missing_penalty_raw}→{self.missing_penalty_applied}"
            )
        if self.floor_applied:
            lines.append("Floor applied")
        lines.append(f"Final: {self.final_score}")
        return lines

    def to_dict(self) -> Dict[str, Any]:
        return {
            "base_score": self.base_score,
            "applied_penalties": [
                {"tag": tag, "amount": amount} for tag, amount in self.applied_penalties
            ],
            "final_score": self.final_score,
            "missing_penalty_raw": self.missing_penalty_raw,
            "missing_penalty_applied": self.missing_penalty_applied,
            "floor_applied": self.floor_applied,
        }


class ReliabilityScorer:
    """
    Computes the Data Reliability Score.

    Stateless apart from its configuration; safe to share.
    """

    def __init__(self, config: Optional[PipelineConfig] = None):
        self.config = config or PipelineConfig()

    def score(
        self,
        logical_error_count: int,
        missing_data: Optional[Iterable[str]] = None,
        has_security_data: bool = True,
        has_smart_data: bool = True,
    ) -> int:
        """DRS in [floor, 100]."""
        return self.score_detailed(
            logical_error_count, missing_data, has_security_data, has_smart_data
        ).final_score

    def score_detailed(
        self,
        logical_error_count: int,
        missing_data: Optional[Iterable[str]] = None,
        has_security_data: bool = True,
        has_smart_data: bool = True,
    ) -> ReliabilityBreakdown:
        """
        DRS with the full list of applied (tag, amount) penalties.

        Args:
            logical_error_count: Collector errors + invalidated metrics
            missing_data:        Normalized "key: reason" entries
            has_security_data:   False when security evidence is entirely absent
            has_smart_data:      False when SMART/storage health is entirely absent

        Returns:
            ReliabilityBreakdown whose final_score is the DRS
        """
        floor = self.config.reliability_floor
        penalties: List[Tuple[str, int]] = []
        score = BASE_SCORE

        # 1. Collector errors, progressive curve
        count = max(0, int(logical_error_count or 0))
        if count > 0:
            score = error_curve_score(count, floor)
            penalties.append((f"collector_errors({count})", BASE_SCORE - score))

        # 2. Missing data weighted by business criticality
        raw_missing = 0
        for entry in missing_data or ():
            if not isinstance(entry, str) or not entry.strip():
                continue
            category, penalty = classify_missing_entry(entry)
            raw_missing += penalty
            penalties.append((f"missing_{category.lower()}", penalty))

        applied_missing = min(raw_missing, self.config.missing_penalty_cap)
        if applied_missing != raw_missing:
            penalties.append(("missing_data_cap", applied_missing - raw_missing))
        score -= applied_missing

        # 3. Entire evidence domains absent
        if not has_security_data:
            score -= NO_SECURITY_DATA_PENALTY
            penalties.append(("no_security_data", NO_SECURITY_DATA_PENALTY))
        if not has_smart_data:
            score -= NO_SMART_DATA_PENALTY
            penalties.append(("no_smart_data", NO_SMART_DATA_PENALTY))

        final = int(np.clip(score, floor, BASE_SCORE))
        breakdown = ReliabilityBreakdown(
            applied_penalties=tuple(penalties),
            final_score=final,
            missing_penalty_raw=raw_missing,
            missing_penalty_applied=applied_missing,
            floor_applied=final != score,
        )

        if penalties:
            level = logging.INFO if self.config.audit_logging else logging.DEBUG
            summary = ", ".join(f"{tag}={-amount:+d}" for tag, amount in penalties)
            logger.log(level, f"[DRS] Score={final}/100 | Penalties: {summary}")

        return breakdown
