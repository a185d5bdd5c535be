"""
Automation Safety Gate

Binary allow/deny guarding automated remediation. Rules are evaluated in
order and the first failing rule wins:

  1. confidence below the minimum (60)
  2. more than 5 logical collector errors
  3. security evidence entirely missing
  4. SMART anomaly flagged AND some data missing (neither alone denies)
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional

from diagtrust.config import PipelineConfig
from diagtrust.core.collection import CollectionDiagnosticsSnapshot
from diagtrust.utils import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class SafetyVerdict:
    """Outcome of the safety gate; block_reason is set iff denied."""
    allowed: bool
    block_reason: Optional[str] = None

    @classmethod
    def allow(cls) -> "SafetyVerdict":
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: str) -> "SafetyVerdict":
        return cls(allowed=False, block_reason=reason)

    def to_dict(self) -> Dict[str, Any]:
        return {"allowed": self.allowed, "block_reason": self.block_reason}


class AutomationSafetyGate:
    """Decides whether automated remediation may run on this evidence."""

    def __init__(self, config: Optional[PipelineConfig] = None):
        self.config = config or PipelineConfig()

    def evaluate(
        self,
        confidence: int,
        logical_error_count: int,
        has_security_data: bool,
        smart_anomaly: bool,
        any_missing_data: bool,
    ) -> SafetyVerdict:
        """
        Evaluate the ordered safety rules.

        Args:
            confidence:          Gated confidence (0–100)
            logical_error_count: Collector errors + invalidated metrics
            has_security_data:   False when security evidence is entirely absent
            smart_anomaly:       A SMART problem was reported
            any_missing_data:    Some evidence is missing

        Returns:
            SafetyVerdict
        """
        min_confidence = self.config.min_automation_confidence
        max_errors = self.config.max_automation_errors

        if confidence < min_confidence:
            verdict = SafetyVerdict.deny(
                f"Confidence too low ({confidence}/100 < {min_confidence})"
            )
        elif logical_error_count > max_errors:
            verdict = SafetyVerdict.deny(
                f"Too many collector errors ({logical_error_count} > {max_errors})"
            )
        elif not has_security_data:
            verdict = SafetyVerdict.deny("Security data missing")
        elif smart_anomaly and any_missing_data:
            verdict = SafetyVerdict.deny("SMART anomaly with missing data")
        else:
            verdict = SafetyVerdict.allow()

        if verdict.allowed:
            logger.info("[SafetyGate] Automated remediation ALLOWED")
        else:
            logger.info(f"[SafetyGate] Automated remediation BLOCKED: {verdict.block_reason}")
        return verdict

    def evaluate_snapshot(
        self,
        confidence: int,
        snapshot: CollectionDiagnosticsSnapshot,
        has_security_data: bool,
        smart_anomaly: bool,
    ) -> SafetyVerdict:
        """Convenience wrapper reading counts from a diagnostics snapshot."""
        return self.evaluate(
            confidence=confidence,
            logical_error_count=snapshot.logical_error_count,
            has_security_data=has_security_data,
            smart_anomaly=smart_anomaly,
            any_missing_data=bool(snapshot.missing_data),
        )
