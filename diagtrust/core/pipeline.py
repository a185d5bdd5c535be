"""
Diagnostic Trust Pipeline

Runs the whole confidence & data-integrity chain for one scan:

    sensors ──► SensorSanitizationPass ──► invalidated metrics
                                                │
    scan document ──► CollectorErrorAggregator ◄┘
                                │
                                ▼
                     EvidenceFlags ──► ReliabilityScorer (DRS)
                                │
                                ▼
                     ConfidenceGate ──► AutomationSafetyGate

This is the only place where unexpected exceptions are caught. Anything that
escapes a component is logged with its traceback and turned into the most
conservative assessment: every sensor reading unavailable, confidence 0, DRS at
the floor, automation denied.

Usage:
    from diagtrust import DiagnosticTrustPipeline

    pipeline = DiagnosticTrustPipeline()
    assessment = pipeline.evaluate(scan_json, sensors=snapshot, base_confidence=92)
    if assessment.verdict.allowed:
        run_remediation()
"""
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple

from diagtrust.config import PipelineConfig
from diagtrust.core.collection import (
    CollectionDiagnosticsSnapshot,
    CollectionStatus,
    CollectorErrorAggregator,
)
from diagtrust.core.models import SensorSnapshot
from diagtrust.core.scoring import (
    AutomationSafetyGate,
    CappedConfidence,
    ConfidenceGate,
    ReliabilityBreakdown,
    ReliabilityScorer,
    SafetyVerdict,
)
from diagtrust.core.validation import SensorSanitizationPass
from diagtrust.utils import PipelineError, get_logger

logger = get_logger(__name__)

SECURITY_EVIDENCE_PATTERN = re.compile(r"security|defender", re.IGNORECASE)
SMART_EVIDENCE_PATTERN = re.compile(r"smart|storage", re.IGNORECASE)
SMART_ERROR_PATTERN = re.compile(r"smart", re.IGNORECASE)


@dataclass(frozen=True)
class EvidenceFlags:
    """Whole-domain evidence facts derived from the diagnostics snapshot."""
    has_security_data: bool = True
    has_smart_data: bool = True
    smart_suspect: bool = False

    @classmethod
    def derive(
        cls,
        snapshot: CollectionDiagnosticsSnapshot,
        has_smart_data: Optional[bool] = None,
    ) -> "EvidenceFlags":
        """
        Args:
            snapshot:       Diagnostics snapshot of the scan
            has_smart_data: Caller-supplied override; inferred from missing
                            data when None
        """
        has_security = not any(
            SECURITY_EVIDENCE_PATTERN.search(entry) for entry in snapshot.missing_data
        )
        if has_smart_data is None:
            has_smart_data = not any(
                SMART_EVIDENCE_PATTERN.search(entry) for entry in snapshot.missing_data
            )
        smart_suspect = any(
            SMART_ERROR_PATTERN.search(error.code) or SMART_ERROR_PATTERN.search(error.message)
            for error in snapshot.errors
        )
        return cls(
            has_security_data=has_security,
            has_smart_data=bool(has_smart_data),
            smart_suspect=smart_suspect,
        )

    def to_dict(self) -> Dict[str, bool]:
        return {
            "has_security_data": self.has_security_data,
            "has_smart_data": self.has_smart_data,
            "smart_suspect": self.smart_suspect,
        }


@dataclass(frozen=True)
class TrustAssessment:
    """Everything the pipeline concluded about one scan."""
    diagnostics: CollectionDiagnosticsSnapshot
    confidence: CappedConfidence
    reliability: ReliabilityBreakdown
    verdict: SafetyVerdict
    flags: EvidenceFlags
    sanitization_actions: Tuple[str, ...] = ()
    fallback: bool = False
    error: Optional[Dict[str, Any]] = None

    @property
    def drs(self) -> int:
        return self.reliability.final_score

    @classmethod
    def conservative(
        cls,
        error: Optional[Dict[str, Any]] = None,
        config: Optional[PipelineConfig] = None,
    ) -> "TrustAssessment":
        """Most pessimistic assessment, used when the pipeline itself failed."""
        config = config or PipelineConfig()
        floor = config.reliability_floor
        return cls(
            diagnostics=CollectionDiagnosticsSnapshot(
                status=CollectionStatus.FAILED,
                status_message="Collection diagnostics unavailable (pipeline failure)",
            ),
            confidence=CappedConfidence(base=0, value=0),
            reliability=ReliabilityBreakdown(
                applied_penalties=(("pipeline_failure", 100 - floor),),
                final_score=floor,
                floor_applied=True,
            ),
            verdict=SafetyVerdict.deny("Diagnostic pipeline failure"),
            flags=EvidenceFlags(has_security_data=False, has_smart_data=False),
            fallback=True,
            error=error,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "diagnostics": self.diagnostics.to_dict(),
            "confidence": self.confidence.to_dict(),
            "drs": self.drs,
            "reliability": self.reliability.to_dict(),
            "verdict": self.verdict.to_dict(),
            "flags": self.flags.to_dict(),
            "sanitization_actions": list(self.sanitization_actions),
            "fallback": self.fallback,
            "error": self.error,
        }


class DiagnosticTrustPipeline:
    """Wires sanitization, aggregation, scoring and gating for one scan."""

    def __init__(self, config: Optional[PipelineConfig] = None):
        self.config = config or PipelineConfig()
        self.sanitization = SensorSanitizationPass(config=self.config)
        self.aggregator = CollectorErrorAggregator()
        self.reliability = ReliabilityScorer(self.config)
        self.confidence_gate = ConfidenceGate()
        self.safety_gate = AutomationSafetyGate(self.config)

    def evaluate(
        self,
        document: Any,
        sensors: Any = None,
        base_confidence: Any = 100,
        has_smart_data: Optional[bool] = None,
    ) -> TrustAssessment:
        """
        Assess how far one scan can be trusted.

        Args:
            document:        Scan document (mapping, or JSON text/bytes)
            sensors:         SensorSnapshot (sanitized in place) or the
                             collector's sensor JSON mapping
            base_confidence: Externally computed confidence before gating
            has_smart_data:  Override for SMART availability

        Returns:
            TrustAssessment; never raises
        """
        stage = "sanitization"
        snapshot: Optional[SensorSnapshot] = None
        try:
            snapshot = self._sensor_snapshot(sensors)
            actions: List[str] = self.sanitization.run(snapshot)

            stage = "aggregation"
            diagnostics = self.aggregator.aggregate(document, invalidated_metrics=actions)

            stage = "evidence_flags"
            flags = EvidenceFlags.derive(diagnostics, has_smart_data=has_smart_data)

            stage = "reliability"
            reliability = self.reliability.score_detailed(
                diagnostics.logical_error_count,
                diagnostics.missing_data,
                has_security_data=flags.has_security_data,
                has_smart_data=flags.has_smart_data,
            )

            stage = "confidence_gate"
            confidence = self.confidence_gate.apply_detailed(base_confidence, diagnostics)

            stage = "safety_gate"
            verdict = self.safety_gate.evaluate_snapshot(
                confidence.value,
                diagnostics,
                has_security_data=flags.has_security_data,
                smart_anomaly=flags.smart_suspect,
            )
        except Exception as e:
            logger.error(f"DiagnosticTrustPipeline failed during {stage}: {e}", exc_info=True)
            if snapshot is not None:
                # Nothing on a half-sanitized snapshot can be trusted
                for metric in snapshot.all_metrics():
                    metric.mark_unavailable(f"pipeline failure: {stage}")
            error = PipelineError(
                f"Unexpected failure during {stage}: {e}",
                stage=stage,
                details={"exception_type": type(e).__name__},
            )
            return TrustAssessment.conservative(error.to_dict(), self.config)

        logger.info(
            f"TrustAssessment: status={diagnostics.status.value}, "
            f"confidence={confidence.value}, DRS={reliability.final_score}, "
            f"automation={'allowed' if verdict.allowed else 'blocked'}"
        )
        return TrustAssessment(
            diagnostics=diagnostics,
            confidence=confidence,
            reliability=reliability,
            verdict=verdict,
            flags=flags,
            sanitization_actions=tuple(actions),
        )

    @staticmethod
    def _sensor_snapshot(sensors: Any) -> Optional[SensorSnapshot]:
        if sensors is None or isinstance(sensors, SensorSnapshot):
            return sensors
        if isinstance(sensors, Mapping):
            return SensorSnapshot.from_dict(sensors)
        raise TypeError(f"sensors must be a SensorSnapshot or mapping, got {type(sensors).__name__}")
