"""
Unit Tests for the Data Reliability Score

Tests for the error curve, missing-data weighting and cap, evidence-domain
penalties and the floor.
"""
import pytest

from diagtrust.config import PipelineConfig
from diagtrust.core.scoring import ReliabilityScorer, classify_missing_entry
from diagtrust.core.scoring.reliability import error_curve_score


@pytest.fixture
def scorer() -> ReliabilityScorer:
    """Scorer with default floor and cap."""
    return ReliabilityScorer()


class TestErrorCurve:
    """Tests for the progressive collector-error curve."""

    @pytest.mark.parametrize("count,expected", [
        (0, 100), (1, 95), (2, 90), (3, 84), (4, 78), (5, 72), (6, 68), (7, 64),
    ])
    def test_curve(self, scorer, count, expected):
        assert scorer.score(count) == expected

    def test_many_errors_hit_floor(self, scorer):
        assert scorer.score(50) == 40

    def test_negative_count_treated_as_zero(self, scorer):
        assert scorer.score(-3) == 100

    def test_curve_respects_floor(self):
        assert error_curve_score(20, floor=60) == 60


class TestMissingDataWeighting:
    """Tests for category classification and the cap."""

    @pytest.mark.parametrize("entry,category,penalty", [
        ("Windows Defender status", "Security", 8),
        ("AV: not reported", "Security", 8),
        ("SMART attributes", "SMART", 4),
        ("DiskTemperature: missing", "Storage", 4),
        ("RAM modules", "Hardware", 3),
        ("GPU driver", "Hardware", 3),
        ("CPU temperature", "CPU_Temp", 2),
        ("EventLog: access denied", "Monitoring", 2),
        ("Startup apps", "Processes", 1),
        ("Printer spooler", "Unknown", 1),
        ("AVStatus: missing", "Security", 8),
        ("RAMUsage: missing", "Hardware", 3),
        ("AppList: missing", "Processes", 1),
        ("InstalledApps: disabled", "Processes", 1),
    ])
    def test_classification(self, entry, category, penalty):
        assert classify_missing_entry(entry) == (category, penalty)

    def test_acronyms_match_whole_tokens(self):
        """"unavailable" is not an AV entry and "program" is not RAM."""
        assert classify_missing_entry("Printer unavailable")[0] == "Unknown"
        assert classify_missing_entry("Program list")[0] == "Unknown"
        assert classify_missing_entry("ProgramList: missing")[0] == "Unknown"
        assert classify_missing_entry("PRINTER UNAVAILABLE")[0] == "Unknown"
        assert classify_missing_entry("Apple Music")[0] == "Unknown"

    def test_first_match_wins(self):
        """Security outranks storage for a mixed entry."""
        assert classify_missing_entry("BitLocker volume security")[0] == "Security"

    def test_single_entry(self, scorer):
        assert scorer.score(0, ["Network adapters"]) == 98

    def test_blank_entries_ignored(self, scorer):
        assert scorer.score(0, ["", "   "]) == 100

    def test_missing_penalty_capped(self, scorer):
        entries = ["Defender", "Firewall", "Antivirus", "Security Center"]  # 4 x 8 = 32
        breakdown = scorer.score_detailed(0, entries)
        assert breakdown.missing_penalty_raw == 32
        assert breakdown.missing_penalty_applied == 20
        assert breakdown.final_score == 80
        assert ("missing_data_cap", -12) in breakdown.applied_penalties

    def test_custom_cap(self):
        scorer = ReliabilityScorer(PipelineConfig(missing_penalty_cap=5))
        assert scorer.score(0, ["Defender", "Firewall"]) == 95


class TestEvidenceDomains:
    """Tests for whole-domain penalties and the floor."""

    def test_no_security_data(self, scorer):
        assert scorer.score(0, has_security_data=False) == 90

    def test_no_smart_data(self, scorer):
        assert scorer.score(0, has_smart_data=False) == 97

    def test_floor(self, scorer):
        entries = ["Defender"] * 10
        breakdown = scorer.score_detailed(
            12, entries, has_security_data=False, has_smart_data=False
        )
        assert breakdown.final_score == 40
        assert breakdown.floor_applied

    def test_custom_floor(self):
        scorer = ReliabilityScorer(PipelineConfig(reliability_floor=55))
        assert scorer.score(30) == 55

    @pytest.mark.parametrize("count", [0, 1, 3, 6, 10, 100])
    @pytest.mark.parametrize("security,smart", [(True, True), (False, True), (False, False)])
    def test_bounded(self, scorer, count, security, smart):
        entries = ["Defender", "SMART", "Disk", "RAM", "CPU", "Network", "Process", "Other"] * 3
        value = scorer.score(count, entries, security, smart)
        assert 40 <= value <= 100


class TestReliabilityBreakdown:
    """Tests for the audit trail."""

    def test_clean(self, scorer):
        breakdown = scorer.score_detailed(0, [])
        assert breakdown.final_score == 100
        assert breakdown.applied_penalties == ()
        assert breakdown.lines() == ["Base: 100", "Final: 100"]

    def test_penalty_tags(self, scorer):
        breakdown = scorer.score_detailed(
            2, ["CPU temperature"], has_security_data=False
        )
        assert breakdown.applied_penalties == (
            ("collector_errors(2)", 10),
            ("missing_cpu_temp", 2),
            ("no_security_data", 10),
        )
        assert breakdown.final_score == 78
        assert "collector_errors(2): -10" in breakdown.lines()

    def test_to_dict(self, scorer):
        data = scorer.score_detailed(1).to_dict()
        assert data["final_score"] == 95
        assert data["applied_penalties"] == [{"tag": "collector_errors(1)", "amount": 5}]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
