# SPDX-License-Identifier: MIT
"""
Tests for risk scoring.
"""
from types import MappingProxyType

import pytest

from cipher_sentinel.core.findings import Finding, Severity
from cipher_sentinel.risk.score import (
    MAX_RISK_SCORE,
    SEVERITY_WEIGHTS,
    overall_severity,
    risk_summary,
    score,
    severity_counts,
)


def _finding(severity, line=1):
    return Finding(rule_name="TEST", matched_text="x", line_number=line, severity=severity)


class TestRiskScoring:
    """Test the saturating weighted sum."""

    def test_weights(self):
        assert SEVERITY_WEIGHTS[Severity.CRITICAL] == 30
        assert SEVERITY_WEIGHTS[Severity.MEDIUM] == 15
        assert SEVERITY_WEIGHTS[Severity.LOW] == 5

    def test_empty(self):
        assert score([]) == 0

    def test_critical_plus_medium(self):
        assert score([_finding(Severity.CRITICAL), _finding(Severity.MEDIUM)]) == 45

    def test_saturates_at_100(self):
        """Four critical findings would sum to 120 and are capped."""
        assert score([_finding(Severity.CRITICAL)] * 4) == MAX_RISK_SCORE

    def test_monotonic_and_bounded(self):
        findings = []
        previous = 0
        for severity in [Severity.LOW, Severity.MEDIUM, Severity.CRITICAL] * 5:
            findings.append(_finding(severity))
            current = score(findings)
            assert previous <= current <= MAX_RISK_SCORE
            previous = current

    def test_accepts_finding_dicts(self):
        """Persisted findings can be re-scored."""
        assert score([{"severity": "Critical"}, {"severity": "low"}]) == 35


class TestOverallSeverity:
    """Test the severity reduction."""

    def test_defaults_to_low(self):
        assert overall_severity([]) is Severity.LOW

    def test_critical_dominates(self):
        findings = [_finding(Severity.LOW), _finding(Severity.CRITICAL), _finding(Severity.MEDIUM)]
        assert overall_severity(findings) is Severity.CRITICAL

    def test_medium_over_low(self):
        assert overall_severity([_finding(Severity.LOW), _finding(Severity.MEDIUM)]) is Severity.MEDIUM


class TestRiskSummary:
    def test_summary(self):
        findings = [_finding(Severity.CRITICAL), _finding(Severity.LOW), _finding(Severity.LOW)]
        summary = risk_summary(findings)
        assert summary == {
            "score": 40,
            "severity": "Critical",
            "counts": {"Low": 2, "Medium": 0, "Critical": 1},
            "total": 3,
        }

    def test_counts_from_generator(self):
        counts = severity_counts(_finding(Severity.MEDIUM) for _ in range(3))
        assert counts["Medium"] == 3


class TestPersistedFindings:
    def test_rescore_from_dicts(self):
        """Findings rebuilt from their dict form score the same."""
        original = [_finding(Severity.CRITICAL), _finding(Severity.MEDIUM, line=4)]
        rebuilt = [Finding.from_dict(f.to_dict()) for f in original]
        assert rebuilt == original
        assert score(rebuilt) == score(original) == 45

    def test_accepts_any_mapping(self):
        """Read-only mappings are read the same way as dicts."""
        findings = [MappingProxyType({"severity": "Critical"}), MappingProxyType({"severity": "Medium"})]
        assert score(findings) == 45
        assert overall_severity(findings) is Severity.CRITICAL

    def test_missing_severity_raises(self):
        with pytest.raises(ValueError, match="no severity"):
            score([{"rule_name": "AWS_ACCESS_KEY", "line_number": 1}])

    def test_object_without_severity_raises(self):
        with pytest.raises(ValueError, match="no severity"):
            overall_severity([object()])

    def test_unknown_severity_raises(self):
        with pytest.raises(ValueError):
            score([{"severity": "Severe"}])
