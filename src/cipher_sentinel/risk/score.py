# SPDX-License-Identifier: MIT
"""
Risk scoring for scan findings.

The score is a saturating weighted sum: each finding contributes a fixed
weight for its severity tier and the total is clamped to 0-100. Findings may
be ``Finding`` objects or persisted finding dictionaries, so stored scans can
be re-scored without re-running the engine.
"""
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping

from cipher_sentinel.core.findings import Finding, Severity

SEVERITY_WEIGHTS = {
    Severity.CRITICAL: 30,
    Severity.MEDIUM: 15,
    Severity.LOW: 5,
}

MAX_RISK_SCORE = 100


def _severity_of(finding: Any) -> Severity:
    if isinstance(finding, Finding):
        return finding.severity
    if isinstance(finding, Mapping):
        if "severity" not in finding:
            raise ValueError(f"Finding has no severity (keys: {sorted(finding)})")
        return Severity.parse(finding["severity"])
    if not hasattr(finding, "severity"):
        raise ValueError(f"Finding has no severity: {type(finding).__name__}")
    return Severity.parse(finding.severity)


def score(findings: Iterable[Any]) -> int:
    """
    Calculate the aggregate risk score for a set of findings.

    Args:
        findings: Finding objects or finding dictionaries with a ``severity``

    Returns:
        Risk score between 0-100
    """
    total = sum(SEVERITY_WEIGHTS[_severity_of(f)] for f in findings)
    return max(0, min(MAX_RISK_SCORE, total))


def overall_severity(findings: Iterable[Any]) -> Severity:
    """Highest severity present, Low when there are no findings."""
    return max((_severity_of(f) for f in findings), key=lambda s: s.rank, default=Severity.LOW)


def severity_counts(findings: Iterable[Any]) -> Dict[str, int]:
    counts = {severity.value: 0 for severity in Severity}
    for finding in findings:
        counts[_severity_of(finding).value] += 1
    return counts


def risk_summary(findings: Iterable[Any]) -> Dict[str, Any]:
    """
    Generate a complete risk summary for a set of findings.

    Returns:
        Dictionary with score, overall severity and per-severity counts
    """
    items: List[Any] = list(findings)
    return {
        "score": score(items),
        "severity": overall_severity(items).value,
        "counts": severity_counts(items),
        "total": len(items),
    }
