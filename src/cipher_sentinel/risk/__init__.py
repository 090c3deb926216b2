"""Risk scoring for scan findings."""

from .score import MAX_RISK_SCORE, SEVERITY_WEIGHTS, overall_severity, risk_summary, score

__all__ = ["MAX_RISK_SCORE", "SEVERITY_WEIGHTS", "overall_severity", "risk_summary", "score"]
