# SPDX-License-Identifier: MIT
"""Finding data structures and utilities for Cipher Sentinel."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Tuple


class Severity(str, Enum):
    """Three-tier severity attached to rules and copied onto findings."""

    LOW = "Low"
    MEDIUM = "Medium"
    CRITICAL = "Critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANKS[self]

    @classmethod
    def parse(cls, value: Any) -> "Severity":
        """Parse a severity label case-insensitively ("low", "LOW", "Low")."""
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        for member in cls:
            if member.value.lower() == text:
                return member
        raise ValueError(f"Unknown severity: {value!r}")


_SEVERITY_RANKS = {
    Severity.LOW: 1,
    Severity.MEDIUM: 2,
    Severity.CRITICAL: 3,
}


@dataclass(frozen=True)
class Finding:
    """A single occurrence of a secret pattern in scanned text."""

    rule_name: str  # name of the rule that fired (e.g. 'AWS_ACCESS_KEY')
    matched_text: str  # verbatim substring from the input
    line_number: int  # 1-based line number
    severity: Severity

    def to_dict(self) -> Dict[str, Any]:
        """Convert Finding to dictionary format."""
        return {
            "rule_name": self.rule_name,
            "matched_text": self.matched_text,
            "line_number": self.line_number,
            "severity": self.severity.value,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Finding":
        """Rebuild a Finding from its persisted dictionary form."""
        return cls(
            rule_name=str(data["rule_name"]),
            matched_text=str(data["matched_text"]),
            line_number=int(data["line_number"]),
            severity=Severity.parse(data["severity"]),
        )


@dataclass(frozen=True)
class ScanOutcome:
    """Everything one scan produces: ordered findings plus their aggregate."""

    findings: Tuple[Finding, ...]
    risk_score: int
    overall_severity: Severity

    def to_dict(self) -> Dict[str, Any]:
        return {
            "findings": [f.to_dict() for f in self.findings],
            "risk_score": self.risk_score,
            "severity": self.overall_severity.value,
        }
