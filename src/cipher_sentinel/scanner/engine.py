# SPDX-License-Identifier: MIT
"""
Scan engine.

Applies every rule of a rule set to every line of a text and reduces the
resulting findings to a risk score and overall severity.
"""
from __future__ import annotations

import re
from typing import List, Optional

from cipher_sentinel.core.findings import Finding, ScanOutcome
from cipher_sentinel.risk.score import overall_severity, score
from cipher_sentinel.rules.catalog import DEFAULT_RULE_SET, RuleSet

# \r\n counts as one break; a lone \r does not split.
_LINE_BREAK_RE = re.compile(r"\r?\n")


def split_lines(text: str) -> List[str]:
    """Split *text* into lines on ``\\n`` / ``\\r\\n`` only."""
    return _LINE_BREAK_RE.split(text)


def find_secrets(text: str, rule_set: Optional[RuleSet] = None) -> List[Finding]:
    """
    Run *rule_set* over *text* line by line.

    Args:
        text: Already-decoded text to scan
        rule_set: Rules to apply (default: the built-in catalog)

    Returns:
        Findings ordered by line, then rule order, then match position
    """
    if not isinstance(text, str):
        raise TypeError(f"scan expects decoded text, got {type(text).__name__}")
    rules = DEFAULT_RULE_SET if rule_set is None else rule_set

    findings: List[Finding] = []
    for line_number, line in enumerate(split_lines(text), start=1):
        if not line:
            continue
        for rule in rules:
            for matched in rule.find_all(line):
                findings.append(
                    Finding(
                        rule_name=rule.name,
                        matched_text=matched,
                        line_number=line_number,
                        severity=rule.severity,
                    )
                )
    return findings


def scan(text: str, rule_set: Optional[RuleSet] = None) -> ScanOutcome:
    """Scan *text* and return its findings together with their aggregate."""
    findings = tuple(find_secrets(text, rule_set))
    return ScanOutcome(
        findings=findings,
        risk_score=score(findings),
        overall_severity=overall_severity(findings),
    )
