# SPDX-License-Identifier: MIT
"""
Masking helpers for displaying findings.

Scans are stored verbatim; these helpers are applied by the presentation
layer (CLI output) when ``security.mask_secrets`` is enabled.
"""

from __future__ import annotations

from typing import Any, Dict, List


def redact_secret(secret: str) -> str:
    """
    Redact secret showing first 6 + last 4 characters.

    For secrets <= 10 characters, shows only ****.
    For secrets > 10 characters, shows first6****last4.

    Args:
        secret: The secret string to redact

    Returns:
        Redacted string
    """
    if len(secret) <= 10:
        return "****"
    return secret[:6] + "****" + secret[-4:]


def redact_finding(finding: Dict[str, Any]) -> Dict[str, Any]:
    """
    Redact the matched text of a serialised finding.

    Args:
        finding: Finding dictionary (as produced by ``Finding.to_dict``)

    Returns:
        Copy of the finding with ``matched_text`` redacted
    """
    redacted_finding = finding.copy()
    if isinstance(redacted_finding.get("matched_text"), str):
        redacted_finding["matched_text"] = redact_secret(redacted_finding["matched_text"])
    return redacted_finding


def redact_findings_list(findings: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [redact_finding(finding) for finding in findings]


def redact_scan_record(record: Dict[str, Any]) -> Dict[str, Any]:
    """
    Redact secrets in a complete scan record or scan outcome dictionary.

    Args:
        record: Dictionary carrying a ``findings`` list

    Returns:
        Copy of the record with every finding redacted
    """
    redacted_record = record.copy()
    if isinstance(redacted_record.get("findings"), list):
        redacted_record["findings"] = redact_findings_list(redacted_record["findings"])
    return redacted_record
