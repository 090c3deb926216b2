# SPDX-License-Identifier: MIT
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict

from cipher_sentinel import __version__
from cipher_sentinel.core.findings import Severity
from cipher_sentinel.rules.catalog import DEFAULT_RULE_SET

INFORMATION_URI = "https://github.com/cipher-sentinel/cipher-sentinel"


def _level(severity: Any) -> str:
    try:
        return "error" if Severity.parse(severity) is Severity.CRITICAL else "warning"
    except ValueError:
        return "warning"


def build_sarif(report: Dict[str, Any]) -> Dict[str, Any]:
    """
    Convert a CLI scan report to a SARIF log.

    The report carries a ``root`` and a ``files`` list, each entry holding the
    scanned ``path`` and its serialised ``findings``. Matched text is never
    copied into the log.
    """
    root = str(report.get("root", ""))

    # Collect rules in first-seen order
    rule_ids: Dict[str, int] = {}
    rules = []
    results = []
    for scanned in report.get("files", []) or []:
        path = str(scanned.get("path", ""))
        try:
            p_rel = Path(path).resolve().relative_to(Path(root).resolve()).as_posix()
        except ValueError:
            p_rel = path

        for f in scanned.get("findings", []) or []:
            name = f.get("rule_name", "UNKNOWN")
            if name not in rule_ids:
                rule_ids[name] = len(rules)
                known = DEFAULT_RULE_SET.get(name)
                rules.append(
                    {
                        "id": name,
                        "name": name,
                        "shortDescription": {
                            "text": known.description if known and known.description else f"Custom rule: {name}"
                        },
                        "defaultConfiguration": {"level": _level(f.get("severity"))},
                        "helpUri": INFORMATION_URI,
                    }
                )

            results.append(
                {
                    "ruleId": name,
                    "ruleIndex": rule_ids[name],
                    "level": _level(f.get("severity")),
                    "message": {"text": f"{name} detected ({f.get('severity', 'Low')})"},
                    "locations": [
                        {
                            "physicalLocation": {
                                "artifactLocation": {"uri": p_rel},
                                "region": {"startLine": max(1, int(f.get("line_number") or 1))},
                            }
                        }
                    ],
                    "properties": {"severity": f.get("severity")},
                }
            )

    # Make this upload unique per CI job
    auto_id = "cipher-sentinel-{run}-{job}-{attempt}".format(
        run=os.getenv("GITHUB_RUN_ID", "local"),
        job=os.getenv("GITHUB_JOB", "job"),
        attempt=os.getenv("GITHUB_RUN_ATTEMPT", "1"),
    )

    return {
        "version": "2.1.0",
        "$schema": "https://json.schemastore.org/sarif-2.1.0.json",
        "runs": [
            {
                "automationDetails": {"id": auto_id},
                "tool": {
                    "driver": {
                        "name": "Cipher Sentinel",
                        "version": __version__,
                        "informationUri": INFORMATION_URI,
                        "rules": rules,
                    }
                },
                "results": results,
                "properties": {
                    "risk_score": report.get("risk_score", 0),
                    "severity": report.get("severity", Severity.LOW.value),
                },
            }
        ],
    }
