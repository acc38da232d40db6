"""SARIF v2.1.0 output: one result per finding, paths relative to the scan root."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from vibecheck.findings.models import Finding, Severity
from vibecheck.rules.base import Rule

SARIF_VERSION = "2.1.0"
SARIF_SCHEMA = "https://json.schemastore.org/sarif-2.1.0.json"
TOOL_NAME = "vibecheck"


def sarif_level(severity: Severity) -> str:
    """blocker/high -> error, med -> warning, everything else -> note."""
    if severity in (Severity.BLOCKER, Severity.HIGH):
        return "error"
    if severity is Severity.MED:
        return "warning"
    return "note"


def _artifact_uri(file: str, root: Path) -> str:
    try:
        return Path(file).relative_to(root).as_posix()
    except ValueError:
        return Path(file).as_posix()


def _result(finding: Finding, root: Path) -> Dict[str, Any]:
    result: Dict[str, Any] = {
        "ruleId": finding.rule_id,
        "level": sarif_level(finding.severity),
        "message": {"text": finding.message},
        "locations": [
            {
                "physicalLocation": {
                    "artifactLocation": {"uri": _artifact_uri(finding.file, root)},
                    "region": {
                        "startLine": finding.line or 1,
                        "startColumn": finding.col or 1,
                    },
                }
            }
        ],
    }
    if finding.fix_hint:
        result["properties"] = {"fixHint": finding.fix_hint, "severity": finding.severity.value}
    else:
        result["properties"] = {"severity": finding.severity.value}
    return result


def to_sarif(
    findings: Sequence[Finding], root: Path, rules: Optional[Sequence[Rule]] = None
) -> Dict[str, Any]:
    descriptors = [
        {"id": r.id, "shortDescription": {"text": r.description}} for r in (rules or [])
    ]
    return {
        "version": SARIF_VERSION,
        "$schema": SARIF_SCHEMA,
        "runs": [
            {
                "tool": {"driver": {"name": TOOL_NAME, "rules": descriptors}},
                "results": [_result(f, root) for f in findings],
            }
        ],
    }


def render_sarif(
    findings: Sequence[Finding], root: Path, rules: Optional[Sequence[Rule]] = None
) -> str:
    return json.dumps(to_sarif(findings, root, rules), indent=2)
