"""JSON report payload: {rootDir, repo, config, summary, findings}."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Sequence

from vibecheck.config import Config
from vibecheck.findings.models import Finding, Summary


def build_payload(
    findings: Sequence[Finding], root: Path, stack: str, config: Config
) -> Dict[str, Any]:
    return {
        "rootDir": str(root),
        "repo": {"rootDir": str(root), "stack": stack},
        "config": config.to_dict(),
        "summary": Summary.from_findings(findings).model_dump(),
        "findings": [f.to_dict() for f in findings],
    }


def render_json(findings: Sequence[Finding], root: Path, stack: str, config: Config) -> str:
    return json.dumps(build_payload(findings, root, stack, config), indent=2)
