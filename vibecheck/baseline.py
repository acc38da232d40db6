"""
Baseline suppression: record accepted findings and hide them on later scans.

A baseline is a versioned list of (signature, count) pairs. Applying it drops
up to `count` occurrences of each signature, consuming occurrences in the
order findings were produced, so only the excess occurrences surface.

Suppression picks the first n occurrences in finding order. The engine runs
rules sequentially, so that order is stable between runs over an unchanged
corpus; callers that reorder findings before applying a baseline change
which duplicates are surfaced, though never how many.
"""

from __future__ import annotations

import json
import logging
from collections import Counter
from pathlib import Path
from typing import Iterable, List, Literal, Sequence

from pydantic import BaseModel, Field, ValidationError

from vibecheck.findings.models import Finding

logger = logging.getLogger(__name__)

BASELINE_VERSION = 1
DEFAULT_BASELINE_FILE = ".vibecheck-baseline.json"


class BaselineItem(BaseModel):
    key: str
    count: int = Field(..., ge=0)


class Baseline(BaseModel):
    """Persisted snapshot of finding signatures and their occurrence counts."""

    version: Literal[1] = BASELINE_VERSION
    items: List[BaselineItem] = Field(default_factory=list)

    def counts(self) -> dict[str, int]:
        """Signature -> allowed count. Repeated keys in a hand-edited file are summed."""
        allowed: dict[str, int] = {}
        for item in self.items:
            allowed[item.key] = allowed.get(item.key, 0) + item.count
        return allowed


def signature(finding: Finding) -> str:
    """Deterministic key: ruleId|severity|file|line|col|message (missing line/col -> "")."""
    line = "" if finding.line is None else str(finding.line)
    col = "" if finding.col is None else str(finding.col)
    return "|".join(
        [finding.rule_id, finding.severity.value, finding.file, line, col, finding.message]
    )


def build_baseline(findings: Iterable[Finding]) -> Baseline:
    """Aggregate a finding list into a baseline, signatures in first-seen order."""
    counts = Counter(signature(f) for f in findings)
    return Baseline(items=[BaselineItem(key=k, count=c) for k, c in counts.items()])


def apply_baseline(findings: Sequence[Finding], baseline: Baseline) -> list[Finding]:
    """Drop up to the recorded count of each signature; keep every occurrence beyond it."""
    allowed = baseline.counts()
    consumed: Counter[str] = Counter()
    kept: list[Finding] = []
    for f in findings:
        key = signature(f)
        if consumed[key] < allowed.get(key, 0):
            consumed[key] += 1
            continue
        kept.append(f)
    suppressed = len(findings) - len(kept)
    if suppressed:
        logger.info("Baseline suppressed %d of %d finding(s)", suppressed, len(findings))
    return kept


def load_baseline(path: Path) -> Baseline:
    """Load a baseline document; missing or corrupt files yield an empty baseline."""
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        logger.warning("Baseline %s not readable, scanning without suppression: %s", path, e)
        return Baseline()
    try:
        return Baseline.model_validate(json.loads(raw))
    except (ValueError, ValidationError) as e:
        logger.warning("Baseline %s is invalid, scanning without suppression: %s", path, e)
        return Baseline()


def write_baseline(path: Path, findings: Iterable[Finding]) -> Baseline:
    """Record findings as a baseline document at path and return it."""
    baseline = build_baseline(findings)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(baseline.model_dump(mode="json"), indent=2) + "\n", encoding="utf-8")
    logger.info("Wrote baseline with %d signature(s) to %s", len(baseline.items), path)
    return baseline
