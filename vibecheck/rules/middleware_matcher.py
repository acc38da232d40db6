from __future__ import annotations

from vibecheck.context import ScanContext
from vibecheck.findings.models import Finding, Severity
from vibecheck.rules._shared import make_finding
from vibecheck.rules.base import Rule

MIDDLEWARE_FILES = ("middleware.ts", "middleware.js")


class NextMiddlewareMatcherCoverageRule(Rule):
    """middleware.ts without `export const config = { matcher }` runs on every route, or none you expect."""

    id = "next-middleware-matcher-coverage"
    description = "Check that middleware matcher is defined (best-effort)."
    stacks = frozenset({"nextjs"})

    async def detect(self, context: ScanContext) -> list[Finding]:
        findings: list[Finding] = []
        for abs_path, rel_path in context.iter_files():
            if not rel_path.endswith(MIDDLEWARE_FILES):
                continue
            code = await context.read_file(abs_path)
            if not code:
                continue
            if "export const config" in code and "matcher" in code:
                continue
            findings.append(
                make_finding(
                    self.id,
                    Severity.MED,
                    str(abs_path),
                    code,
                    0,
                    "middleware.ts does not appear to define export const config.matcher.",
                    "Review export const config.matcher and ensure protected route prefixes "
                    "are included (or document why not).",
                )
            )
        return findings
