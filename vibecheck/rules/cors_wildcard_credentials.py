# CORS misconfiguration: wildcard origin combined with credentials=true.

from __future__ import annotations

import re

from vibecheck.context import ScanContext
from vibecheck.findings.models import Finding, Severity
from vibecheck.rules._shared import is_code_file, make_finding
from vibecheck.rules.base import ANY_STACK, Rule

ORIGIN_HEADER = "Access-Control-Allow-Origin"
CREDENTIALS_HEADER = "Access-Control-Allow-Credentials"

# Header name, optional closing quote, then `:` or `,` (object literal or setHeader call).
_WILDCARD_ORIGIN_RE = re.compile(
    rf"{ORIGIN_HEADER}[\"']?\s*[:,]\s*[\"']?\*[\"']?", re.IGNORECASE
)
_CREDENTIALS_TRUE_RE = re.compile(
    rf"{CREDENTIALS_HEADER}[\"']?\s*[:,]\s*[\"']?true\b", re.IGNORECASE
)


class CorsWildcardCredentialsRule(Rule):
    """Flags CORS headers that allow any origin while also allowing credentials."""

    id = "cors-wildcard-with-credentials"
    description = "Detect CORS config that uses wildcard origin with credentials=true."
    stacks = frozenset({ANY_STACK})

    async def detect(self, context: ScanContext) -> list[Finding]:
        findings: list[Finding] = []
        for abs_path, rel_path in context.iter_files():
            if not is_code_file(rel_path):
                continue
            code = await context.read_file(abs_path)
            if not code:
                continue

            origin = _WILDCARD_ORIGIN_RE.search(code)
            if origin is None or not _CREDENTIALS_TRUE_RE.search(code):
                continue

            findings.append(
                make_finding(
                    self.id,
                    Severity.HIGH,
                    str(abs_path),
                    code,
                    origin.start(),
                    "CORS appears to allow wildcard origin (*) while also allowing credentials=true.",
                    "If you need credentials, echo a specific Origin and add Vary: Origin. "
                    "Avoid '*' with credentials.",
                )
            )
        return findings
