# Leaked secrets: Supabase service-role keys referenced from application code.

from __future__ import annotations

import re

from vibecheck.context import ScanContext
from vibecheck.findings.models import Finding, Severity
from vibecheck.rules._shared import is_client_component, is_code_file, make_finding
from vibecheck.rules.base import ANY_STACK, Rule

PER_FILE_CAP = 3

# Longest names first so SUPABASE_SERVICE_ROLE_KEY is not also reported as SERVICE_ROLE_KEY.
_SERVICE_KEY_RE = re.compile(
    r"\b(?:VITE_)?(SUPABASE_SERVICE_ROLE_KEY|SUPABASE_SERVICE_KEY|SERVICE_ROLE_KEY)\b"
)

_CLIENT_PATH_RE = re.compile(r"(^|/)(pages|components|app|client)/|\.client\.")
# Route handlers and pages-router API routes run on the server.
_SERVER_ROUTE_RE = re.compile(r"(^|/)(app|pages)/api/")


def is_client_side_path(rel_path: str) -> bool:
    """Paths that usually end up in browser bundles."""
    if _SERVER_ROUTE_RE.search(rel_path):
        return False
    return bool(_CLIENT_PATH_RE.search(rel_path))


class SupabaseServiceRoleKeyRule(Rule):
    """
    Service-role keys bypass row level security. In client code they are a
    blocker; anywhere else they are still worth a high-severity review.
    """

    id = "supabase-service-role-key"
    description = "Detects exposure of Supabase service role keys in client-side code."
    stacks = frozenset({ANY_STACK})

    async def detect(self, context: ScanContext) -> list[Finding]:
        findings: list[Finding] = []
        for abs_path, rel_path in context.iter_files():
            if not is_code_file(rel_path):
                continue
            code = await context.read_file(abs_path)
            if not code:
                continue

            client = is_client_component(code) or is_client_side_path(rel_path)
            for n, m in enumerate(_SERVICE_KEY_RE.finditer(code)):
                if n >= PER_FILE_CAP:
                    break
                name = m.group(0)
                if client:
                    severity = Severity.BLOCKER
                    message = (
                        f"Service role key '{name}' detected in client-side code. "
                        "This is a critical security vulnerability."
                    )
                    hint = (
                        "Service role keys must NEVER be exposed to the client. Move all service "
                        "role operations to server-side code (API routes, server actions)."
                    )
                else:
                    severity = Severity.HIGH
                    message = (
                        f"Service role key '{name}' usage detected. "
                        "Ensure this is only used in secure server-side contexts."
                    )
                    hint = (
                        "Service role keys bypass RLS and should be used cautiously. Consider "
                        "anon keys with proper RLS policies instead."
                    )
                findings.append(
                    make_finding(self.id, severity, str(abs_path), code, m.start(), message, hint)
                )
        return findings
