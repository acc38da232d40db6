# Missing authorization: Next.js route handlers that never call an auth guard.

from __future__ import annotations

import re
from typing import Sequence

from vibecheck.context import ScanContext
from vibecheck.findings.models import Finding, Severity
from vibecheck.rules._shared import is_next_api_route, make_finding
from vibecheck.rules.base import Rule

FALLBACK_GUARDS = ("getServerSession", "auth")
PUBLIC_MARKER = "vibecheck:public"

_ROUTE_FILE_RE = re.compile(r"/route\.(ts|tsx|js|jsx)$")
_DYNAMIC_SEGMENT_RE = re.compile(r"\[([^\]]+)\]")


def route_path_for(rel_path: str) -> str:
    """
    Map a route file to its URL path, best-effort.

    >>> route_path_for("app/api/users/[id]/route.ts")
    '/api/users/:id'
    """
    idx = rel_path.find("app/api/")
    if idx < 0:
        return ""
    after = rel_path[idx + len("app/api/") :]
    after = _ROUTE_FILE_RE.sub("", after)
    if re.fullmatch(r"route\.(ts|tsx|js|jsx)", after):
        after = ""
    routeish = _DYNAMIC_SEGMENT_RE.sub(r":\1", after)
    return ("/api/" + routeish).rstrip("/") or "/api"


def calls_guard(code: str, guards: Sequence[str]) -> bool:
    return any(f"{g}(" in code or f"{g} (" in code for g in guards)


class NextApiAuthGuardRule(Rule):
    """
    Route files under app/api/ must call an auth guard.

    Routes matching a discovered or configured public/proxy hint are reported
    at info instead of high; a file containing `vibecheck:public` is skipped.
    """

    id = "next-api-auth-guard"
    description = "Ensure API routes call an auth guard early."
    stacks = frozenset({"nextjs"})

    async def detect(self, context: ScanContext) -> list[Finding]:
        signals = context.discovered
        guards = list(context.config.auth_guards or signals.guards or FALLBACK_GUARDS)

        findings: list[Finding] = []
        for abs_path, rel_path in context.iter_files():
            if not is_next_api_route(rel_path):
                continue
            code = await context.read_file(abs_path)
            if not code:
                continue
            if PUBLIC_MARKER in code:
                continue
            if calls_guard(code, guards):
                continue

            route_path = route_path_for(rel_path)
            intentional = signals.is_public(route_path) or signals.is_proxy(route_path)
            severity = Severity.INFO if intentional else Severity.HIGH
            extra = " (appears intentionally public/proxy; verify this is intended)" if intentional else ""

            findings.append(
                make_finding(
                    self.id,
                    severity,
                    str(abs_path),
                    code,
                    0,
                    "API route appears to lack an auth guard call."
                    + extra
                    + ' If it is intentionally public, add comment "vibecheck:public".',
                    f"Call your auth guard early (e.g., {', '.join(guards[:3])}) and enforce "
                    "role/tenant checks before DB access. If intentionally public/proxy, add "
                    '"vibecheck:public" or a hint (vibecheck:public-api / vibecheck:public-api-prefix).',
                )
            )
        return findings
