"""
Tenant isolation for Prisma data access.

Two rules share one detector:
- prisma-missing-tenant-filter: reads (findMany / findFirst)
- prisma-write-tenant-boundary: bulk writes (updateMany / deleteMany)

Both report Prisma referenced from a client component as high (one per file,
no further heuristics for that file). On server-ish paths they report a call
whose first argument is an inline `{ ... }` literal with a `where` block
that mentions none of the tenant keys. Anything the snippet scanner cannot
analyze (variable argument, no `where` literal, unbalanced text) is skipped.
The read rule only looks at files that mention `prisma.`; the write rule also
checks clients under another name, e.g. `db.post.deleteMany(...)`.
`// vibecheck:tenant-ok` shortly before the call suppresses it.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import ClassVar

from vibecheck.context import ScanContext
from vibecheck.findings.models import Finding, Severity
from vibecheck.rules._shared import (
    has_marker_before,
    is_client_component,
    is_code_file,
    make_finding,
    simple_path_match,
)
from vibecheck.rules.base import ANY_STACK, Rule
from vibecheck.snippet import (
    block_contains_key,
    extract_inline_argument,
    extract_named_block,
    find_call_sites,
)

TENANT_OK_MARKER = "vibecheck:tenant-ok"
PER_FILE_CAP = 6
IGNORED_PATHS = ("**/node_modules/**", "**/.next/**", "**/dist/**")

CLIENT_PRISMA_MESSAGE = (
    'Client component ("use client") references Prisma. '
    "Prisma must never run/bundle in client-side code."
)
CLIENT_PRISMA_HINT = (
    "Move Prisma calls into a Route Handler (app/api/*), Server Action, or a server-only "
    "module (lib/server/*). Client should call the server via fetch/action."
)


class PrismaTenantRule(Rule):
    """Base for tenant-key checks over a fixed set of Prisma call names."""

    calls: ClassVar[tuple[str, ...]] = ()
    fix_hint: ClassVar[str] = ""
    # Skip files that never mention `prisma.` before the tenant heuristic.
    requires_prisma_reference: ClassVar[bool] = True

    @abstractmethod
    def message_for(self, call: str) -> str:
        """Finding message for a call missing tenant keys."""

    def missing_tenant_calls(self, code: str, tenant_keys: list[str]) -> list[tuple[str, int]]:
        """(call name, offset) of calls whose inline `where` lacks every tenant key."""
        hits: list[tuple[str, int]] = []
        for call in self.calls:
            for idx in find_call_sites(code, call):
                if len(hits) >= PER_FILE_CAP:
                    return hits
                if has_marker_before(code, idx, TENANT_OK_MARKER):
                    continue
                arg = extract_inline_argument(code, idx)
                where = extract_named_block(arg, "where")
                if where is None:
                    continue
                if block_contains_key(where, tenant_keys):
                    continue
                hits.append((call, idx))
        return hits

    async def detect(self, context: ScanContext) -> list[Finding]:
        cfg = context.config
        findings: list[Finding] = []
        for abs_path, rel_path in context.iter_files():
            if not is_code_file(rel_path) or simple_path_match(rel_path, IGNORED_PATHS):
                continue
            code = await context.read_file(abs_path)
            if not code:
                continue
            mentions_prisma = "prisma." in code

            if mentions_prisma and is_client_component(code):
                findings.append(
                    make_finding(
                        self.id,
                        Severity.HIGH,
                        str(abs_path),
                        code,
                        code.index("prisma."),
                        CLIENT_PRISMA_MESSAGE,
                        CLIENT_PRISMA_HINT,
                    )
                )
                continue

            if self.requires_prisma_reference and not mentions_prisma:
                continue
            if cfg.tenant_paths and not simple_path_match(rel_path, cfg.tenant_paths):
                continue

            for call, idx in self.missing_tenant_calls(code, cfg.tenant_keys):
                findings.append(
                    make_finding(
                        self.id,
                        Severity.INFO,
                        str(abs_path),
                        code,
                        idx,
                        self.message_for(call),
                        self.fix_hint,
                    )
                )
        return findings


class PrismaMissingTenantFilterRule(PrismaTenantRule):
    id = "prisma-missing-tenant-filter"
    description = (
        "Flags Prisma usage in client components (HIGH) and heuristically warns on server "
        "reads missing tenant filters (INFO)."
    )
    stacks = frozenset({ANY_STACK})
    calls = ("findMany", "findFirst")
    fix_hint = (
        "If this is multi-tenant data, add tenant/workspace/org keys to `where`, enforce via "
        "middleware, or suppress with `// vibecheck:tenant-ok` if the query is safe."
    )

    def message_for(self, call: str) -> str:
        return (
            f"Prisma {call}() has a where: but does not mention tenant/workspace/org "
            "constraints (heuristic)."
        )


class PrismaWriteTenantBoundaryRule(PrismaTenantRule):
    id = "prisma-write-tenant-boundary"
    description = (
        "Detect Prisma updateMany/deleteMany that may be missing tenant/workspace/org "
        "constraints (low-noise)."
    )
    stacks = frozenset({"nextjs"})
    calls = ("updateMany", "deleteMany")
    requires_prisma_reference = False
    fix_hint = (
        "For updateMany/deleteMany ensure `where` includes tenant/workspace/org constraints, "
        "or add `// vibecheck:tenant-ok` above if intentionally global."
    )

    def message_for(self, call: str) -> str:
        return f"Prisma {call}() is missing tenant/workspace/org keys in `where` (high-risk operation)."
