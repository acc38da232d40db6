# Client components importing modules that belong on the server.

from __future__ import annotations

from typing import Optional

from vibecheck.context import ScanContext
from vibecheck.findings.models import Finding, Severity
from vibecheck.rules._shared import is_code_file, make_finding, mentions_use_client
from vibecheck.rules.base import Rule

SERVER_ONLY_MODULES = (
    "server-only",
    "next/headers",
    "next/server",
    "fs",
    "node:fs",
    "node:crypto",
    "crypto",
)

HEAVY_MODULES = ("aws-sdk", "puppeteer", "playwright", "@prisma/client")


def find_import(code: str, module: str) -> Optional[int]:
    """Offset of `from "module"` / `from 'module'`, or None."""
    for quote in ('"', "'"):
        idx = code.find(f"from {quote}{module}{quote}")
        if idx >= 0:
            return idx
    return None


class NextServerOnlyImportInClientRule(Rule):
    id = "next-server-only-import-in-client"
    description = "Warn when server-only modules are imported in client components."
    stacks = frozenset({"nextjs"})

    async def detect(self, context: ScanContext) -> list[Finding]:
        findings: list[Finding] = []
        for abs_path, rel_path in context.iter_files():
            if not is_code_file(rel_path):
                continue
            code = await context.read_file(abs_path)
            if not code or not mentions_use_client(code):
                continue

            for module in SERVER_ONLY_MODULES:
                idx = find_import(code, module)
                if idx is None:
                    continue
                findings.append(
                    make_finding(
                        self.id,
                        Severity.INFO,
                        str(abs_path),
                        code,
                        idx,
                        f"Client component imports a server-only module ({module}).",
                        "Move server-only logic to a server file (route handler / server action) "
                        "and call it from the client.",
                    )
                )
                break
        return findings


class NextHeavyClientImportsRule(Rule):
    id = "next-heavy-client-imports"
    description = "Warn when heavy deps are imported in client components."
    stacks = frozenset({"nextjs"})

    async def detect(self, context: ScanContext) -> list[Finding]:
        findings: list[Finding] = []
        for abs_path, rel_path in context.iter_files():
            if not is_code_file(rel_path):
                continue
            code = await context.read_file(abs_path)
            if not code or not mentions_use_client(code):
                continue

            for module in HEAVY_MODULES:
                idx = find_import(code, module)
                if idx is None:
                    continue
                findings.append(
                    make_finding(
                        self.id,
                        Severity.INFO,
                        str(abs_path),
                        code,
                        idx,
                        f"Client component imports potentially heavy dependency: {module}.",
                        "Consider moving this import to the server or dynamically importing it where needed.",
                    )
                )
        return findings
