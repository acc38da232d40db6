# Client/server boundary: environment variables read from browser bundles.
# Covers Next.js client components (process.env) and Vite client code (import.meta.env).

from __future__ import annotations

import re

from vibecheck.context import ScanContext
from vibecheck.findings.models import Finding, Severity
from vibecheck.rules._shared import is_client_component, is_code_file, make_finding
from vibecheck.rules.base import Rule

PER_FILE_CAP = 3

_PROCESS_ENV_RE = re.compile(r"\bprocess\.env\.([A-Z0-9_]+)\b")
_IMPORT_META_ENV_RE = re.compile(r"import\.meta\.env\.([A-Z0-9_]+)")

# Vite always exposes these built-ins to client code.
VITE_BUILTIN_ENV = frozenset({"MODE", "DEV", "PROD", "SSR", "BASE_URL"})


class NextClientEnvLeakRule(Rule):
    id = "next-client-env-leak"
    description = "Client component references process.env (only warns on non-NEXT_PUBLIC env vars)."
    stacks = frozenset({"nextjs"})

    async def detect(self, context: ScanContext) -> list[Finding]:
        findings: list[Finding] = []
        for abs_path, rel_path in context.iter_files():
            if not is_code_file(rel_path):
                continue
            code = await context.read_file(abs_path)
            if not code or not is_client_component(code):
                continue

            in_file = 0
            for m in _PROCESS_ENV_RE.finditer(code):
                name = m.group(1)
                if name == "NODE_ENV" or name.startswith("NEXT_PUBLIC_"):
                    continue
                findings.append(
                    make_finding(
                        self.id,
                        Severity.INFO,
                        str(abs_path),
                        code,
                        m.start(),
                        f"Client component references process.env.{name}. "
                        "This may expose a secret if not public.",
                        "If this is truly safe, rename to NEXT_PUBLIC_* or move the lookup "
                        "server-side and pass a safe value to the client.",
                    )
                )
                in_file += 1
                if in_file >= PER_FILE_CAP:
                    break
        return findings


class ViteClientEnvLeakRule(Rule):
    id = "vite-client-env-leak"
    description = "Warn if non-VITE_ env vars are referenced in client code."
    stacks = frozenset({"vite"})

    async def detect(self, context: ScanContext) -> list[Finding]:
        findings: list[Finding] = []
        for abs_path, rel_path in context.iter_files():
            if not is_code_file(rel_path):
                continue
            code = await context.read_file(abs_path)
            if not code:
                continue

            for m in _IMPORT_META_ENV_RE.finditer(code):
                name = m.group(1)
                if name.startswith("VITE_") or name in VITE_BUILTIN_ENV:
                    continue
                findings.append(
                    make_finding(
                        self.id,
                        Severity.INFO,
                        str(abs_path),
                        code,
                        m.start(),
                        f"Vite client code references {m.group(0)}. "
                        "Only VITE_* variables are exposed by default.",
                        "If you intended this to be client-visible, rename to VITE_*; "
                        "otherwise keep secrets on the server.",
                    )
                )
                break
        return findings
