"""
Discovery prepass: gather signals shared by all rules before any rule runs.

One pass over the resolved file list collects:
- names of authorization guard functions the codebase uses or exports
- inline route hints, written as comments anywhere in the code:
      // vibecheck:public-api /api/health
      // vibecheck:public-api-prefix /api/embed-proxy
      // vibecheck:proxy-api-prefix /api/stripe/webhook
- proxy-ish route prefixes inferred from well-known file locations

User configuration (config.auth_guards and config.auth_hints) is merged on
top; configured entries are always kept, discovered entries only add.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable

from vibecheck.context import DiscoveredSignals, ScanContext, normalize_api_path

logger = logging.getLogger(__name__)

# Well-known guard symbols across NextAuth / Clerk / custom stacks.
COMMON_GUARDS: tuple[str, ...] = (
    "getServerSession",
    "unstable_getServerSession",
    "auth",
    "currentUser",
    "requireAuth",
    "requireUser",
    "requireWorkspace",
    "requireAuthedWorkspace",
    "withWorkspace",
    "withFeatureFlag",
)

CODE_EXTENSIONS = (".ts", ".tsx", ".js", ".jsx")

# Route-file location fragment -> proxy prefix it implies.
INFERRED_PROXY_PREFIXES: tuple[tuple[str, str], ...] = (
    ("/app/api/embed-proxy/", "/api/embed-proxy"),
    ("/app/api/og/", "/api/og"),
    ("/app/api/stripe/webhook/", "/api/stripe/webhook"),
    ("/app/api/health/", "/api/health"),
    ("/app/api/_debug/", "/api/_debug"),
)

_EXPORTED_FUNCTION_RE = re.compile(r"export\s+(?:async\s+)?function\s+([A-Za-z0-9_]+)")
_EXPORTED_CONST_RE = re.compile(r"export\s+const\s+([A-Za-z0-9_]+)\s*=")
_REQUIRE_PREFIX_RE = re.compile(r"^require", re.IGNORECASE)

_HINT_PUBLIC_EXACT_RE = re.compile(r"vibecheck:public-api\s+(\S+)")
_HINT_PUBLIC_PREFIX_RE = re.compile(r"vibecheck:public-api-prefix\s+(\S+)")
_HINT_PROXY_PREFIX_RE = re.compile(r"vibecheck:proxy-api-prefix\s+(\S+)")


def is_guard_name(name: str) -> bool:
    """True for catalogue guards and `require*` / `with*` naming conventions."""
    if name in COMMON_GUARDS:
        return True
    return bool(_REQUIRE_PREFIX_RE.match(name)) or name.startswith("with")


def discover_guards_in_code(code: str) -> list[str]:
    """
    Return guard names declared or referenced in one file, first-seen order.

    Exported functions and consts are kept when is_guard_name() accepts them;
    any catalogue name mentioned anywhere in the file is kept too, which
    covers re-exported or aliased guards.
    """
    found: dict[str, None] = {}
    for regex in (_EXPORTED_FUNCTION_RE, _EXPORTED_CONST_RE):
        for m in regex.finditer(code):
            name = m.group(1)
            if is_guard_name(name):
                found.setdefault(name, None)
    for guard in COMMON_GUARDS:
        if guard in code:
            found.setdefault(guard, None)
    return list(found)


def discover_route_hints(code: str) -> tuple[list[str], list[str], list[str]]:
    """Return (public exact, public prefix, proxy prefix) hint paths from inline comments."""
    public_exact: list[str] = []
    public_prefix: list[str] = []
    proxy_prefix: list[str] = []
    for line in code.split("\n"):
        # `public-api-prefix` also starts with `public-api`; the exact pattern
        # requires whitespace right after the marker so it does not match it.
        m = _HINT_PUBLIC_EXACT_RE.search(line)
        if m:
            public_exact.append(normalize_api_path(m.group(1)))
        m = _HINT_PUBLIC_PREFIX_RE.search(line)
        if m:
            public_prefix.append(normalize_api_path(m.group(1)))
        m = _HINT_PROXY_PREFIX_RE.search(line)
        if m:
            proxy_prefix.append(normalize_api_path(m.group(1)))
    return public_exact, public_prefix, proxy_prefix


def infer_proxy_prefixes(rel_path: str) -> list[str]:
    """Proxy prefixes implied by where a file lives (health checks, OG images, webhooks, debug)."""
    # Leading slash lets root-level `app/api/...` paths match the fragments.
    probe = "/" + rel_path.lstrip("/")
    return [prefix for fragment, prefix in INFERRED_PROXY_PREFIXES if fragment in probe]


def should_scan_for_guards(rel_path: str) -> bool:
    """Eligibility filter: auth-related path segment or a recognized code extension."""
    return "/api/" in rel_path or "/auth" in rel_path or rel_path.endswith(CODE_EXTENSIONS)


def merge_with_config(
    guards: Iterable[str],
    public_exact: Iterable[str],
    public_prefix: Iterable[str],
    proxy_prefix: Iterable[str],
    context: ScanContext,
) -> DiscoveredSignals:
    """Union discovered signals with user configuration; config entries are never dropped."""
    cfg = context.config
    hints = cfg.auth_hints
    return DiscoveredSignals.build(
        guards=[*guards, *cfg.auth_guards, *hints.guards],
        public_api_exact=[*public_exact, *hints.public_api_exact],
        public_api_prefix=[*public_prefix, *hints.public_api_prefix],
        proxy_api_prefix=[*proxy_prefix, *hints.proxy_api_prefix],
    )


async def discover(context: ScanContext) -> DiscoveredSignals:
    """
    Run the discovery prepass over context.files in their resolved order.

    Files outside the eligibility filter, without a code extension, or empty
    after the bounded read (oversize/unreadable) are skipped.
    """
    guards: list[str] = []
    public_exact: list[str] = []
    public_prefix: list[str] = []
    proxy_prefix: list[str] = []
    scanned = 0

    for abs_path, rel_path in context.iter_files():
        if not rel_path.endswith(CODE_EXTENSIONS):
            continue
        if not should_scan_for_guards(rel_path):
            continue

        code = await context.read_file(abs_path)
        if not code:
            continue
        scanned += 1

        guards.extend(discover_guards_in_code(code))
        exact, prefix, proxy = discover_route_hints(code)
        public_exact.extend(exact)
        public_prefix.extend(prefix)
        proxy_prefix.extend(proxy)
        proxy_prefix.extend(infer_proxy_prefixes(rel_path))

    signals = merge_with_config(guards, public_exact, public_prefix, proxy_prefix, context)
    logger.info(
        "Discovery scanned %d file(s): %d guard(s), %d public exact, %d public prefix, %d proxy prefix",
        scanned,
        len(signals.guards),
        len(signals.public_api_exact),
        len(signals.public_api_prefix),
        len(signals.proxy_api_prefix),
    )
    return signals
