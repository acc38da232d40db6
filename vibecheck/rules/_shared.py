# Helpers shared by rule bodies: file-kind checks, client-component detection,
# path matching and inline suppression markers.

from __future__ import annotations

import re
from typing import Iterable, Optional

from vibecheck.context import line_col
from vibecheck.findings.models import Finding, Severity

CODE_EXTENSIONS = (".ts", ".tsx", ".js", ".jsx", ".mjs", ".cjs")

_USE_CLIENT_RE = re.compile(r"(^|\n)\s*[\"']use client[\"']\s*;?\s*(\n|$)")


def is_code_file(rel_path: str) -> bool:
    return rel_path.endswith(CODE_EXTENSIONS)


def is_client_component(code: str, head: int = 300) -> bool:
    """True if a "use client" directive appears near the top of the file."""
    return bool(_USE_CLIENT_RE.search(code[:head]))


def mentions_use_client(code: str) -> bool:
    return '"use client"' in code or "'use client'" in code


def is_next_api_route(rel_path: str) -> bool:
    return rel_path.startswith("app/api/") or "/app/api/" in rel_path


def simple_path_match(rel_path: str, patterns: Iterable[str]) -> bool:
    """Substring match after stripping glob stars, e.g. `**/dist/**` -> `/dist/`."""
    for pattern in patterns:
        token = pattern.replace("**", "").replace("*", "")
        if token and token in rel_path:
            return True
    return False


def has_marker_before(code: str, offset: int, marker: str, window: int = 300) -> bool:
    """True if marker occurs within `window` characters before offset."""
    return marker in code[max(0, offset - window) : offset]


def make_finding(
    rule_id: str,
    severity: Severity,
    file: str,
    code: str,
    offset: int,
    message: str,
    fix_hint: Optional[str] = None,
) -> Finding:
    """Build a Finding located at a character offset of code."""
    line, col = line_col(code, offset)
    return Finding(
        rule_id=rule_id,
        severity=severity,
        message=message,
        file=file,
        line=line,
        col=col,
        fix_hint=fix_hint,
    )
