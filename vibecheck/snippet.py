"""
Snippet object-scanner: pull literal `{ ... }` blocks out of raw source text.

Rules call this instead of a real parser. Every function here is total:
truncated input, unbalanced braces, unterminated comments or a non-literal
argument all come back as None ("cannot analyze") and never raise.

Typical usage:
    from vibecheck.snippet import (
        block_contains_key, extract_inline_argument, extract_named_block, find_call_sites,
    )

    for idx in find_call_sites(code, "findMany"):
        arg = extract_inline_argument(code, idx)
        where = extract_named_block(arg, "where") if arg else None
        if where and not block_contains_key(where, ["orgId"]):
            ...
"""

from __future__ import annotations

import re
from typing import Iterable, Optional

OPEN = "{"
CLOSE = "}"


def _skip_insignificant(text: str, i: int) -> Optional[int]:
    """
    Advance past whitespace, // line comments and /* block comments */.

    Returns the index of the next significant character (may equal
    len(text)), or None if a comment is unterminated.
    """
    n = len(text)
    while i < n:
        ch = text[i]
        if ch.isspace():
            i += 1
            continue
        if ch == "/" and text.startswith("//", i):
            nl = text.find("\n", i + 2)
            if nl < 0:
                return None
            i = nl + 1
            continue
        if ch == "/" and text.startswith("/*", i):
            end = text.find("*/", i + 2)
            if end < 0:
                return None
            i = end + 2
            continue
        break
    return i


def _balanced_block(text: str, start: int) -> Optional[str]:
    """Return text[start:j+1] where text[start] is '{' and j closes it at depth 0."""
    depth = 0
    for j in range(start, len(text)):
        ch = text[j]
        if ch == OPEN:
            depth += 1
        elif ch == CLOSE:
            depth -= 1
            if depth == 0:
                return text[start : j + 1]
    return None


def extract_inline_argument(text: str, start_offset: int = 0) -> Optional[str]:
    """
    Return the first call argument after start_offset if it is a literal block.

    Finds the first '(' at or after start_offset, skips whitespace and
    comments, and requires the next significant character to be '{'.
    Variables, function calls and anything else yield None.

    >>> extract_inline_argument("foo(/* x */ { a: 1 })", 0)
    '{ a: 1 }'
    >>> extract_inline_argument("foo(args)", 0) is None
    True
    """
    if not text:
        return None
    start_offset = max(0, start_offset)
    if start_offset >= len(text):
        return None
    paren = text.find("(", start_offset)
    if paren < 0:
        return None
    i = _skip_insignificant(text, paren + 1)
    if i is None or i >= len(text) or text[i] != OPEN:
        return None
    return _balanced_block(text, i)


def extract_named_block(object_text: Optional[str], key_name: str) -> Optional[str]:
    """
    Return the `{ ... }` value of the first `key_name:` in object_text.

    Used to pull a nested clause (e.g. `where`) out of an already extracted
    literal. If the value is not itself a literal block, returns None.
    """
    if not object_text or not key_name:
        return None
    m = re.search(rf"\b{re.escape(key_name)}\s*:", object_text)
    if m is None:
        return None
    i = _skip_insignificant(object_text, m.end())
    if i is None or i >= len(object_text) or object_text[i] != OPEN:
        return None
    return _balanced_block(object_text, i)


def block_contains_key(block: Optional[str], candidate_keys: Iterable[str]) -> bool:
    """
    True if any candidate appears as a bare `key:` anywhere in block.

    Word-boundary match: `orgId` does not match `orgIdentifier:`.
    """
    if not block:
        return False
    for key in candidate_keys:
        if key and re.search(rf"\b{re.escape(key)}\b\s*:", block):
            return True
    return False


def find_call_sites(text: str, call_name: str) -> list[int]:
    """Return offsets of every `.call_name(` method call in text."""
    pattern = re.compile(rf"\.{re.escape(call_name)}\s*\(")
    return [m.start() for m in pattern.finditer(text)]
