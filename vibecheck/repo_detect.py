# Target-stack auto-detection from marker files at the repository root.

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

logger = logging.getLogger(__name__)

NEXT_MARKERS = ("next.config.js", "next.config.mjs", "next.config.ts")
VITE_MARKERS = ("vite.config.ts", "vite.config.js", "vite.config.mjs")
NEST_MARKERS = ("nest-cli.json",)


def _has_any(root: Path, names: Iterable[str]) -> bool:
    return any((root / name).exists() for name in names)


def detect_stack(root: Path) -> str:
    """Return nextjs, vite, nestjs or auto for the repository at root."""
    if _has_any(root, NEXT_MARKERS) or (root / "app").is_dir():
        stack = "nextjs"
    elif _has_any(root, VITE_MARKERS):
        stack = "vite"
    elif _has_any(root, NEST_MARKERS) or (root / "src" / "main.ts").is_file():
        stack = "nestjs"
    else:
        stack = "auto"
    logger.info("Detected stack for %s: %s", root, stack)
    return stack


def resolve_stack(configured: str, root: Path) -> str:
    """An explicit configured stack wins; `auto` falls back to detection."""
    if configured and configured != "auto":
        return configured
    return detect_stack(root)
