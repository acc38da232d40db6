# Shared scan context: root, file list, bounded async reader, resolved config,
# detected stack and the signals published by the discovery prepass.

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Sequence

from vibecheck.config import Config

logger = logging.getLogger(__name__)


def _uniq(items: Iterable[str]) -> tuple[str, ...]:
    """Deduplicate, dropping empty strings, keeping first-seen order."""
    seen: dict[str, None] = {}
    for item in items:
        if item:
            seen.setdefault(item, None)
    return tuple(seen)


def normalize_api_path(value: str) -> str:
    """
    Normalize a route path token: single leading slash, no trailing slash.

    >>> normalize_api_path("api/health/")
    '/api/health'
    """
    s = str(value or "").strip()
    if not s:
        return s
    s = "/" + s.lstrip("/")
    if len(s) > 1:
        s = s.rstrip("/") or "/"
    return s


@dataclass(frozen=True)
class DiscoveredSignals:
    """Guard names and public/proxy route hints found by the discovery prepass."""

    guards: tuple[str, ...] = ()
    public_api_exact: tuple[str, ...] = ()
    public_api_prefix: tuple[str, ...] = ()
    proxy_api_prefix: tuple[str, ...] = ()

    @classmethod
    def empty(cls) -> "DiscoveredSignals":
        return cls()

    @classmethod
    def build(
        cls,
        guards: Iterable[str] = (),
        public_api_exact: Iterable[str] = (),
        public_api_prefix: Iterable[str] = (),
        proxy_api_prefix: Iterable[str] = (),
    ) -> "DiscoveredSignals":
        """Construct with trimmed guard names and normalized, deduplicated paths."""
        return cls(
            guards=_uniq(str(g).strip() for g in guards),
            public_api_exact=_uniq(normalize_api_path(p) for p in public_api_exact),
            public_api_prefix=_uniq(normalize_api_path(p) for p in public_api_prefix),
            proxy_api_prefix=_uniq(normalize_api_path(p) for p in proxy_api_prefix),
        )

    def is_public(self, route_path: str) -> bool:
        if not route_path:
            return False
        if route_path in self.public_api_exact:
            return True
        return any(route_path.startswith(p) for p in self.public_api_prefix)

    def is_proxy(self, route_path: str) -> bool:
        return bool(route_path) and any(route_path.startswith(p) for p in self.proxy_api_prefix)


def read_text(path: Path, max_bytes: int) -> str:
    """
    Read a file as text, bounded by max_bytes.

    Oversize or unreadable files yield "" and are never loaded in full.
    Bad UTF-8 is replaced rather than raised.
    """
    try:
        size = path.stat().st_size
        if size > max_bytes:
            logger.debug("Skipping %s: %d bytes exceeds limit of %d", path, size, max_bytes)
            return ""
        return path.read_bytes().decode("utf-8", errors="replace")
    except OSError as e:
        logger.warning("Failed to read file %s: %s", path, e)
        return ""


def line_col(text: str, offset: int) -> tuple[int, int]:
    """Return the 1-based (line, column) of a character offset in text."""
    offset = max(0, min(offset, len(text)))
    line = text.count("\n", 0, offset) + 1
    line_start = text.rfind("\n", 0, offset) + 1
    return line, offset - line_start + 1


def to_posix(path: str) -> str:
    return path.replace("\\", "/")


class ScanContext:
    """
    Per-scan state shared by the prepass and every rule.

    Rules use ctx.files / ctx.rel_paths to pick files, `await ctx.read_file()`
    to load them, ctx.config for settings and ctx.discovered for the
    prepass signals. `discovered` can be published exactly once.
    """

    def __init__(
        self,
        root_dir: Path,
        files: Sequence[Path],
        config: Optional[Config] = None,
        *,
        stack: str = "auto",
        rel_paths: Optional[Sequence[str]] = None,
    ) -> None:
        self.root_dir = Path(root_dir)
        self.files: tuple[Path, ...] = tuple(Path(f) for f in files)
        self.config = config if config is not None else Config()
        self.stack = stack
        if rel_paths is None:
            rel_paths = [self.relative(f) for f in self.files]
        self.rel_paths: tuple[str, ...] = tuple(to_posix(p) for p in rel_paths)
        self._discovered: Optional[DiscoveredSignals] = None

    @property
    def discovered(self) -> DiscoveredSignals:
        if self._discovered is None:
            return DiscoveredSignals.empty()
        return self._discovered

    @discovered.setter
    def discovered(self, signals: DiscoveredSignals) -> None:
        if self._discovered is not None:
            raise RuntimeError("discovered signals were already published for this scan")
        self._discovered = signals

    def relative(self, path: Path) -> str:
        """Root-relative POSIX path, or the path itself when outside the root."""
        try:
            return Path(path).relative_to(self.root_dir).as_posix()
        except ValueError:
            return to_posix(str(path))

    def iter_files(self) -> Iterable[tuple[Path, str]]:
        """Yield (absolute path, root-relative path) pairs in resolved order."""
        return zip(self.files, self.rel_paths)

    async def read_file(self, path: Path) -> str:
        return await asyncio.to_thread(read_text, Path(path), self.config.max_file_bytes)
