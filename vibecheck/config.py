from __future__ import annotations

"""
Scanner configuration: target stack, auth hints, tenant keys and read limits.

Configuration comes from the first config file found at the scan root
(vibecheck.json, vibecheck.config.json, .vibecheckrc.json) and is then
overridden by CLI options. A missing or broken config file never aborts a
scan; defaults are used instead.
"""

import json
import logging
from pathlib import Path
from typing import Any, List, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

CONFIG_FILES = ("vibecheck.json", "vibecheck.config.json", ".vibecheckrc.json")

StackName = Literal["auto", "nextjs", "vite", "nestjs"]
AuthKind = Literal["auto", "nextauth", "clerk", "betterauth", "custom", "none"]

STACK_NAMES = ("auto", "nextjs", "vite", "nestjs")
AUTH_KINDS = ("auto", "nextauth", "clerk", "betterauth", "custom", "none")

DEFAULT_MAX_FILE_BYTES = 1_000_000
DEFAULT_TENANT_KEYS = ["workspaceId", "orgId", "tenantId", "accountId", "teamId"]
DEFAULT_TENANT_PATHS = ["app/api/", "lib/server/", "server/", "prisma/"]


def parse_stack(value: Optional[str]) -> str:
    """Normalize a user-supplied stack name; unknown values fall back to auto."""
    s = (value or "auto").strip().lower()
    if s == "nest":
        return "nestjs"
    return s if s in STACK_NAMES else "auto"


class AuthHints(BaseModel):
    """User-declared guard names and intentionally public/proxy API paths."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    guards: List[str] = Field(default_factory=list)
    public_api_exact: List[str] = Field(default_factory=list, alias="publicApiExact")
    public_api_prefix: List[str] = Field(default_factory=list, alias="publicApiPrefix")
    proxy_api_prefix: List[str] = Field(default_factory=list, alias="proxyApiPrefix")


class Config(BaseModel):
    """Resolved scanner configuration for one invocation."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    stack: StackName = "auto"
    auth: AuthKind = "auto"
    auth_guards: List[str] = Field(default_factory=list, alias="authGuards")
    ignore: List[str] = Field(default_factory=list)
    max_file_bytes: int = Field(DEFAULT_MAX_FILE_BYTES, gt=0, alias="maxFileBytes")
    tenant_keys: List[str] = Field(
        default_factory=lambda: list(DEFAULT_TENANT_KEYS), alias="tenantKeys"
    )
    tenant_paths: List[str] = Field(
        default_factory=lambda: list(DEFAULT_TENANT_PATHS), alias="tenantPaths"
    )
    auth_hints: AuthHints = Field(default_factory=AuthHints, alias="authHints")

    @field_validator("stack", mode="before")
    @classmethod
    def _normalize_stack(cls, v: Any) -> str:
        return parse_stack(v if isinstance(v, str) else None)

    @field_validator("auth", mode="before")
    @classmethod
    def _normalize_auth(cls, v: Any) -> str:
        s = str(v or "auto").strip().lower()
        return s if s in AUTH_KINDS else "auto"

    def to_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


def find_config_file(root: Path) -> Optional[Path]:
    """Return the first config file present at root, or None."""
    for name in CONFIG_FILES:
        candidate = root / name
        if candidate.is_file():
            return candidate
    return None


def _read_config_file(path: Path) -> dict:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning("Ignoring unreadable config file %s: %s", path, e)
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring config file %s: top-level value is not an object", path)
        return {}
    return data


def load_config(root: Path, overrides: Optional[Mapping[str, Any]] = None) -> Config:
    """
    Load configuration for a scan rooted at `root`.

    File values are applied first, then non-None `overrides` (keyed by field
    name or alias). Invalid file contents are logged and replaced by defaults;
    overrides are always applied.
    """
    data: dict = {}
    path = find_config_file(root)
    if path is not None:
        data = _read_config_file(path)
        logger.info("Loaded config from %s", path)

    merged = dict(data)
    for key, value in (overrides or {}).items():
        if value is not None:
            merged[key] = value

    try:
        return Config.model_validate(merged)
    except ValidationError as e:
        logger.warning("Invalid configuration in %s, using defaults: %s", path or root, e)
        clean = {k: v for k, v in (overrides or {}).items() if v is not None}
        return Config.model_validate(clean)
