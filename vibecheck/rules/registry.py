"""
Rule registry: the ordered list of rules and the stack filter over it.

Registration order is report order; add new rules here.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from vibecheck.rules.api_auth_guard import NextApiAuthGuardRule
from vibecheck.rules.base import Rule
from vibecheck.rules.client_env_leak import NextClientEnvLeakRule, ViteClientEnvLeakRule
from vibecheck.rules.client_imports import (
    NextHeavyClientImportsRule,
    NextServerOnlyImportInClientRule,
)
from vibecheck.rules.cors_wildcard_credentials import CorsWildcardCredentialsRule
from vibecheck.rules.middleware_matcher import NextMiddlewareMatcherCoverageRule
from vibecheck.rules.prisma_tenant import (
    PrismaMissingTenantFilterRule,
    PrismaWriteTenantBoundaryRule,
)
from vibecheck.rules.supabase_service_role_key import SupabaseServiceRoleKeyRule


def all_rules() -> List[Rule]:
    """Return a fresh instance of every rule in registration order."""
    return [
        CorsWildcardCredentialsRule(),
        SupabaseServiceRoleKeyRule(),
        # Next.js
        NextClientEnvLeakRule(),
        NextServerOnlyImportInClientRule(),
        NextApiAuthGuardRule(),
        NextMiddlewareMatcherCoverageRule(),
        NextHeavyClientImportsRule(),
        # Vite
        ViteClientEnvLeakRule(),
        # Prisma (shared)
        PrismaMissingTenantFilterRule(),
        PrismaWriteTenantBoundaryRule(),
    ]


def rules_for_stack(stack: str, rules: Optional[Sequence[Rule]] = None) -> List[Rule]:
    """Rules applicable to the resolved stack, registration order preserved."""
    if rules is None:
        rules = all_rules()
    return [r for r in rules if r.applies_to(stack)]
