# Rule interface (abstract base class): defines the contract all rules must implement.
# Concrete rules (api_auth_guard, prisma_tenant, etc.) subclass Rule and implement detect().

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import ClassVar, FrozenSet, Optional

from vibecheck.context import ScanContext
from vibecheck.findings.models import Finding

logger = logging.getLogger(__name__)

# Stack tag meaning "runs for every target stack".
ANY_STACK = "*"


@dataclass(frozen=True)
class RuleResult:
    """Outcome of one rule evaluation: either findings or the error that stopped it."""

    rule_id: str
    findings: tuple[Finding, ...] = ()
    error: Optional[BaseException] = field(default=None, compare=False)

    @property
    def ok(self) -> bool:
        return self.error is None


class Rule(ABC):
    """
    Abstract base class for all footgun rules.

    Subclasses must define:
    - id: str: stable rule identifier, also the baseline/report key namespace
    - description: str: one-line summary used in reports and SARIF metadata
    - stacks: frozenset[str]: target stacks the rule runs for, or {ANY_STACK}
    - detect(context) -> list[Finding]: scan the corpus and return findings

    Rules are stateless; per-scan state lives in the ScanContext. detect() may
    raise; evaluate() turns that into a failed RuleResult.
    """

    id: ClassVar[str]
    description: ClassVar[str]
    stacks: ClassVar[FrozenSet[str]] = frozenset({ANY_STACK})

    def applies_to(self, stack: str) -> bool:
        """True when the rule should run for the resolved target stack."""
        return stack == "auto" or ANY_STACK in self.stacks or stack in self.stacks

    @abstractmethod
    async def detect(self, context: ScanContext) -> list[Finding]:
        """
        Analyze the corpus and return any findings.

        Args:
            context: Shared scan state. Read files with `await context.read_file(path)`;
                     prepass signals are in context.discovered.

        Returns:
            Findings in the order produced. Empty list if nothing found.
        """
        ...

    async def evaluate(self, context: ScanContext) -> RuleResult:
        """Run detect() and capture success or failure as a RuleResult."""
        try:
            findings = tuple(await self.detect(context))
        except Exception as exc:
            logger.exception("Rule %s failed: %s", self.id, exc)
            return RuleResult(rule_id=self.id, error=exc)
        return RuleResult(rule_id=self.id, findings=findings)
