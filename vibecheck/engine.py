"""
Execution engine: run the discovery prepass once, then every applicable rule.

The engine never fails. A prepass failure becomes one info finding (and the
scan continues with empty signals); a rule failure becomes one info finding
attributed to that rule, and the remaining rules still run.
"""

from __future__ import annotations

import logging
from typing import Sequence

from vibecheck.context import DiscoveredSignals, ScanContext
from vibecheck.discovery import discover
from vibecheck.findings.models import Finding, Severity
from vibecheck.rules.base import Rule, RuleResult

logger = logging.getLogger(__name__)

DISCOVERY_RULE_ID = "discover-auth-guards"


def _error_text(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


async def run_discovery(context: ScanContext) -> list[Finding]:
    """Publish prepass signals onto the context; return a finding if discovery failed."""
    try:
        signals = await discover(context)
    except Exception as exc:
        logger.exception("Discovery prepass failed: %s", exc)
        context.discovered = DiscoveredSignals.empty()
        return [
            Finding(
                rule_id=DISCOVERY_RULE_ID,
                severity=Severity.INFO,
                message=f"Auth discovery failed: {_error_text(exc)}",
                file=str(context.root_dir),
            )
        ]
    context.discovered = signals
    return []


def result_findings(result: RuleResult, context: ScanContext) -> list[Finding]:
    """Findings of a successful result, or one info finding describing the failure."""
    if result.ok:
        return list(result.findings)
    return [
        Finding(
            rule_id=result.rule_id,
            severity=Severity.INFO,
            message=f"Rule crashed: {_error_text(result.error)}",
            file=str(context.root_dir),
        )
    ]


async def run_all(context: ScanContext, rules: Sequence[Rule]) -> list[Finding]:
    """
    Run the prepass, then each rule applicable to context.stack, sequentially.

    Findings are concatenated in rule-registration order and, within a rule,
    in the order it produced them. No cross-rule deduplication.
    """
    findings = await run_discovery(context)

    ran = 0
    for rule in rules:
        if not rule.applies_to(context.stack):
            logger.debug("Skipping rule %s for stack %s", rule.id, context.stack)
            continue
        result = await rule.evaluate(context)
        ran += 1
        produced = result_findings(result, context)
        logger.debug("Rule %s produced %d finding(s)", rule.id, len(produced))
        findings.extend(produced)

    logger.info("Ran %d rule(s) over %d file(s): %d finding(s)", ran, len(context.files), len(findings))
    return findings
