from __future__ import annotations

"""
Typer CLI entry point and orchestration of the scan pipeline.

    vibecheck scan [DIR]            scan and report (console, json or sarif)
    vibecheck baseline init [DIR]   record current findings as accepted
    vibecheck ci [DIR]              strict, changed-files scan against the default baseline

Pipeline: load config -> resolve stack -> enumerate files (optionally only
changed ones) -> discovery prepass + rules -> baseline suppression -> render.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console

from vibecheck.baseline import DEFAULT_BASELINE_FILE, apply_baseline, load_baseline, write_baseline
from vibecheck.changed_files import filter_changed, get_changed_files
from vibecheck.config import AUTH_KINDS, STACK_NAMES, Config, load_config, parse_stack
from vibecheck.context import ScanContext
from vibecheck.engine import run_all
from vibecheck.findings.models import Finding, exit_code
from vibecheck.repo_detect import resolve_stack
from vibecheck.reporting.console import print_findings
from vibecheck.reporting.json_report import render_json
from vibecheck.reporting.sarif import render_sarif
from vibecheck.rules.base import Rule
from vibecheck.rules.registry import all_rules, rules_for_stack
from vibecheck.traversal import find_source_files

logger = logging.getLogger(__name__)

app = typer.Typer(
    help="vibecheck - security footgun scanner for Next.js / Vite / NestJS + Prisma codebases.",
    no_args_is_help=True,
)
baseline_app = typer.Typer(help="Baseline management.", no_args_is_help=True)
app.add_typer(baseline_app, name="baseline")


class OutputFormat(str, Enum):
    console = "console"
    json = "json"
    sarif = "sarif"


@dataclass
class ScanRun:
    """Everything a renderer needs after a scan."""

    root: Path
    stack: str
    config: Config
    rules: List[Rule]
    findings: List[Finding]


def _check_stack(value: str) -> str:
    if value.strip().lower() not in (*STACK_NAMES, "nest"):
        raise typer.BadParameter(f"unknown stack {value!r}; expected one of {', '.join(STACK_NAMES)}")
    return value


def _check_auth(value: str) -> str:
    if value.strip().lower() not in AUTH_KINDS:
        raise typer.BadParameter(f"unknown auth {value!r}; expected one of {', '.join(AUTH_KINDS)}")
    return value


def _collect_files(root: Path, config: Config, changed_only: bool) -> List[Path]:
    try:
        files = find_source_files(root, ignore_patterns=config.ignore)
    except (FileNotFoundError, NotADirectoryError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e
    if changed_only:
        files = filter_changed(files, root, get_changed_files(root))
    if not files:
        logger.warning("No source files found under %s", root)
    return files


def run_scan(
    root: Path,
    *,
    stack: Optional[str] = None,
    auth: Optional[str] = None,
    changed_only: bool = False,
) -> ScanRun:
    """Load config, enumerate files and run every applicable rule (no baseline)."""
    root = root.resolve()
    # `auto` on the command line defers to the config file.
    cli_stack = parse_stack(stack)
    overrides = {
        "stack": None if cli_stack == "auto" else cli_stack,
        "auth": None if not auth or auth == "auto" else auth,
    }
    config = load_config(root, overrides)
    resolved = resolve_stack(config.stack, root)
    files = _collect_files(root, config, changed_only)

    context = ScanContext(root, files, config, stack=resolved)
    rules = rules_for_stack(resolved)
    findings = asyncio.run(run_all(context, rules))
    return ScanRun(root=root, stack=resolved, config=config, rules=rules, findings=findings)


def _run_with_status(root: Path, **kwargs) -> ScanRun:
    """run_scan() behind a transient spinner on stderr; stdout stays clean for json/sarif."""
    with Console(stderr=True).status("Scanning...", spinner="dots"):
        return run_scan(root, **kwargs)


def _emit(text: str, out: Optional[Path]) -> None:
    if out is None:
        typer.echo(text)
        return
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(text + "\n", encoding="utf-8")
    typer.echo(f"Report written to {out}", err=True)


def _scan_command(
    directory: Path,
    stack: str,
    auth: str,
    strict: bool,
    changed: bool,
    baseline: Optional[Path],
    output_format: OutputFormat,
    out: Optional[Path],
) -> None:
    run = _run_with_status(directory, stack=stack, auth=auth, changed_only=changed)
    findings = run.findings
    if baseline is not None:
        findings = apply_baseline(findings, load_baseline(baseline.resolve()))

    if output_format is OutputFormat.json:
        _emit(render_json(findings, run.root, run.stack, run.config), out)
    elif output_format is OutputFormat.sarif:
        _emit(render_sarif(findings, run.root, all_rules()), out)
    else:
        print_findings(findings, root=run.root, console=Console())

    code = exit_code(findings, strict)
    if code:
        raise typer.Exit(code=code)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging on stderr."),
) -> None:
    """Configure logging once for every command."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.command()
def scan(
    directory: Path = typer.Argument(Path("."), help="Repository root directory."),
    stack: str = typer.Option("auto", help="auto|nextjs|vite|nestjs", callback=_check_stack),
    auth: str = typer.Option(
        "auto", help="auto|nextauth|clerk|betterauth|custom|none", callback=_check_auth
    ),
    strict: bool = typer.Option(False, help="Exit non-zero if blocker/high found."),
    changed: bool = typer.Option(False, help="Only scan files changed vs HEAD (best effort)."),
    baseline: Optional[Path] = typer.Option(None, help="Baseline file path."),
    output_format: OutputFormat = typer.Option(OutputFormat.console, "--format", help="Report format."),
    out: Optional[Path] = typer.Option(None, help="Write report to file (json/sarif)."),
) -> None:
    """Scan a repository and report findings."""
    _scan_command(directory, stack, auth, strict, changed, baseline, output_format, out)


@app.command()
def ci(
    directory: Path = typer.Argument(Path("."), help="Repository root directory."),
    stack: str = typer.Option("auto", help="auto|nextjs|vite|nestjs", callback=_check_stack),
    auth: str = typer.Option(
        "auto", help="auto|nextauth|clerk|betterauth|custom|none", callback=_check_auth
    ),
    baseline: Optional[Path] = typer.Option(
        None, help=f"Baseline file path (default: DIR/{DEFAULT_BASELINE_FILE})."
    ),
    output_format: OutputFormat = typer.Option(OutputFormat.console, "--format", help="Report format."),
    out: Optional[Path] = typer.Option(None, help="Write report to file (json/sarif)."),
) -> None:
    """CI-friendly scan: strict exit codes, changed files only, default baseline."""
    if baseline is None:
        baseline = directory / DEFAULT_BASELINE_FILE
    _scan_command(directory, stack, auth, True, True, baseline, output_format, out)


@baseline_app.command("init")
def baseline_init(
    directory: Path = typer.Argument(Path("."), help="Repository root directory."),
    stack: str = typer.Option("auto", help="auto|nextjs|vite|nestjs", callback=_check_stack),
    auth: str = typer.Option(
        "auto", help="auto|nextauth|clerk|betterauth|custom|none", callback=_check_auth
    ),
    out: Optional[Path] = typer.Option(
        None, help=f"Baseline output file (default: DIR/{DEFAULT_BASELINE_FILE})."
    ),
) -> None:
    """Record the current findings so later scans only report new ones."""
    run = _run_with_status(directory, stack=stack, auth=auth)
    path = (out or directory / DEFAULT_BASELINE_FILE).resolve()
    write_baseline(path, run.findings)
    typer.echo(f"Baseline written to {path} ({len(run.findings)} findings recorded).")


def main() -> None:
    """Entry point for the `vibecheck` console script and `python -m vibecheck.main`."""
    app()


if __name__ == "__main__":
    main()
