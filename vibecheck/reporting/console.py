# Rich console output: format findings for terminal display.

from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from vibecheck.findings.models import SEVERITY_ORDER, Finding, Severity, Summary

# Severity → Rich style
SEVERITY_STYLE = {
    Severity.BLOCKER: "bold white on red",
    Severity.HIGH: "bold red",
    Severity.MED: "bold yellow",
    Severity.LOW: "bold blue",
    Severity.INFO: "dim",
}


def _severity_style(severity: Severity) -> str:
    return SEVERITY_STYLE.get(severity, "bold white")


def _display_path(path: str, root: Optional[Path]) -> str:
    if root is None:
        return path
    try:
        return Path(path).relative_to(root).as_posix()
    except ValueError:
        return path


def print_findings(
    findings: Sequence[Finding],
    root: Optional[Path] = None,
    console: Optional[Console] = None,
) -> None:
    """
    Print findings grouped by file, most severe first, with fix hints, then
    a severity summary footer (also printed when there is nothing to report).
    """
    console = console or Console()

    if not findings:
        console.print(
            Panel(
                "[green]No issues found.[/green]",
                title="vibecheck",
                border_style="green",
                box=box.ROUNDED,
            )
        )
        print_summary(Summary(), console)
        return

    by_file: dict[str, list[Finding]] = {}
    for f in findings:
        by_file.setdefault(f.file, []).append(f)

    for path in sorted(by_file):
        file_findings = sorted(
            by_file[path], key=lambda x: (-x.severity.rank, x.line or 0, x.col or 0)
        )

        console.print()
        console.print(Panel(
            f"[bold cyan]{escape(_display_path(path, root))}[/bold cyan]",
            box=box.SIMPLE_HEAD,
            border_style="blue",
            padding=(0, 1),
        ))

        table = Table(
            show_header=True,
            header_style="bold magenta",
            box=box.SIMPLE,
            padding=(0, 1),
            expand=False,
        )
        table.add_column("Line", justify="right", style="dim", width=5)
        table.add_column("Col", justify="right", style="dim", width=4)
        table.add_column("Severity", width=9)
        table.add_column("Rule", width=34)
        table.add_column("Message", style="white")

        for f in file_findings:
            table.add_row(
                "" if f.line is None else str(f.line),
                "" if f.col is None else str(f.col),
                Text(f.severity.value.upper(), style=_severity_style(f.severity)),
                Text(f"[{f.rule_id}]", style="dim"),
                Text(f.message),
            )
        console.print(table)

        seen_hints: set[tuple[str, str]] = set()
        for f in file_findings:
            if f.fix_hint and (f.rule_id, f.fix_hint) not in seen_hints:
                seen_hints.add((f.rule_id, f.fix_hint))
                console.print(Text.assemble(("  [Fix] ", "dim"), f"[{f.rule_id}] {f.fix_hint}"))

    print_summary(Summary.from_findings(findings), console)


def print_summary(summary: Summary, console: Console) -> None:
    """Print a compact summary of findings."""
    total = summary.total
    parts = [f"[bold]{total} finding{'s' if total != 1 else ''}[/bold]"]
    for sev in SEVERITY_ORDER:
        parts.append(f"[{_severity_style(sev)}]{sev.value}={getattr(summary, sev.value)}[/]")

    console.print()
    console.print(
        Panel(
            " | ".join(parts),
            title="Summary",
            border_style="yellow" if total > 0 else "green",
            box=box.ROUNDED,
        )
    )
