"""Rich console utilities for the agentdocs CLI."""

from __future__ import annotations

from collections.abc import Sequence

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from agentdocs.domain.models import ConversionReport, LintReport, LintSeverity
from agentdocs.domain.stream_event import StreamEvent, StreamStats

# Shared console instances
console = Console()
error_console = Console(stderr=True)


def print_error(message: str, hint: str | None = None) -> None:
    """Print formatted error message to stderr."""
    content = Text(f"ERROR: {message}", style="bold red")
    if hint:
        content.append(f"\n\nHint: {hint}", style="yellow")
    error_console.print(Panel(content, title="Error", border_style="red"))


def print_success(message: str) -> None:
    console.print(Panel(message, title="Success", border_style="green"))


def print_conversion_report(report: ConversionReport, report_path: str | None = None) -> None:
    """Print per-file outcomes followed by the totals."""
    table = Table(title="Conversion", show_lines=False)
    table.add_column("Source", style="cyan", overflow="fold")
    table.add_column("Outcome")
    table.add_column("Tokens", justify="right")
    table.add_column("Reduction", justify="right")

    styles = {"created": "green", "updated": "blue", "skipped": "dim", "error": "red"}
    for record in report.records:
        outcome = record.outcome.value
        table.add_row(
            Text(record.source_file),
            Text(outcome, style=styles[outcome]),
            f"{record.estimated_tokens}/{record.full_md_tokens}" if record.full_md_tokens else "-",
            f"{record.reduction:.1f}%" if record.full_md_tokens else "-",
        )
    console.print(table)

    stats = report.stats
    summary = Table(show_header=False, box=None)
    summary.add_column("Key", style="cyan")
    summary.add_column("Value")
    summary.add_row("Processed", str(stats.processed))
    summary.add_row("Created", str(stats.created))
    summary.add_row("Updated", str(stats.updated))
    summary.add_row("Skipped", str(stats.skipped))
    summary.add_row("Errors", str(stats.errors))
    summary.add_row("Avg reduction", f"{stats.average_reduction:.1f}%")
    if report.index_updates:
        summary.add_row("Index updates", str(report.index_updates))
    if report_path:
        summary.add_row("Report", report_path)
    console.print(summary)

    for record in report.records:
        if record.error:
            error_console.print(f"[red]{escape(record.source_file)}[/red]: {escape(record.error)}")


def print_lint_report(report: LintReport) -> None:
    if not report.findings:
        print_success(f"{report.documents_checked} documents checked, no problems found")
        return

    table = Table(title="Lint findings")
    table.add_column("Location", style="cyan", overflow="fold")
    table.add_column("Rule")
    table.add_column("Message", overflow="fold")
    for finding in report.findings:
        location = f"{finding.path}:{finding.line}" if finding.line else finding.path
        style = "red" if finding.severity is LintSeverity.ERROR else "yellow"
        table.add_row(Text(location), Text(finding.rule, style=style), Text(finding.message))
    console.print(table)
    console.print(
        f"{report.documents_checked} documents checked: "
        f"[red]{len(report.errors)} errors[/red], "
        f"[yellow]{len(report.warnings)} warnings[/yellow]"
    )


def print_events(events: Sequence[StreamEvent]) -> None:
    """Print a timeline of stream events."""
    table = Table(title=f"Stream ({len(events)} events)")
    table.add_column("Time", style="dim")
    table.add_column("Event")
    table.add_column("From", style="cyan")
    table.add_column("To", style="cyan")
    table.add_column("Detail", overflow="fold")
    for event in events:
        detail = event.qualifier or ""
        if event.data:
            detail = f"{detail} {event.data}".strip()
        table.add_row(
            event.timestamp[11:19],
            event.event.value,
            event.from_agent,
            event.to_agent or "-",
            Text(detail[:120]),
        )
    console.print(table)


def print_stream_stats(stats: StreamStats) -> None:
    table = Table(show_header=False, box=None)
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    table.add_row("Files", str(stats.total_files))
    table.add_row("Events", str(stats.total_events))
    table.add_row("Latest activity", stats.latest_activity or "-")
    for event_type, count in sorted(stats.by_type.items()):
        table.add_row(f"  {event_type}", str(count))
    for agent, count in sorted(stats.by_agent.items()):
        table.add_row(f"  from {agent}", str(count))
    console.print(table)
