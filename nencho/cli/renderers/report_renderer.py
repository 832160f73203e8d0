"""Rich renderer for verification reports.

Transforms an SDK VerificationReport into formatted Rich tables.
"""

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich import box

from nencho.sdk.schemas import CheckResult, VerificationReport
from nencho.sdk.validate import CHECKS


STATUS_STYLES = {
    "pass": ("✓ pass", "green"),
    "fail": ("✗ fail", "red"),
    "error": ("! error", "yellow"),
}

# Check name -> CSV column label
COLUMN_LABELS = {check.name: check.description for check in CHECKS}


def render_report(console: Console, report: VerificationReport, source: str = None) -> None:
    """Render a verification report as a Rich table plus a summary panel.

    Args:
        console: Rich Console instance
        report: Output of verify_records()
        source: Optional input file name for the title
    """
    title = f"Year-end checks: {source}" if source else "Year-end checks"
    table = Table(title=title, show_header=True, header_style="bold", box=box.SIMPLE)
    table.add_column("Check", style="cyan")
    table.add_column("Column")
    table.add_column("Status")
    table.add_column("Checked", justify="right")
    table.add_column("Skipped", justify="right")
    table.add_column("Detail")

    for result in report.results:
        label, style = STATUS_STYLES[result.status]
        table.add_row(
            result.name,
            COLUMN_LABELS.get(result.name, result.field),
            f"[{style}]{label}[/{style}]",
            str(result.checked),
            str(result.skipped),
            _detail(result),
        )

    console.print(table)
    _render_summary(console, report)


def _detail(result: CheckResult) -> str:
    if result.mismatch:
        return result.mismatch.message
    if result.error:
        return result.error
    return ""


def _render_summary(console: Console, report: VerificationReport) -> None:
    if report.ok:
        console.print(Panel(
            f"[green]All {len(report.results)} checks passed "
            f"for {report.record_count} record(s)[/green]",
            border_style="green",
        ))
        return

    console.print(Panel(
        f"[red]{len(report.failed)} of {len(report.results)} checks did not pass: "
        f"{', '.join(report.failed)}[/red]",
        title="Attention",
        border_style="red",
    ))
