"""Rich-based display and logging setup for dspam-teach."""

import logging

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from .models import TeachSummary

console = Console()

_SKIP_LABELS = {
    "invalid": "Not a mail file",
    "seen": "Innocent, already read",
    "too_old": "Older than age window",
    "ledger_current": "Ledger already current",
}


def setup_logging(verbose: bool = False) -> None:
    """Route the package logger through a RichHandler on the shared console."""
    logger = logging.getLogger("dspam_teach")
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(console=console, show_time=False, show_path=False, markup=False)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)


def display_summary(summary: TeachSummary) -> None:
    """Display counters for a finished run."""
    table = Table(title="Teach Results")
    table.add_column("Outcome")
    table.add_column("Count", justify="right")

    table.add_row("[green]Classified[/green]", str(summary.classified))
    table.add_row("[yellow]Reclassified[/yellow]", str(summary.reclassified))
    table.add_row("Unchanged", str(summary.unchanged))
    if summary.failed:
        table.add_row("[red]Failed[/red]", f"[red]{summary.failed}[/red]")
    for reason, count in summary.skipped.items():
        table.add_row(f"[dim]Skipped: {_SKIP_LABELS.get(reason, reason)}[/dim]", f"[dim]{count}[/dim]")

    console.print(table)

    mode = "  |  [yellow]DRY RUN[/yellow]" if summary.dry_run else ""
    console.print(
        Panel(
            f"Processed {summary.processed} messages  |  Failed: {summary.failed}{mode}",
            title="Summary",
        )
    )
