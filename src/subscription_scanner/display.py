"""Rich-based display functions for Subscription Scanner."""

from __future__ import annotations

from decimal import Decimal

from rich.console import Console
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from .models import ExtractedSubscription, ScanResult, Subscription
from .scorer import classify_confidence

console = Console()

_CONFIDENCE_COLORS = {"high": "green", "medium": "yellow", "low": "red"}


def _confidence_color(score: float) -> str:
    """Return a Rich color name based on the confidence value."""
    return _CONFIDENCE_COLORS[classify_confidence(score)]


def _fmt_price(candidate: ExtractedSubscription) -> str:
    return f"{candidate.price:.2f}" if candidate.price is not None else "-"


def display_scan_results(scan_result: ScanResult, show_all: bool = False) -> None:
    """Display accepted candidates, or every candidate when ``show_all`` is set."""
    rows = scan_result.candidates if show_all else scan_result.accepted
    accepted = set(scan_result.accepted)

    table = Table(title="Scan Results" if show_all else "Detected Subscriptions")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Name")
    table.add_column("Price", justify="right")
    table.add_column("Cycle")
    table.add_column("Renewal")
    table.add_column("Confidence", justify="right")
    if show_all:
        table.add_column("Accepted")

    for idx, candidate in enumerate(rows, start=1):
        color = _confidence_color(candidate.confidence)
        row = [
            str(idx),
            candidate.name,
            _fmt_price(candidate),
            candidate.billing_cycle.value if candidate.billing_cycle else "-",
            candidate.renewal_date.isoformat() if candidate.renewal_date else "-",
            f"[{color}]{candidate.confidence:.2f}[/{color}]",
        ]
        if show_all:
            row.append("yes" if candidate in accepted else "[dim]no[/dim]")
        table.add_row(*row)

    console.print(table)
    console.print(
        Panel(
            f"Messages scanned: {scan_result.total_messages}  |  "
            f"Skipped: {scan_result.skipped}  |  "
            f"Accepted: {len(scan_result.accepted)} (threshold {scan_result.threshold:.2f})",
            title="Summary",
        )
    )


def display_subscriptions(subscriptions: list[Subscription], monthly_total: Decimal | None = None) -> None:
    """Display stored subscriptions, with the monthly spend when given."""
    if not subscriptions:
        console.print("[dim]No subscriptions stored.[/dim]")
        return

    table = Table(title="Subscriptions")
    table.add_column("ID", justify="right", style="dim")
    table.add_column("Name")
    table.add_column("Price", justify="right")
    table.add_column("Cycle")
    table.add_column("Next billing")
    table.add_column("Status")

    for sub in subscriptions:
        table.add_row(
            str(sub.id),
            sub.name,
            f"{sub.price:.2f}",
            sub.billing_cycle.value,
            sub.next_billing_date.isoformat(),
            sub.status,
        )

    console.print(table)
    if monthly_total is not None:
        console.print(f"[bold]Monthly spend:[/bold] {monthly_total:.2f}")


def display_upcoming_renewals(upcoming: list[tuple[Subscription, int]], days: int) -> None:
    """Display subscriptions renewing within the next ``days`` days."""
    if not upcoming:
        console.print(f"[dim]No renewals in the next {days} days.[/dim]")
        return

    table = Table(title=f"Upcoming Renewals (next {days} days)")
    table.add_column("ID", justify="right", style="dim")
    table.add_column("Name")
    table.add_column("Price", justify="right")
    table.add_column("Renews")
    table.add_column("In", justify="right")

    for sub, days_left in upcoming:
        when = "today" if days_left == 0 else f"{days_left}d"
        color = "red" if days_left <= 7 else "yellow"
        table.add_row(
            str(sub.id),
            sub.name,
            f"{sub.price:.2f}",
            sub.next_billing_date.isoformat(),
            f"[{color}]{when}[/{color}]",
        )

    console.print(table)


def display_import_summary(imported: int, offered: int) -> None:
    """Display how many accepted candidates were stored."""
    skipped = offered - imported
    message = f"[bold green]Imported {imported} subscriptions.[/bold green]"
    if skipped:
        message += f" [dim]({skipped} already stored)[/dim]"
    console.print(Panel(message, title="Import"))


def create_progress(description: str) -> Progress:
    """Create a configured Rich Progress bar."""
    return Progress(
        SpinnerColumn(),
        TextColumn(f"[bold blue]{description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=console,
    )
