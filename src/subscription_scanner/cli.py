"""CLI entry point for Subscription Scanner."""

from __future__ import annotations

import json
import logging

import click
from rich.logging import RichHandler

from .auth import check_auth, open_session
from .constants import (
    DEFAULT_MAX_RESULTS,
    DEFAULT_QUERY,
    DEFAULT_THRESHOLD,
    UPCOMING_RENEWAL_DAYS,
)
from .display import (
    console,
    display_import_summary,
    display_scan_results,
    display_subscriptions,
    display_upcoming_renewals,
)
from .exceptions import AuthError, SourceError
from .export import export_subscriptions
from .extractor import extract
from .importer import to_subscription
from .renewals import total_monthly_cost, upcoming_renewals
from .scanner import scan_mailbox
from .store import SubscriptionStore


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


@click.group()
@click.version_option(version="0.1.0", prog_name="subscription-scanner")
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging.")
def cli(verbose: bool) -> None:
    """Subscription Scanner - find the subscriptions you pay for in your Gmail."""
    _configure_logging(verbose)


@cli.command()
@click.option(
    "-q", "--query",
    default=DEFAULT_QUERY,
    show_default=True,
    envvar="SUBSCRIPTION_SCANNER_QUERY",
    help="Gmail search query used to find candidate emails.",
)
@click.option(
    "-m", "--max-messages",
    default=DEFAULT_MAX_RESULTS,
    show_default=True,
    type=click.IntRange(min=1),
    help="Maximum messages to scan.",
)
@click.option(
    "--threshold",
    default=DEFAULT_THRESHOLD,
    show_default=True,
    type=click.FloatRange(0.0, 1.0),
    envvar="SUBSCRIPTION_SCANNER_THRESHOLD",
    help="Minimum confidence (exclusive) for a candidate to be accepted.",
)
@click.option("--import", "do_import", is_flag=True, help="Store accepted subscriptions.")
@click.option("--all", "show_all", is_flag=True, help="Show rejected candidates too.")
def scan(query: str, max_messages: int, threshold: float, do_import: bool, show_all: bool) -> None:
    """Scan your Gmail for subscription emails."""
    try:
        with open_session() as session:
            result = scan_mailbox(
                session,
                query=query,
                max_results=max_messages,
                threshold=threshold,
            )
    except AuthError as e:
        raise click.ClickException(
            f"{e}\nRun 'subscription-scanner auth' to re-authorize."
        ) from e
    except SourceError as e:
        raise click.ClickException(f"Scan failed: {e}\nPlease try again.") from e

    display_scan_results(result, show_all=show_all)

    with SubscriptionStore() as store:
        store.save_scan(result)
        if do_import and result.accepted:
            subs = [to_subscription(c) for c in result.accepted]
            inserted = store.import_subscriptions(subs)
            display_import_summary(len(inserted), len(subs))


@cli.command(name="extract")
@click.option("--subject", default="", help="Email subject.")
@click.option("--body", default="", help="Plain-text email body.")
@click.option("--sender", default="", help="From header, e.g. 'Netflix <info@netflix.com>'.")
def extract_cmd(subject: str, body: str, sender: str) -> None:
    """Run the extractor on a single email without touching Gmail."""
    record = extract(subject, body, sender)
    click.echo(json.dumps(record.to_dict(), indent=2))


@cli.command(name="list")
def list_cmd() -> None:
    """List stored subscriptions and the total monthly spend."""
    with SubscriptionStore() as store:
        subscriptions = store.list_subscriptions()
    display_subscriptions(subscriptions, monthly_total=total_monthly_cost(subscriptions))


@cli.command()
@click.option(
    "-d", "--days",
    default=UPCOMING_RENEWAL_DAYS,
    show_default=True,
    type=click.IntRange(min=0),
    help="Look-ahead window in days.",
)
def upcoming(days: int) -> None:
    """Show subscriptions renewing soon."""
    with SubscriptionStore() as store:
        subscriptions = store.list_subscriptions()
    display_upcoming_renewals(upcoming_renewals(subscriptions, days=days), days)


@cli.command()
@click.argument("subscription_id", type=int)
def remove(subscription_id: int) -> None:
    """Remove a stored subscription by ID."""
    with SubscriptionStore() as store:
        deleted = store.delete_subscription(subscription_id)
    if not deleted:
        raise click.ClickException(f"No subscription with ID {subscription_id}.")
    console.print(f"[green]Removed subscription {subscription_id}.[/green]")


@cli.command(name="export")
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["csv", "json"]),
    default="csv",
    help="Output format.",
)
@click.option("-o", "--output", required=True, help="Output file path.")
def export_cmd(fmt: str, output: str) -> None:
    """Export stored subscriptions to CSV or JSON."""
    with SubscriptionStore() as store:
        subscriptions = store.list_subscriptions()

    if not subscriptions:
        raise click.ClickException("No subscriptions stored. Run 'scan --import' first.")

    export_subscriptions(subscriptions, format=fmt, output_path=output)
    console.print(f"Results saved to {output}")


@cli.command()
def auth() -> None:
    """Test Gmail authentication, running the OAuth flow if needed."""
    ok, message = check_auth()
    if not ok:
        raise click.ClickException(f"Authentication failed: {message}")
    console.print(f"Authenticated as [bold]{message}[/bold]")


@cli.group(name="store")
def store_group() -> None:
    """Manage the local subscription store."""


@store_group.command(name="info")
def store_info() -> None:
    """Show store statistics."""
    with SubscriptionStore() as store:
        info = store.get_info()

    if info["last_scan_date"] is None and info["subscription_count"] == 0:
        console.print("[dim]Store is empty.[/dim]")
        return

    console.print(f"[bold]Database size:[/bold] {info['db_file_size'] / 1024:.1f} KB")
    console.print(f"[bold]Last scan:[/bold] {info['last_scan_date'] or 'never'}")
    console.print(f"[bold]Scans:[/bold] {info['scan_count']}")
    console.print(f"[bold]Subscriptions:[/bold] {info['subscription_count']}")


@store_group.command(name="clear")
def store_clear() -> None:
    """Delete all scans and subscriptions."""
    with SubscriptionStore() as store:
        store.clear()
    console.print("[green]Store cleared.[/green]")
