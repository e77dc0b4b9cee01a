"""Rich-based display functions for Gmail Inbox Dashboard."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler
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

from .aggregator import total_counts
from .models import Account, AccountStats

console = Console()


def setup_logging(verbose: bool = False) -> None:
    """Route package logs through Rich on stderr."""
    logger = logging.getLogger("gmail_inbox_dashboard")
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        logger.addHandler(RichHandler(console=Console(stderr=True), show_path=False))


def display_stats(stats: list[AccountStats]) -> None:
    """Show per-account INBOX/SPAM counts with a totals row."""
    table = Table(title="Mailbox Counts")
    table.add_column("Account")
    table.add_column("Inbox msgs", justify="right")
    table.add_column("Inbox threads", justify="right")
    table.add_column("Spam msgs", justify="right")
    table.add_column("Spam threads", justify="right")

    for s in stats:
        table.add_row(
            s.email,
            str(s.counts.inbox.messages_total),
            str(s.counts.inbox.threads_total),
            f"[red]{s.counts.spam.messages_total}[/red]",
            str(s.counts.spam.threads_total),
        )

    if len(stats) > 1:
        totals = total_counts(stats)
        table.add_section()
        table.add_row(
            "[bold]Total[/bold]",
            str(totals.inbox.messages_total),
            str(totals.inbox.threads_total),
            f"[red]{totals.spam.messages_total}[/red]",
            str(totals.spam.threads_total),
        )

    console.print(table)


def display_accounts(accounts: list[Account]) -> None:
    if not accounts:
        console.print("[dim]No accounts linked.[/dim]")
        return
    lines = [f"  {idx}. {acc.email}" for idx, acc in enumerate(accounts, start=1)]
    console.print(Panel("\n".join(lines), title=f"Linked accounts ({len(accounts)})"))


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
