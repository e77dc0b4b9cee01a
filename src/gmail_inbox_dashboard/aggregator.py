"""Per-account INBOX/SPAM statistics across all linked accounts."""

from __future__ import annotations

import logging
from typing import Callable, Iterable

from .errors import DashboardError
from .gmail_client import MailGateway
from .models import Account, AccountStats, MailboxCounts, MessageCount

logger = logging.getLogger(__name__)


def fetch_account_stats(gateway: MailGateway, account: Account) -> AccountStats:
    """Fetch INBOX and SPAM counts for one account. Gateway errors propagate."""
    return AccountStats(email=account.email, counts=gateway.get_mailbox_counts(account.credential))


def compute_stats(
    gateway: MailGateway,
    accounts: Iterable[Account],
    on_account: Callable[[int, int], None] | None = None,
) -> list[AccountStats]:
    """Return one AccountStats per account, in input order.

    Accounts are processed one at a time. An account whose queries fail is
    reported with zero counts so the others stay visible.
    """
    accounts = list(accounts)
    results: list[AccountStats] = []

    for idx, account in enumerate(accounts, start=1):
        try:
            stats = fetch_account_stats(gateway, account)
        except DashboardError as exc:
            logger.warning("Error fetching counts for %s: %s", account.email, exc)
            stats = AccountStats.empty(account.email)
        results.append(stats)

        if on_account:
            on_account(idx, len(accounts))

    return results


def total_counts(stats: Iterable[AccountStats]) -> MailboxCounts:
    """Sum a stats snapshot into one INBOX/SPAM total."""
    inbox = MessageCount()
    spam = MessageCount()
    for s in stats:
        inbox += s.counts.inbox
        spam += s.counts.spam
    return MailboxCounts(inbox=inbox, spam=spam)
