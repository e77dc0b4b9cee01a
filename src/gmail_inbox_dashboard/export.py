"""Export inbox senders of a single account to CSV."""

from __future__ import annotations

import csv
import io
import logging
from pathlib import Path
from typing import Callable

from .constants import CSV_HEADER, EXPORT_CAP, EXPORT_FILENAME_TEMPLATE
from .errors import DashboardError, ExportError
from .gmail_client import MailGateway
from .models import Account, ExportRow

logger = logging.getLogger(__name__)


def build_rows(
    gateway: MailGateway,
    account: Account,
    callback: Callable[[int, int], None] | None = None,
) -> list[ExportRow]:
    """List up to EXPORT_CAP inbox messages and pair each with its sender.

    Rows keep the order the API listed the messages in.

    Raises:
        ExportError: if listing or any header fetch fails.
    """
    try:
        ids = gateway.list_inbox_message_ids(account.credential, cap=EXPORT_CAP)
        senders = gateway.get_sender_headers(account.credential, ids, callback=callback)
    except DashboardError as exc:
        logger.error("Error downloading messages for %s: %s", account.email, exc)
        raise ExportError(account.email, exc) from exc

    return [ExportRow(account=account.email, sender=sender) for sender in senders]


def rows_to_csv(email: str, rows: list[ExportRow]) -> str:
    """Serialize rows as ``Account,From`` CSV text joined by newlines.

    With no rows the output is the header plus ``<email>,`` so that an empty
    inbox still names the account. Fields containing commas or quotes are
    quoted.
    """
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    if rows:
        for row in rows:
            writer.writerow([row.account, row.sender])
    else:
        writer.writerow([email, ""])
    return buf.getvalue().rstrip("\n")


def build_csv(
    gateway: MailGateway,
    account: Account,
    callback: Callable[[int, int], None] | None = None,
) -> str:
    """Build the inbox senders CSV for exactly one account."""
    rows = build_rows(gateway, account, callback=callback)
    logger.debug("Exported %d rows for %s", len(rows), account.email)
    return rows_to_csv(account.email, rows)


def export_filename(email: str) -> str:
    return EXPORT_FILENAME_TEMPLATE.format(email=email)


def write_export(
    gateway: MailGateway,
    account: Account,
    output_dir: str | Path = ".",
    callback: Callable[[int, int], None] | None = None,
) -> Path:
    """Build the CSV for ``account`` and write it under its conventional name."""
    text = build_csv(gateway, account, callback=callback)
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / export_filename(account.email)
    with open(path, "w", newline="", encoding="utf-8") as f:
        f.write(text)
    logger.info("Saved export for %s to %s", account.email, path)
    return path
