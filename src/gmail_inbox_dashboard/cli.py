"""CLI entry point for Gmail Inbox Dashboard."""

from __future__ import annotations

import os
from pathlib import Path

import click
from rich.prompt import Prompt

from .accounts import CredentialStore
from .aggregator import compute_stats
from .auth import accounts_from_env, load_accounts, parse_account_spec, sign_in, sign_out
from .constants import ACCOUNTS_ENV_VAR, MAX_ATTEMPTS
from .display import console, create_progress, display_accounts, display_stats, setup_logging
from .errors import AccountNotFoundError, DashboardError, ExportError
from .export import build_csv, write_export
from .gmail_client import MailGateway, build_service
from .models import Account, AccountStats

SESSION_HELP = (
    "[bold]Commands:[/bold] add, link EMAIL=TOKEN, remove EMAIL, list, stats, "
    "export EMAIL [DIR], signout, help, quit"
)


def account_options(f):
    """Options shared by commands that need linked accounts."""
    f = click.option(
        "--client-secrets",
        default=None,
        type=click.Path(dir_okay=False),
        help="OAuth client credentials file used by --login.",
    )(f)
    f = click.option(
        "--max-attempts",
        default=MAX_ATTEMPTS,
        type=click.IntRange(min=1),
        show_default=True,
        help="Attempts per Gmail request (retries on 429/500/503).",
    )(f)
    f = click.option("--login", default=0, type=click.IntRange(min=0), help="Link N accounts via browser sign-in.")(f)
    f = click.option(
        "-a",
        "--account",
        "account_specs",
        multiple=True,
        metavar="EMAIL=TOKEN",
        help=f"Link an account by access token (repeatable). Also read from ${ACCOUNTS_ENV_VAR}.",
    )(f)
    return f


def _make_gateway(max_attempts: int) -> MailGateway:
    return MailGateway(service_factory=build_service, max_attempts=max_attempts)


def _sign_in(store: CredentialStore, gateway: MailGateway, client_secrets: str | None) -> None:
    try:
        account = sign_in(store, gateway, client_secrets=client_secrets)
    except FileNotFoundError as e:
        raise click.ClickException(str(e)) from e
    except DashboardError as e:
        raise click.ClickException(f"Sign-in failed: {e}") from e
    if account is None:
        console.print("[yellow]Sign-in cancelled.[/yellow]")
    else:
        console.print(f"Linked [bold]{account.email}[/bold]")


def _build_store(
    account_specs: tuple[str, ...],
    login: int,
    gateway: MailGateway,
    client_secrets: str | None,
) -> CredentialStore:
    try:
        accounts = [parse_account_spec(s) for s in account_specs]
        accounts += accounts_from_env(os.environ.get(ACCOUNTS_ENV_VAR))
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--account") from e

    store = CredentialStore()
    load_accounts(store, accounts)
    for _ in range(login):
        _sign_in(store, gateway, client_secrets)
    return store


def _run_stats(gateway: MailGateway, store: CredentialStore) -> list[AccountStats]:
    accounts = store.list()
    with create_progress("Fetching counts") as progress:
        task = progress.add_task("counts", total=len(accounts))

        def on_account(idx: int, total: int) -> None:
            progress.update(task, completed=idx)

        return compute_stats(gateway, accounts, on_account=on_account)


def _run_export(gateway: MailGateway, account: Account, output_dir: str) -> Path:
    """Write the CSV export with a progress bar over header batches."""
    with create_progress("Fetching senders") as progress:
        task = progress.add_task("senders", total=None)

        def on_batch(batch_num: int, total: int) -> None:
            progress.update(task, completed=batch_num, total=total)

        return write_export(gateway, account, output_dir, callback=on_batch)


def _export_message(exc: ExportError) -> str:
    if exc.unauthorized:
        return f"{exc}\nThe access token was rejected; sign in to {exc.email} again."
    return str(exc)


@click.group()
@click.version_option(version="0.1.0", prog_name="gmail-inbox-dashboard")
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging.")
def cli(verbose: bool) -> None:
    """Gmail Inbox Dashboard - mailbox counts and sender exports across accounts."""
    setup_logging(verbose)


@cli.command()
@account_options
def stats(account_specs: tuple[str, ...], login: int, max_attempts: int, client_secrets: str | None) -> None:
    """Show INBOX and SPAM counts for every linked account."""
    gateway = _make_gateway(max_attempts)
    store = _build_store(account_specs, login, gateway, client_secrets)
    if not store.is_signed_in:
        raise click.ClickException("No accounts linked. Use --account EMAIL=TOKEN or --login.")

    display_stats(_run_stats(gateway, store))


@cli.command(name="export")
@click.argument("email")
@account_options
@click.option("-o", "--output-dir", default=".", type=click.Path(file_okay=False), help="Directory for the CSV file.")
@click.option("--stdout", "to_stdout", is_flag=True, help="Print the CSV instead of writing a file.")
def export_cmd(
    email: str,
    account_specs: tuple[str, ...],
    login: int,
    max_attempts: int,
    client_secrets: str | None,
    output_dir: str,
    to_stdout: bool,
) -> None:
    """Export the senders of up to 100 inbox messages of EMAIL to CSV."""
    gateway = _make_gateway(max_attempts)
    store = _build_store(account_specs, login, gateway, client_secrets)
    try:
        account = store.get(email)
    except AccountNotFoundError as e:
        raise click.ClickException(str(e)) from e

    try:
        if to_stdout:
            click.echo(build_csv(gateway, account))
        else:
            path = _run_export(gateway, account, output_dir)
            console.print(f"[green]Results saved to {path}[/green]")
    except ExportError as e:
        raise click.ClickException(_export_message(e)) from e


@cli.command()
@click.option("--client-secrets", default=None, type=click.Path(dir_okay=False), help="OAuth client credentials file.")
def auth(client_secrets: str | None) -> None:
    """Test Google sign-in for one account."""
    gateway = _make_gateway(MAX_ATTEMPTS)
    store = CredentialStore()
    _sign_in(store, gateway, client_secrets)
    if store.is_signed_in:
        console.print(f"Authenticated as {store.list()[0].email}")


@cli.command()
@account_options
def session(account_specs: tuple[str, ...], login: int, max_attempts: int, client_secrets: str | None) -> None:
    """Interactive session holding linked accounts in memory."""
    gateway = _make_gateway(max_attempts)
    store = _build_store(account_specs, login, gateway, client_secrets)
    console.print(SESSION_HELP)

    while True:
        try:
            line = Prompt.ask("[bold]dashboard[/bold]", console=console, default="", show_default=False)
        except EOFError:
            break
        cmd, _, arg = line.strip().partition(" ")
        arg = arg.strip()

        if not cmd:
            continue
        if cmd in ("quit", "exit"):
            break

        try:
            if cmd == "add":
                _sign_in(store, gateway, client_secrets)
            elif cmd == "link":
                acc = parse_account_spec(arg)
                if store.add(acc.email, acc.credential):
                    console.print(f"Linked [bold]{acc.email}[/bold]")
                else:
                    console.print(f"[dim]{acc.email} is already linked.[/dim]")
            elif cmd == "remove":
                if store.remove(arg):
                    console.print(f"Removed [bold]{arg}[/bold]")
                else:
                    console.print(f"[yellow]No linked account {arg}[/yellow]")
            elif cmd == "list":
                display_accounts(store.list())
            elif cmd == "stats":
                if store.is_signed_in:
                    display_stats(_run_stats(gateway, store))
                else:
                    console.print("[yellow]No accounts linked.[/yellow]")
            elif cmd == "export":
                email, _, out_dir = arg.partition(" ")
                path = _run_export(gateway, store.get(email), out_dir.strip() or ".")
                console.print(f"[green]Results saved to {path}[/green]")
            elif cmd == "signout":
                sign_out(store)
                console.print("Signed out of all accounts.")
            elif cmd == "help":
                console.print(SESSION_HELP)
            else:
                console.print(f"[red]Unknown command: {cmd}[/red]")
                console.print(SESSION_HELP)
        except ExportError as e:
            console.print(f"[red]{_export_message(e)}[/red]")
        except (DashboardError, ValueError) as e:
            console.print(f"[red]{e}[/red]")
        except click.ClickException as e:
            console.print(f"[red]{e.format_message()}[/red]")
