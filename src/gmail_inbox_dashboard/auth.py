"""Sign-in helpers that link Google accounts into a CredentialStore.

Tokens obtained here live only in memory; nothing is written to disk.
"""

from __future__ import annotations

import logging
from pathlib import Path

from google_auth_oauthlib.flow import InstalledAppFlow
from oauthlib.oauth2.rfc6749.errors import AccessDeniedError

from .accounts import CredentialStore
from .constants import CREDENTIALS_PATH, SCOPES
from .gmail_client import MailGateway
from .models import Account

logger = logging.getLogger(__name__)


def sign_in(
    store: CredentialStore,
    gateway: MailGateway,
    client_secrets: str | Path | None = None,
) -> Account | None:
    """Run the OAuth browser flow and link the chosen account.

    Returns the linked account (the previously stored one if that email was
    already linked), or None when the user cancels the consent screen.
    """
    secrets_path = Path(client_secrets) if client_secrets else CREDENTIALS_PATH
    if not secrets_path.exists():
        raise FileNotFoundError(
            f"Credentials file not found at {secrets_path}.\n"
            "Download your OAuth client credentials from the Google Cloud Console "
            "and save them as:\n"
            f"  {secrets_path}"
        )

    flow = InstalledAppFlow.from_client_secrets_file(str(secrets_path), SCOPES)
    try:
        creds = flow.run_local_server(port=0, prompt="select_account")
    except AccessDeniedError:
        logger.info("Sign-in cancelled by user")
        return None

    email = gateway.get_profile_email(creds.token)
    store.add(email, creds.token)
    return store.get(email)


def sign_out(store: CredentialStore) -> None:
    """Unlink every account."""
    store.clear()


def is_signed_in(store: CredentialStore) -> bool:
    return store.is_signed_in


def parse_account_spec(spec: str) -> Account:
    """Parse an ``email=token`` pair into an Account."""
    email, sep, token = spec.partition("=")
    email, token = email.strip(), token.strip()
    if not sep or not email or not token:
        raise ValueError(f"Expected EMAIL=TOKEN, got {spec!r}")
    return Account(email=email, credential=token)


def accounts_from_env(value: str | None) -> list[Account]:
    """Parse a comma separated list of ``email=token`` pairs."""
    if not value:
        return []
    return [parse_account_spec(part) for part in value.split(",") if part.strip()]


def load_accounts(store: CredentialStore, accounts: list[Account]) -> None:
    for acc in accounts:
        store.add(acc.email, acc.credential)
