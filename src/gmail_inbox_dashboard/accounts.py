"""In-memory store of linked Google accounts."""

from __future__ import annotations

import logging

from .errors import AccountNotFoundError
from .models import Account

logger = logging.getLogger(__name__)


class CredentialStore:
    """Linked accounts for the current session, keyed by email.

    Nothing is persisted: the store starts empty and is emptied on sign-out.
    Callers must not mutate the store while an aggregation or export for one
    of its accounts is running.
    """

    def __init__(self) -> None:
        self._accounts: list[Account] = []

    def add(self, email: str, credential: str) -> bool:
        """Link an account. Returns False (and keeps the stored token) if the email is already linked."""
        if email in self:
            logger.debug("Account %s already linked", email)
            return False
        self._accounts.append(Account(email=email, credential=credential))
        logger.debug("Linked account %s", email)
        return True

    def remove(self, email: str) -> bool:
        before = len(self._accounts)
        self._accounts = [acc for acc in self._accounts if acc.email != email]
        removed = len(self._accounts) != before
        if removed:
            logger.debug("Removed account %s", email)
        return removed

    def get(self, email: str) -> Account:
        for acc in self._accounts:
            if acc.email == email:
                return acc
        raise AccountNotFoundError(email)

    def list(self) -> list[Account]:
        """Return a copy of the linked accounts in insertion order."""
        return self._accounts.copy()

    def clear(self) -> None:
        self._accounts = []
        logger.debug("Cleared all linked accounts")

    @property
    def is_signed_in(self) -> bool:
        return bool(self._accounts)

    def __len__(self) -> int:
        return len(self._accounts)

    def __contains__(self, email: object) -> bool:
        return any(acc.email == email for acc in self._accounts)
