"""Exceptions raised by Gmail Inbox Dashboard."""

from __future__ import annotations


class DashboardError(Exception):
    """Base class for all dashboard errors."""


class CredentialError(DashboardError):
    """A Gmail call was attempted without a usable credential."""


class GatewayError(DashboardError):
    """A remote Gmail call failed.

    ``status`` carries the HTTP status code when the failure came from the
    API itself, and is ``None`` for transport failures.
    """

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status

    @property
    def unauthorized(self) -> bool:
        return self.status == 401


class AccountNotFoundError(DashboardError):
    def __init__(self, email: str) -> None:
        super().__init__(f"Account not found: {email}")
        self.email = email


class ExportError(DashboardError):
    """A CSV export was aborted. The original error is chained as ``__cause__``."""

    def __init__(self, email: str, cause: DashboardError) -> None:
        super().__init__(f"Export failed for {email}: {cause}")
        self.email = email
        self.status = getattr(cause, "status", None)

    @property
    def unauthorized(self) -> bool:
        return self.status == 401
