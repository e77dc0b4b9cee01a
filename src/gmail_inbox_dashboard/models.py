"""Data models for Gmail Inbox Dashboard."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Account:
    """A linked Google account and its bearer token."""

    email: str
    credential: str = field(repr=False)


@dataclass(frozen=True)
class MessageCount:
    """Message and thread totals for one label."""

    messages_total: int = 0
    threads_total: int = 0

    @classmethod
    def from_label(cls, resource: dict) -> MessageCount:
        """Build counts from a Gmail label resource; absent totals count as 0."""
        return cls(
            messages_total=int(resource.get("messagesTotal") or 0),
            threads_total=int(resource.get("threadsTotal") or 0),
        )

    def __add__(self, other: MessageCount) -> MessageCount:
        return MessageCount(
            messages_total=self.messages_total + other.messages_total,
            threads_total=self.threads_total + other.threads_total,
        )


@dataclass(frozen=True)
class MailboxCounts:
    inbox: MessageCount = field(default_factory=MessageCount)
    spam: MessageCount = field(default_factory=MessageCount)


@dataclass
class AccountStats:
    """Per-account snapshot produced by one aggregation run."""

    email: str
    counts: MailboxCounts = field(default_factory=MailboxCounts)

    @classmethod
    def empty(cls, email: str) -> AccountStats:
        return cls(email=email)


@dataclass(frozen=True)
class ExportRow:
    """One line of the inbox senders CSV."""

    account: str
    sender: str
