"""Shared fixtures for tests."""

from __future__ import annotations

from types import SimpleNamespace

import pytest
from googleapiclient.errors import HttpError

from gmail_inbox_dashboard.accounts import CredentialStore
from gmail_inbox_dashboard.gmail_client import MailGateway
from gmail_inbox_dashboard.models import Account


def http_error(status: int, reason: str = "error") -> HttpError:
    return HttpError(SimpleNamespace(status=status, reason=reason), b"")


class FakeRequest:
    def __init__(self, mailbox: FakeMailbox, op: str, arg, result) -> None:
        self.mailbox = mailbox
        self.op = op
        self.arg = arg
        self.result = result

    def execute(self):
        self.mailbox.calls.append((self.op, self.arg))
        if self.mailbox.log is not None:
            self.mailbox.log.append((self.mailbox.email, self.op, self.arg))
        if self.mailbox.scripted_errors:
            scripted = self.mailbox.scripted_errors.pop(0)
            if scripted is not None:
                raise scripted
        if self.mailbox.error is not None:
            raise self.mailbox.error
        if self.op == "messages.get" and self.arg in self.mailbox.failing_ids:
            raise http_error(404, "Not Found")
        return self.result()


class FakeBatch:
    def __init__(self, mailbox: FakeMailbox) -> None:
        self.mailbox = mailbox
        self.items: list = []

    def add(self, request, callback=None, request_id=None) -> None:
        self.items.append((request, callback))

    def execute(self) -> None:
        self.mailbox.batch_sizes.append(len(self.items))
        for idx, (request, callback) in enumerate(self.items):
            try:
                response = request.execute()
            except HttpError as exc:
                callback(str(idx), None, exc)
            else:
                callback(str(idx), response, None)


class _Labels:
    def __init__(self, mailbox: FakeMailbox) -> None:
        self.mailbox = mailbox

    def get(self, userId, id, fields=None):
        return FakeRequest(self.mailbox, "labels.get", id, lambda: dict(self.mailbox.label_data.get(id, {})))


class _Messages:
    def __init__(self, mailbox: FakeMailbox) -> None:
        self.mailbox = mailbox

    def list(self, userId, labelIds=None, maxResults=None, fields=None):
        def _result():
            ids = self.mailbox.message_ids[:maxResults]
            return {"messages": [{"id": i} for i in ids]} if ids else {}

        return FakeRequest(self.mailbox, "messages.list", tuple(labelIds or ()), _result)

    def get(self, userId, id, format=None, metadataHeaders=None):
        def _result():
            sender = self.mailbox.senders.get(id)
            headers = [] if sender is None else [{"name": "From", "value": sender}]
            return {"id": id, "payload": {"headers": headers}}

        return FakeRequest(self.mailbox, "messages.get", id, _result)


class FakeMailbox:
    """Stand-in for the Gmail API resource of one mailbox."""

    def __init__(
        self,
        email: str = "me@example.com",
        labels: dict | None = None,
        message_ids: list[str] | None = None,
        senders: dict[str, str | None] | None = None,
        error: Exception | None = None,
        failing_ids: set[str] | None = None,
    ) -> None:
        self.email = email
        self.label_data = labels or {}
        self.message_ids = message_ids or []
        self.senders = senders or {}
        self.error = error
        self.failing_ids = failing_ids or set()
        self.calls: list = []
        self.batch_sizes: list[int] = []
        # one entry per execute(): an exception to raise, or None to answer normally
        self.scripted_errors: list[Exception | None] = []
        self.log: list | None = None

    def users(self):
        return self

    def labels(self):
        return _Labels(self)

    def messages(self):
        return _Messages(self)

    def getProfile(self, userId):
        return FakeRequest(self, "getProfile", userId, lambda: {"emailAddress": self.email})

    def new_batch_http_request(self):
        return FakeBatch(self)


class FakeServiceFactory:
    """Maps access tokens to fake mailboxes and logs which token each call used."""

    def __init__(self, mailboxes: dict[str, FakeMailbox]) -> None:
        self.mailboxes = mailboxes
        self.tokens: list[str] = []

    def __call__(self, credential: str) -> FakeMailbox:
        self.tokens.append(credential)
        if credential not in self.mailboxes:
            return FakeMailbox(error=http_error(401, "Unauthorized"))
        return self.mailboxes[credential]


def make_labels(inbox: tuple[int, int], spam: tuple[int, int]) -> dict:
    return {
        "INBOX": {"messagesTotal": inbox[0], "threadsTotal": inbox[1]},
        "SPAM": {"messagesTotal": spam[0], "threadsTotal": spam[1]},
    }


@pytest.fixture
def mailbox_a() -> FakeMailbox:
    return FakeMailbox(email="a@x.com", labels=make_labels((5, 2), (1, 0)))


@pytest.fixture
def mailbox_c() -> FakeMailbox:
    return FakeMailbox(
        email="c@x.com",
        labels=make_labels((2, 2), (0, 0)),
        message_ids=["m1", "m2"],
        senders={"m1": "Alice <a@a.com>", "m2": None},
    )


@pytest.fixture
def factory(mailbox_a: FakeMailbox, mailbox_c: FakeMailbox) -> FakeServiceFactory:
    return FakeServiceFactory({"tok1": mailbox_a, "t": mailbox_c})


@pytest.fixture
def gateway(factory: FakeServiceFactory) -> MailGateway:
    return MailGateway(service_factory=factory)


@pytest.fixture
def account_a() -> Account:
    return Account(email="a@x.com", credential="tok1")


@pytest.fixture
def account_b() -> Account:
    return Account(email="b@x.com", credential="tok2")


@pytest.fixture
def account_c() -> Account:
    return Account(email="c@x.com", credential="t")


@pytest.fixture
def store() -> CredentialStore:
    return CredentialStore()


@pytest.fixture
def make_mailbox():
    return FakeMailbox


@pytest.fixture
def make_factory():
    return FakeServiceFactory


@pytest.fixture
def make_http_error():
    return http_error
