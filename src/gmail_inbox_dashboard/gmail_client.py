"""Read-only Gmail API gateway.

Every call takes the account's bearer token explicitly and builds its own
API resource from it, so requests for different accounts never share
credential state.
"""

from __future__ import annotations

import logging
from typing import Callable

import httplib2
from google.auth.exceptions import RefreshError, TransportError
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import Resource, build
from googleapiclient.errors import HttpError
from tenacity import Retrying, retry_if_exception, stop_after_attempt, wait_exponential
from tenacity.wait import wait_base

from .constants import (
    BATCH_SIZE,
    EXPORT_CAP,
    INBOX_LABEL,
    MAX_ATTEMPTS,
    METADATA_HEADERS,
    RETRYABLE_STATUSES,
    SPAM_LABEL,
    UNKNOWN_SENDER,
)
from .errors import CredentialError, GatewayError
from .models import MailboxCounts, MessageCount

logger = logging.getLogger(__name__)

ServiceFactory = Callable[[str], Resource]


def build_service(credential: str) -> Resource:
    """Build a Gmail API resource bound to a single access token."""
    creds = Credentials(token=credential)
    return build("gmail", "v1", credentials=creds, cache_discovery=False)


def _is_retryable_http_error(exc: BaseException) -> bool:
    return isinstance(exc, HttpError) and exc.resp.status in RETRYABLE_STATUSES


def _extract_sender(response: dict) -> str:
    """Return the From header of a metadata response, or "Unknown"."""
    for h in response.get("payload", {}).get("headers") or []:
        if h.get("name", "").lower() == "from":
            return h.get("value") or UNKNOWN_SENDER
    return UNKNOWN_SENDER


def _http_status(exc: HttpError) -> int | None:
    try:
        return int(exc.resp.status)
    except (AttributeError, TypeError, ValueError):
        return None


class MailGateway:
    """Issue read-only Gmail queries on behalf of any linked account."""

    def __init__(
        self,
        service_factory: ServiceFactory = build_service,
        max_attempts: int = MAX_ATTEMPTS,
        batch_size: int = BATCH_SIZE,
        wait: wait_base | None = None,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self._service_factory = service_factory
        self.max_attempts = max_attempts
        self.batch_size = batch_size
        self.wait = wait or wait_exponential(multiplier=1, min=1, max=60)

    def _service(self, credential: str) -> Resource:
        if not credential:
            raise CredentialError("No credential available for Gmail request")
        return self._service_factory(credential)

    def _execute(self, request):
        """Run a request (or batch), translating failures into GatewayError."""
        retrying = Retrying(
            retry=retry_if_exception(_is_retryable_http_error),
            wait=self.wait,
            stop=stop_after_attempt(self.max_attempts),
            reraise=True,
        )
        try:
            return retrying(request.execute)
        except HttpError as exc:
            status = _http_status(exc)
            raise GatewayError(f"Gmail API request failed ({status}): {exc.reason}", status=status) from exc
        except RefreshError as exc:
            # a bare access token cannot be refreshed, so a 401 surfaces here
            raise GatewayError(f"Access token rejected: {exc}", status=401) from exc
        except (TransportError, httplib2.HttpLib2Error, OSError) as exc:
            raise GatewayError(f"Could not reach Gmail API: {exc}") from exc

    def _label_counts(self, service: Resource, label_id: str) -> MessageCount:
        resp = self._execute(
            service.users().labels().get(userId="me", id=label_id, fields="messagesTotal,threadsTotal")
        )
        counts = MessageCount.from_label(resp or {})
        logger.debug("Label %s: %s messages, %s threads", label_id, counts.messages_total, counts.threads_total)
        return counts

    def get_label_counts(self, credential: str, label_id: str) -> MessageCount:
        return self._label_counts(self._service(credential), label_id)

    def get_mailbox_counts(self, credential: str) -> MailboxCounts:
        """INBOX then SPAM counts, both fetched through one API resource."""
        service = self._service(credential)
        inbox = self._label_counts(service, INBOX_LABEL)
        spam = self._label_counts(service, SPAM_LABEL)
        return MailboxCounts(inbox=inbox, spam=spam)

    def list_inbox_message_ids(self, credential: str, cap: int = EXPORT_CAP) -> list[str]:
        """List up to ``cap`` inbox message IDs from the first result page, in API order."""
        if cap < 1:
            raise ValueError("cap must be at least 1")
        service = self._service(credential)
        resp = self._execute(
            service.users().messages().list(
                userId="me",
                labelIds=[INBOX_LABEL],
                maxResults=cap,
                fields="messages/id",
            )
        )
        ids = [msg["id"] for msg in (resp or {}).get("messages", [])][:cap]
        logger.debug("Listed %d inbox messages", len(ids))
        return ids

    def _metadata_request(self, service: Resource, message_id: str):
        return service.users().messages().get(
            userId="me",
            id=message_id,
            format="metadata",
            metadataHeaders=METADATA_HEADERS,
        )

    def get_sender_header(self, credential: str, message_id: str) -> str:
        service = self._service(credential)
        return _extract_sender(self._execute(self._metadata_request(service, message_id)) or {})

    def get_sender_headers(
        self,
        credential: str,
        message_ids: list[str],
        callback: Callable[[int, int], None] | None = None,
    ) -> list[str]:
        """Fetch the From header of each message, in input order.

        Requests go out in BatchHttpRequest chunks of ``batch_size``, which
        bounds how many are in flight at once. The first failed sub-request
        aborts the whole fetch.
        """
        if not message_ids:
            return []
        service = self._service(credential)
        senders: list[str | None] = [None] * len(message_ids)
        total_batches = (len(message_ids) + self.batch_size - 1) // self.batch_size

        for batch_num in range(total_batches):
            start = batch_num * self.batch_size
            chunk = message_ids[start:start + self.batch_size]
            failures: dict[int, BaseException] = {}

            def _make_callback(index: int):
                def _cb(request_id, response, exception):
                    if exception is not None:
                        failures[index] = exception
                        return
                    senders[index] = _extract_sender(response or {})

                return _cb

            batch = service.new_batch_http_request()
            for offset, msg_id in enumerate(chunk):
                batch.add(self._metadata_request(service, msg_id), callback=_make_callback(start + offset))
            self._execute(batch)

            if failures:
                index = min(failures)
                exc = failures[index]
                status = _http_status(exc) if isinstance(exc, HttpError) else None
                raise GatewayError(
                    f"Could not fetch message {message_ids[index]}: {exc}", status=status
                ) from exc

            if callback:
                callback(batch_num + 1, total_batches)

        return [sender or UNKNOWN_SENDER for sender in senders]

    def get_profile_email(self, credential: str) -> str:
        service = self._service(credential)
        profile = self._execute(service.users().getProfile(userId="me"))
        return profile["emailAddress"]
