"""Gmail API client functions for finding and fetching candidate messages."""

from __future__ import annotations

import logging
from typing import Callable

from google.auth.exceptions import RefreshError
from googleapiclient.errors import HttpError
from googleapiclient.http import BatchHttpRequest
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from .constants import AUTH_FAILURE_STATUSES, BATCH_SIZE, PAGE_SIZE, RETRYABLE_STATUSES
from .exceptions import AuthError, SourceError

logger = logging.getLogger(__name__)


def _is_retryable_http_error(exc: BaseException) -> bool:
    return isinstance(exc, HttpError) and exc.resp.status in RETRYABLE_STATUSES


def _to_source_error(exc: Exception) -> SourceError:
    """Map a transport failure onto the scan error taxonomy."""
    if isinstance(exc, RefreshError):
        return AuthError(f"Gmail credentials could not be refreshed: {exc}")
    if isinstance(exc, HttpError) and exc.resp.status in AUTH_FAILURE_STATUSES:
        return AuthError(f"Gmail rejected the credentials (HTTP {exc.resp.status}).")
    return SourceError(f"Gmail request failed: {exc}")


def list_message_ids(
    service,
    query: str | None = None,
    max_results: int | None = None,
) -> list[str]:
    """List message IDs matching the query, handling pagination."""
    ids: list[str] = []
    page_token: str | None = None

    try:
        while True:
            page_size = min(PAGE_SIZE, max_results) if max_results else PAGE_SIZE
            kwargs: dict = {"userId": "me", "maxResults": page_size, "fields": "messages/id,nextPageToken"}
            if query:
                kwargs["q"] = query
            if page_token:
                kwargs["pageToken"] = page_token

            resp = service.users().messages().list(**kwargs).execute()
            for msg in resp.get("messages", []):
                ids.append(msg["id"])
                if max_results and len(ids) >= max_results:
                    return ids[:max_results]

            page_token = resp.get("nextPageToken")
            if not page_token:
                break
    except (HttpError, RefreshError, OSError) as exc:
        raise _to_source_error(exc) from exc

    logger.debug("Query %r matched %d messages", query, len(ids))
    return ids


@retry(
    retry=retry_if_exception(_is_retryable_http_error),
    wait=wait_exponential(multiplier=1, min=1, max=60),
    stop=stop_after_attempt(5),
    before_sleep=before_sleep_log(logger, logging.WARNING),
    reraise=True,
)
def _fetch_chunk(service, chunk: list[str], fetched: dict[str, dict], dropped: set[str]) -> None:
    """Fetch the ids in ``chunk`` not yet fetched or dropped, as one batch.

    Successes land in ``fetched``.  A 401/403 on any request is raised.
    Requests rejected with a retryable status raise their HttpError so
    the whole call is retried for the ids still pending; other per-request
    failures are logged and added to ``dropped``.
    """
    pending = [msg_id for msg_id in chunk if msg_id not in fetched and msg_id not in dropped]
    if not pending:
        return
    errors: dict[str, Exception] = {}

    def _on_response(request_id, response, exception):
        if exception is not None:
            errors[request_id] = exception
        else:
            fetched[request_id] = response

    batch: BatchHttpRequest = service.new_batch_http_request(callback=_on_response)
    for msg_id in pending:
        batch.add(
            service.users().messages().get(userId="me", id=msg_id, format="full"),
            request_id=msg_id,
        )
    batch.execute()

    retryable: HttpError | None = None
    for msg_id, exc in errors.items():
        if isinstance(exc, HttpError) and exc.resp.status in AUTH_FAILURE_STATUSES:
            raise exc
        if _is_retryable_http_error(exc):
            retryable = exc
            continue
        logger.warning("Skipping message %s: %s", msg_id, exc)
        dropped.add(msg_id)

    if retryable is not None:
        raise retryable


def fetch_messages(
    service,
    message_ids: list[str],
    callback: Callable[[int, int], None] | None = None,
) -> list[dict]:
    """Fetch full message resources in batches using BatchHttpRequest.

    Each batch is a fan-out of independent gets joined before returning.
    Rate-limited requests are retried; messages that fail otherwise are
    logged and left out.  The rest come back in the order of ``message_ids``.
    """
    fetched: dict[str, dict] = {}
    dropped: set[str] = set()
    total_batches = (len(message_ids) + BATCH_SIZE - 1) // BATCH_SIZE

    for batch_num in range(total_batches):
        start = batch_num * BATCH_SIZE
        chunk = message_ids[start:start + BATCH_SIZE]

        try:
            _fetch_chunk(service, chunk, fetched, dropped)
        except (HttpError, RefreshError, OSError) as exc:
            raise _to_source_error(exc) from exc

        if callback:
            callback(batch_num + 1, total_batches)

    return [fetched[msg_id] for msg_id in message_ids if msg_id in fetched]
