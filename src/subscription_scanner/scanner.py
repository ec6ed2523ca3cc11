"""Scan orchestration - fetches messages, extracts subscriptions, filters."""

from __future__ import annotations

import logging

from .auth import GmailSession
from .constants import DEFAULT_MAX_RESULTS, DEFAULT_QUERY, DEFAULT_THRESHOLD
from .display import console, create_progress
from .exceptions import MessageParseError
from .extractor import extract
from .gmail_client import fetch_messages, list_message_ids
from .models import CandidateMessage, ExtractedSubscription, ScanResult
from .normalizer import extract_body
from .scorer import filter_candidates

logger = logging.getLogger(__name__)


def _get_header(headers: list[dict], name: str) -> str:
    """Get a header value by name, case-insensitively."""
    for header in headers:
        if header.get("name", "").lower() == name.lower():
            return header.get("value", "")
    return ""


def parse_message(raw: dict) -> CandidateMessage:
    """Turn a Gmail message resource into a CandidateMessage.

    Raises MessageParseError when the resource lacks an id, a payload or
    its headers.
    """
    if not isinstance(raw, dict) or not raw.get("id"):
        raise MessageParseError("Message has no id")
    payload = raw.get("payload")
    if not isinstance(payload, dict) or not isinstance(payload.get("headers"), list):
        raise MessageParseError(f"Message {raw['id']} has no headers")
    try:
        subject = _get_header(payload["headers"], "Subject")
        sender = _get_header(payload["headers"], "From")
    except AttributeError as exc:
        raise MessageParseError(f"Message {raw['id']} has malformed headers") from exc
    return CandidateMessage(message_id=raw["id"], subject=subject, sender=sender, payload=payload)


def read_body(msg: CandidateMessage) -> str:
    """Plain text of a parsed message; a malformed body or part raises MessageParseError."""
    try:
        return extract_body(msg.payload)
    except (AttributeError, TypeError) as exc:
        raise MessageParseError(f"Message {msg.message_id} has a malformed body: {exc}") from exc


def extract_candidates(raw_messages: list[dict]) -> tuple[list[ExtractedSubscription], int]:
    """Normalize and extract every message, skipping ones that cannot be parsed.

    Returns (candidates in source order, number skipped).
    """
    candidates: list[ExtractedSubscription] = []
    skipped = 0
    for raw in raw_messages:
        try:
            msg = parse_message(raw)
            body = read_body(msg)
        except MessageParseError as exc:
            logger.debug("Skipping unparseable message: %s", exc)
            skipped += 1
            continue
        candidates.append(extract(msg.subject, body, msg.sender, message_id=msg.message_id))
    return candidates, skipped


def scan_mailbox(
    session: GmailSession,
    query: str | None = None,
    max_results: int | None = DEFAULT_MAX_RESULTS,
    threshold: float = DEFAULT_THRESHOLD,
) -> ScanResult:
    """Run a full scan: list IDs, fetch messages, extract, filter.

    SourceError (and AuthError) from the Gmail layer propagate unchanged.
    """
    query = query or DEFAULT_QUERY
    service = session.service

    # Step 1: List message IDs
    console.print("[bold]Step 1/3:[/bold] Searching for subscription emails...")
    with create_progress("Listing messages") as progress:
        task = progress.add_task("listing", total=None)
        ids = list_message_ids(service, query=query, max_results=max_results)
        progress.update(task, completed=len(ids), total=len(ids))

    console.print(f"  Found [bold]{len(ids)}[/bold] messages")

    if not ids:
        return ScanResult(total_messages=0, threshold=threshold, query=query)

    # Step 2: Fetch message bodies
    console.print("[bold]Step 2/3:[/bold] Fetching messages...")
    with create_progress("Fetching messages") as progress:
        task = progress.add_task("fetching", total=None)

        def on_batch(batch_num: int, total: int) -> None:
            progress.update(task, completed=batch_num, total=total)

        raw_messages = fetch_messages(service, ids, callback=on_batch)

    # Step 3: Extract and filter
    console.print("[bold]Step 3/3:[/bold] Extracting subscription details...")
    candidates, skipped = extract_candidates(raw_messages)
    accepted = filter_candidates(candidates, threshold)

    if skipped:
        logger.info("Skipped %d messages that could not be parsed", skipped)
    console.print(
        f"  [bold]{len(accepted)}[/bold] of {len(candidates)} candidates "
        f"scored above {threshold:.2f}"
    )

    return ScanResult(
        total_messages=len(raw_messages),
        candidates=candidates,
        accepted=accepted,
        skipped=skipped,
        threshold=threshold,
        query=query,
    )
