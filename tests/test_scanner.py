"""Tests for the scanner module."""

from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest
from conftest import encode, gmail_message

from subscription_scanner.exceptions import MessageParseError, SourceError
from subscription_scanner.scanner import extract_candidates, parse_message, scan_mailbox


def test_parse_message_reads_headers_case_insensitively():
    raw = {
        "id": "m1",
        "payload": {"headers": [{"name": "subject", "value": "Hi"}, {"name": "FROM", "value": "a@b.com"}]},
    }
    msg = parse_message(raw)
    assert msg.message_id == "m1"
    assert msg.subject == "Hi"
    assert msg.sender == "a@b.com"


def test_parse_message_missing_headers_raises():
    with pytest.raises(MessageParseError):
        parse_message({"id": "m1", "payload": {"body": {}}})
    with pytest.raises(MessageParseError):
        parse_message({"id": "m1"})
    with pytest.raises(MessageParseError):
        parse_message({"payload": {"headers": []}})
    with pytest.raises(MessageParseError):
        parse_message({"id": "m1", "payload": {"headers": ["not a dict"]}})


def test_extract_candidates_keeps_source_order(netflix_message, plain_message):
    candidates, skipped = extract_candidates([netflix_message, plain_message])
    assert skipped == 0
    assert [c.message_id for c in candidates] == ["msg_nf_001", "msg_pl_001"]
    assert candidates[0].price == Decimal("15.99")
    assert candidates[0].confidence == 0.8


def test_unparseable_messages_are_absorbed():
    good = [gmail_message(f"m{i}", subject="Receipt", sender="x@example.com", body="$1.00") for i in range(7)]
    bad = [{"id": f"bad{i}"} for i in range(3)]
    batch = good[:3] + bad + good[3:]

    candidates, skipped = extract_candidates(batch)

    assert len(candidates) == 7
    assert skipped == 3
    assert [c.message_id for c in candidates] == [f"m{i}" for i in range(7)]


def test_malformed_bodies_are_skipped_between_good_messages():
    first = gmail_message("m1", subject="Receipt", sender="x@example.com", body="$1.00")
    bad_part = gmail_message("m2", subject="Receipt", sender="x@example.com", parts=["not-a-dict"])
    bad_body = gmail_message("m3", subject="Receipt", sender="x@example.com")
    bad_body["payload"]["body"] = "garbage"
    last = gmail_message("m4", subject="Receipt", sender="x@example.com", body="$2.00")

    candidates, skipped = extract_candidates([first, bad_part, bad_body, last])

    assert [c.message_id for c in candidates] == ["m1", "m4"]
    assert skipped == 2


def test_html_only_message_is_decoded():
    raw = gmail_message(
        "m1",
        subject="Your receipt",
        sender="Adobe <mail@adobe.com>",
        parts=[{"mimeType": "text/html", "body": {"data": encode("<p>Total: <b>$52.99</b> yearly</p>")}}],
    )
    [candidate], _ = extract_candidates([raw])
    assert candidate.price == Decimal("52.99")
    assert candidate.provider == "Adobe"


def test_empty_body_yields_provider_only():
    raw = gmail_message("m1", subject="Hello", sender="Spotify <no-reply@spotify.com>")
    [candidate], _ = extract_candidates([raw])
    assert candidate.provider == "Spotify"
    assert candidate.price is None
    assert candidate.renewal_date is None
    assert candidate.confidence == 0.2


def test_malformed_body_still_extracts_from_subject():
    raw = gmail_message("m1", subject="Netflix subscription $15.99", sender="billing@netflix.com")
    raw["payload"]["body"] = {"data": "!!!"}
    [candidate], skipped = extract_candidates([raw])
    assert skipped == 0
    assert candidate.price == Decimal("15.99")


def test_scan_mailbox_filters_candidates(netflix_message, plain_message):
    session = MagicMock()
    with patch("subscription_scanner.scanner.list_message_ids", return_value=["msg_nf_001", "msg_pl_001"]) as lister, \
            patch("subscription_scanner.scanner.fetch_messages", return_value=[netflix_message, plain_message]):
        result = scan_mailbox(session, query="subject:renewal", max_results=10, threshold=0.7)

    lister.assert_called_once_with(session.service, query="subject:renewal", max_results=10)
    assert result.total_messages == 2
    assert len(result.candidates) == 2
    assert [c.message_id for c in result.accepted] == ["msg_nf_001"]
    assert result.query == "subject:renewal"
    assert result.threshold == 0.7


def test_scan_mailbox_no_messages():
    session = MagicMock()
    with patch("subscription_scanner.scanner.list_message_ids", return_value=[]), \
            patch("subscription_scanner.scanner.fetch_messages") as fetcher:
        result = scan_mailbox(session)

    fetcher.assert_not_called()
    assert result.total_messages == 0
    assert result.accepted == []
    assert result.query.startswith("subject:(")


def test_scan_mailbox_propagates_source_errors():
    session = MagicMock()
    with patch("subscription_scanner.scanner.list_message_ids", side_effect=SourceError("offline")):
        with pytest.raises(SourceError):
            scan_mailbox(session)
