"""Shared fixtures for tests."""

from __future__ import annotations

import base64
from datetime import date
from decimal import Decimal

import pytest

from subscription_scanner.models import BillingCycle, ExtractedSubscription, ScanResult


def encode(text: str) -> str:
    """Encode text the way Gmail does: base64url without padding."""
    return base64.urlsafe_b64encode(text.encode("utf-8")).decode().rstrip("=")


def gmail_message(
    msg_id: str,
    subject: str = "",
    sender: str = "",
    body: str | None = None,
    parts: list[dict] | None = None,
) -> dict:
    """Build a Gmail API message resource."""
    payload: dict = {
        "mimeType": "multipart/alternative" if parts else "text/plain",
        "headers": [
            {"name": "Subject", "value": subject},
            {"name": "From", "value": sender},
        ],
        "body": {"data": encode(body)} if body is not None else {},
    }
    if parts:
        payload["parts"] = parts
    return {"id": msg_id, "payload": payload}


@pytest.fixture
def netflix_message() -> dict:
    return gmail_message(
        "msg_nf_001",
        subject="Your Netflix subscription renewal",
        sender="Netflix <billing@netflix.com>",
        body="Amount: $15.99. Next billing: 04/12/2024.",
    )


@pytest.fixture
def plain_message() -> dict:
    return gmail_message(
        "msg_pl_001",
        subject="Payment received",
        sender="noreply@unknown.io",
        body="Thanks for getting in touch.",
    )


@pytest.fixture
def accepted_candidate() -> ExtractedSubscription:
    return ExtractedSubscription(
        name="Spotify",
        provider="Spotify",
        confidence=0.9,
        price=Decimal("9.99"),
        billing_cycle=BillingCycle.MONTHLY,
        renewal_date=date(2024, 5, 1),
        message_id="msg_sp_001",
    )


@pytest.fixture
def rejected_candidate() -> ExtractedSubscription:
    return ExtractedSubscription(
        name="Unknown",
        provider="Unknown",
        confidence=0.2,
        message_id="msg_uk_001",
    )


@pytest.fixture
def sample_scan_result(accepted_candidate, rejected_candidate) -> ScanResult:
    return ScanResult(
        total_messages=3,
        candidates=[accepted_candidate, rejected_candidate],
        accepted=[accepted_candidate],
        skipped=1,
        threshold=0.7,
        query="subject:(subscription)",
    )
