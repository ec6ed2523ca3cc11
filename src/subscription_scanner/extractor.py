"""Infer a subscription record from an email's subject, body and sender."""

from __future__ import annotations

from . import patterns
from .constants import SUBSCRIPTION_BONUS_TERM, UNKNOWN_NAME, UNKNOWN_PROVIDER
from .models import ExtractedSubscription
from .scorer import calculate_confidence


def resolve_provider(subject: str, body: str, sender: str) -> str:
    """Known service in the text, then in the sender, then the sender's domain."""
    provider = patterns.search(patterns.PROVIDER, subject, body)
    if provider is None:
        provider = patterns.PROVIDER.find(sender or "")
    if provider is None:
        provider = patterns.provider_from_sender(sender or "")
    return provider or UNKNOWN_PROVIDER


def extract(subject: str, body: str, sender: str, message_id: str = "") -> ExtractedSubscription:
    """Run every recognizer over one message and score the result.

    Pure and deterministic: the same (subject, body, sender) always gives
    the same record.  Unmatched fields stay None; provider and name fall
    back to sentinels.
    """
    subject = subject or ""
    body = body or ""

    price = patterns.search(patterns.PRICE, subject, body)
    billing_cycle = patterns.search(patterns.BILLING_CYCLE, subject, body)
    renewal_date = patterns.search(patterns.RENEWAL_DATE, subject, body)
    provider = resolve_provider(subject, body, sender)
    has_keyword = SUBSCRIPTION_BONUS_TERM in f"{subject} {body}".lower()

    confidence = calculate_confidence(
        price=price is not None,
        billing_cycle=billing_cycle is not None,
        renewal_date=renewal_date is not None,
        provider=provider != UNKNOWN_PROVIDER,
        subscription_keyword=has_keyword,
    )

    return ExtractedSubscription(
        name=provider if provider != UNKNOWN_PROVIDER else UNKNOWN_NAME,
        provider=provider,
        confidence=confidence,
        price=price,
        billing_cycle=billing_cycle,
        renewal_date=renewal_date,
        message_id=message_id,
    )
