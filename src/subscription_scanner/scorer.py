"""Confidence scoring and acceptance filtering of extracted subscriptions."""

from __future__ import annotations

from .constants import (
    CONFIDENCE_HIGH,
    CONFIDENCE_MEDIUM,
    CONFIDENCE_WEIGHTS,
    DEFAULT_THRESHOLD,
)
from .models import ExtractedSubscription


def calculate_confidence(
    *,
    price: bool,
    billing_cycle: bool,
    renewal_date: bool,
    provider: bool,
    subscription_keyword: bool,
    weights: dict[str, float] | None = None,
) -> float:
    """Sum the weights of the signals that matched.

    Returns a float between 0.0 and 1.0.
    """
    weights = weights or CONFIDENCE_WEIGHTS
    signals = {
        "price": price,
        "billing_cycle": billing_cycle,
        "renewal_date": renewal_date,
        "provider": provider,
        "subscription_keyword": subscription_keyword,
    }
    total = sum(weights[name] for name, matched in signals.items() if matched)
    return min(round(total, 2), 1.0)


def classify_confidence(score: float) -> str:
    """Bucket a confidence score for display."""
    if score >= CONFIDENCE_HIGH:
        return "high"
    if score >= CONFIDENCE_MEDIUM:
        return "medium"
    return "low"


def is_acceptable(candidate: ExtractedSubscription, threshold: float = DEFAULT_THRESHOLD) -> bool:
    return candidate.price is not None and candidate.confidence > threshold


def filter_candidates(
    candidates: list[ExtractedSubscription],
    threshold: float = DEFAULT_THRESHOLD,
) -> list[ExtractedSubscription]:
    """Keep priced candidates scoring strictly above ``threshold``, in their original order."""
    return [c for c in candidates if is_acceptable(c, threshold)]
