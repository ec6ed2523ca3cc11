"""Tests for turning extractions into subscriptions."""

from datetime import date
from decimal import Decimal

import pytest

from subscription_scanner.importer import next_billing_date, to_subscription
from subscription_scanner.models import BillingCycle, ExtractedSubscription


def test_next_billing_date_per_cycle():
    start = date(2024, 1, 15)
    assert next_billing_date(start, BillingCycle.WEEKLY) == date(2024, 1, 22)
    assert next_billing_date(start, BillingCycle.MONTHLY) == date(2024, 2, 15)
    assert next_billing_date(start, BillingCycle.QUARTERLY) == date(2024, 4, 15)
    assert next_billing_date(start, BillingCycle.YEARLY) == date(2025, 1, 15)


def test_next_billing_date_unknown_cycle_is_monthly():
    assert next_billing_date(date(2024, 3, 1), None) == date(2024, 4, 1)


def test_next_billing_date_clamps_month_end():
    assert next_billing_date(date(2024, 1, 31), BillingCycle.MONTHLY) == date(2024, 2, 29)
    assert next_billing_date(date(2023, 11, 30), BillingCycle.QUARTERLY) == date(2024, 2, 29)
    assert next_billing_date(date(2024, 2, 29), BillingCycle.YEARLY) == date(2025, 2, 28)
    assert next_billing_date(date(2024, 12, 10), BillingCycle.MONTHLY) == date(2025, 1, 10)


def test_to_subscription_uses_renewal_date(accepted_candidate):
    sub = to_subscription(accepted_candidate, today=date(2024, 4, 1))
    assert sub.name == "Spotify"
    assert sub.price == Decimal("9.99")
    assert sub.billing_cycle == BillingCycle.MONTHLY
    assert sub.start_date == date(2024, 4, 1)
    assert sub.next_billing_date == date(2024, 5, 1)
    assert sub.category == "Imported"
    assert sub.status == "active"
    assert sub.auto_renew is True
    assert sub.description == "Imported from Gmail - Spotify"
    assert sub.source_message_id == "msg_sp_001"


def test_to_subscription_fills_defaults():
    extracted = ExtractedSubscription(
        name="Acme", provider="Acme", confidence=0.8, price=Decimal("5.00"), message_id="m9"
    )
    sub = to_subscription(extracted, today=date(2024, 1, 31))
    assert sub.billing_cycle == BillingCycle.MONTHLY
    assert sub.next_billing_date == date(2024, 2, 29)


def test_to_subscription_requires_price(rejected_candidate):
    with pytest.raises(ValueError):
        to_subscription(rejected_candidate)
