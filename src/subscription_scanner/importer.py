"""Turn accepted extractions into subscriptions ready to store."""

from __future__ import annotations

import calendar
from datetime import date, timedelta

from .constants import IMPORT_CATEGORY, IMPORT_DEFAULT_CYCLE, IMPORT_STATUS
from .models import BillingCycle, ExtractedSubscription, Subscription


def _add_months(start: date, months: int) -> date:
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def next_billing_date(start: date, cycle: BillingCycle | None) -> date:
    """Date one billing period after ``start``; unknown cycles count as monthly."""
    if cycle == BillingCycle.WEEKLY:
        return start + timedelta(days=7)
    if cycle == BillingCycle.QUARTERLY:
        return _add_months(start, 3)
    if cycle == BillingCycle.YEARLY:
        return _add_months(start, 12)
    return _add_months(start, 1)


def to_subscription(extracted: ExtractedSubscription, today: date | None = None) -> Subscription:
    """Build a Subscription from an accepted extraction, filling import defaults.

    Raises ValueError when the extraction has no price.
    """
    if extracted.price is None:
        raise ValueError(f"Cannot import {extracted.name!r} without a price")

    today = today or date.today()
    cycle = extracted.billing_cycle or BillingCycle(IMPORT_DEFAULT_CYCLE)

    return Subscription(
        name=extracted.name,
        price=extracted.price,
        billing_cycle=cycle,
        start_date=today,
        next_billing_date=extracted.renewal_date or next_billing_date(today, cycle),
        category=IMPORT_CATEGORY,
        status=IMPORT_STATUS,
        auto_renew=True,
        description=f"Imported from Gmail - {extracted.provider}",
        provider=extracted.provider,
        source_message_id=extracted.message_id,
    )
