"""Monthly spend and upcoming renewals for stored subscriptions."""

from __future__ import annotations

from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from .constants import UPCOMING_RENEWAL_DAYS, WEEKS_PER_MONTH
from .models import BillingCycle, Subscription

_CENTS = Decimal("0.01")


def monthly_cost(sub: Subscription) -> Decimal:
    """Price of one subscription spread over a month."""
    if sub.billing_cycle == BillingCycle.WEEKLY:
        return sub.price * WEEKS_PER_MONTH
    if sub.billing_cycle == BillingCycle.QUARTERLY:
        return sub.price / 3
    if sub.billing_cycle == BillingCycle.YEARLY:
        return sub.price / 12
    return sub.price


def total_monthly_cost(subscriptions: list[Subscription]) -> Decimal:
    """Sum of monthly costs, rounded to cents."""
    total = sum((monthly_cost(sub) for sub in subscriptions), Decimal("0"))
    return total.quantize(_CENTS, rounding=ROUND_HALF_UP)


def days_until_renewal(sub: Subscription, today: date | None = None) -> int:
    """Whole days from ``today`` to the next billing date; negative when overdue."""
    return (sub.next_billing_date - (today or date.today())).days


def upcoming_renewals(
    subscriptions: list[Subscription],
    days: int = UPCOMING_RENEWAL_DAYS,
    today: date | None = None,
) -> list[tuple[Subscription, int]]:
    """Subscriptions renewing within ``days`` (inclusive), soonest first.

    Returns (subscription, days until renewal) pairs.  Overdue
    subscriptions are left out.
    """
    today = today or date.today()
    upcoming = [(sub, days_until_renewal(sub, today)) for sub in subscriptions]
    upcoming = [(sub, n) for sub, n in upcoming if 0 <= n <= days]
    return sorted(upcoming, key=lambda pair: pair[1])
