"""Data models for Subscription Scanner."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum


class BillingCycle(str, Enum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


@dataclass
class CandidateMessage:
    """A message returned by the mail search, not yet known to be a subscription."""

    message_id: str
    subject: str
    sender: str  # Full From header value
    payload: dict = field(default_factory=dict)  # Raw Gmail message payload


@dataclass(frozen=True)
class ExtractedSubscription:
    """What the extraction engine inferred from one message."""

    name: str
    provider: str
    confidence: float
    price: Decimal | None = None
    billing_cycle: BillingCycle | None = None
    renewal_date: date | None = None
    message_id: str = ""

    def to_dict(self) -> dict:
        return {
            "message_id": self.message_id,
            "name": self.name,
            "provider": self.provider,
            "price": float(self.price) if self.price is not None else None,
            "billing_cycle": self.billing_cycle.value if self.billing_cycle else None,
            "renewal_date": self.renewal_date.isoformat() if self.renewal_date else None,
            "confidence": self.confidence,
        }


@dataclass
class Subscription:
    """A subscription imported into the local store."""

    name: str
    price: Decimal
    billing_cycle: BillingCycle
    start_date: date
    next_billing_date: date
    category: str
    status: str = "active"
    auto_renew: bool = True
    description: str = ""
    provider: str = ""
    source_message_id: str = ""
    id: int | None = None


@dataclass
class ScanResult:
    """Result of a mailbox scan."""

    total_messages: int
    candidates: list[ExtractedSubscription] = field(default_factory=list)
    accepted: list[ExtractedSubscription] = field(default_factory=list)
    skipped: int = 0
    threshold: float = 0.0
    scan_date: str = field(default_factory=lambda: datetime.now().isoformat())
    query: str = ""
