"""Recognizers for subscription fields in email text.

Each recognizer pairs a case-insensitive regex with a normalizer that turns
the first capture group into a typed value.  A normalizer returns None when
the captured text does not make sense (e.g. month 13), which counts as no
match.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Callable

from .constants import KNOWN_SERVICES
from .models import BillingCycle

_FROM_RE = re.compile(r"^(.*?)\s*<([^>]+)>$")


@dataclass(frozen=True)
class Recognizer:
    """A named regex plus the function that normalizes its capture."""

    name: str
    pattern: str
    normalize: Callable[[str], Any]
    compiled: re.Pattern = field(init=False, compare=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "compiled", re.compile(self.pattern, re.IGNORECASE))

    def find(self, text: str) -> Any:
        """Return the first normalizable value in ``text``, or None."""
        for m in self.compiled.finditer(text):
            value = self.normalize(m.group(1))
            if value is not None:
                return value
        return None


# --- Normalizers ---

def normalize_price(raw: str) -> Decimal | None:
    try:
        return Decimal(raw.replace(",", ""))
    except InvalidOperation:
        return None


def normalize_date(raw: str) -> date | None:
    """Parse a month-first D/D/YY[YY] token; two-digit years use the %y pivot."""
    parts = re.split(r"[-/]", raw)
    if len(parts) != 3:
        return None
    month, day, year = parts
    if len(year) == 4:
        fmt = "%m/%d/%Y"
    elif len(year) == 2:
        fmt = "%m/%d/%y"
    else:
        return None
    try:
        return datetime.strptime(f"{month}/{day}/{year}", fmt).date()
    except ValueError:
        return None


_CYCLE_SYNONYMS = {
    "weekly": BillingCycle.WEEKLY,
    "week": BillingCycle.WEEKLY,
    "monthly": BillingCycle.MONTHLY,
    "month": BillingCycle.MONTHLY,
    "quarterly": BillingCycle.QUARTERLY,
    "quarter": BillingCycle.QUARTERLY,
    "yearly": BillingCycle.YEARLY,
    "year": BillingCycle.YEARLY,
    "annual": BillingCycle.YEARLY,
    "annually": BillingCycle.YEARLY,
}


def normalize_billing_cycle(raw: str | None) -> BillingCycle | None:
    if not raw:
        return None
    return _CYCLE_SYNONYMS.get(raw.lower())


_CANONICAL_SERVICES = {name.lower(): name for name in KNOWN_SERVICES}


def normalize_service(raw: str) -> str | None:
    return _CANONICAL_SERVICES.get(" ".join(raw.split()).lower())


def _service_alternation() -> str:
    # Longest first so multi-word names win over their prefixes.
    names = sorted(KNOWN_SERVICES, key=len, reverse=True)
    return "|".join(re.escape(n).replace(r"\ ", " ").replace(" ", r"\s+") for n in names)


# --- Recognizers ---

PRICE = Recognizer(
    name="price",
    pattern=(
        r"(?:\b(?:USD|EUR|GBP|CAD|AUD|INR)|[$€£₹])\s*"
        r"(\d{1,3}(?:,\d{3})+(?:\.\d{2})?|\d+(?:\.\d{2})?)(?!\.?\d)"
    ),
    normalize=normalize_price,
)

RENEWAL_DATE = Recognizer(
    name="renewal_date",
    pattern=(
        r"\b(?:renewal|next\s+payment|expiration|due|next\s+billing)"
        r"[^\n]*?(?<!\d)(\d{1,2}[-/]\d{1,2}[-/]\d{2,4})(?!\d)"
    ),
    normalize=normalize_date,
)

BILLING_CYCLE = Recognizer(
    name="billing_cycle",
    pattern=r"\b(weekly|monthly|quarterly|yearly|annually|annual|month|year|quarter|week)\b",
    normalize=normalize_billing_cycle,
)

PROVIDER = Recognizer(
    name="provider",
    pattern=rf"(?<!\w)({_service_alternation()})(?!\w)",
    normalize=normalize_service,
)


def search(recognizer: Recognizer, subject: str, body: str) -> Any:
    """Search subject+body first, then the subject alone."""
    value = recognizer.find(f"{subject} {body}")
    if value is None:
        value = recognizer.find(subject)
    return value


def parse_from_header(from_value: str) -> tuple[str, str]:
    """Parse a From header into (display name, email address).

    Handles formats like:
      "John Doe <john@example.com>" -> ("John Doe", "john@example.com")
      "<john@example.com>"          -> ("", "john@example.com")
      "john@example.com"            -> ("", "john@example.com")
    """
    if not from_value:
        return ("", "")
    m = _FROM_RE.match(from_value.strip())
    if m:
        name = m.group(1).strip().strip('"').strip("'")
        return (name, m.group(2).strip())
    email = from_value.strip().strip("<>")
    return ("", email)


def provider_from_sender(sender: str) -> str | None:
    """Derive a provider name from the first label of the sender's domain."""
    _, email = parse_from_header(sender)
    if "@" not in email:
        return None
    label = email.rpartition("@")[2].split(".")[0].strip()
    if not label:
        return None
    return label[:1].upper() + label[1:]
