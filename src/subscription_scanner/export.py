"""Export stored subscriptions to CSV or JSON."""

import csv
import json

from .models import Subscription

FIELDNAMES = [
    "id",
    "name",
    "price",
    "billing_cycle",
    "start_date",
    "next_billing_date",
    "category",
    "status",
    "auto_renew",
    "provider",
    "description",
]


def _to_row(sub: Subscription) -> dict:
    return {
        "id": sub.id,
        "name": sub.name,
        "price": float(sub.price),
        "billing_cycle": sub.billing_cycle.value,
        "start_date": sub.start_date.isoformat(),
        "next_billing_date": sub.next_billing_date.isoformat(),
        "category": sub.category,
        "status": sub.status,
        "auto_renew": sub.auto_renew,
        "provider": sub.provider,
        "description": sub.description,
    }


def export_subscriptions(subscriptions: list[Subscription], format: str, output_path: str) -> None:
    """Export subscriptions to a file.

    Args:
        subscriptions: The subscriptions to export.
        format: Output format, either 'csv' or 'json'.
        output_path: Path to write the output file.
    """
    rows = [_to_row(sub) for sub in subscriptions]

    if format == "csv":
        with open(output_path, "w", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=FIELDNAMES)
            writer.writeheader()
            writer.writerows(rows)
    elif format == "json":
        with open(output_path, "w") as f:
            json.dump(rows, f, indent=2)
    else:
        raise ValueError(f"Unsupported export format: {format}")
