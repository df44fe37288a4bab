"""Weekly rental toll entity for the tvdepay application."""

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Dict, Any

from tvdepay.models.fields import to_decimal
from tvdepay.models.record import parse_date


def week_start(day: date) -> date:
    """Return the Monday of the week containing day."""
    return day - timedelta(days=day.weekday())


@dataclass
class TollEntry:
    """
    Tolls billed to a rented vehicle during one week.

    Entries are keyed by driver and Monday, so registering the same week
    again replaces the amount instead of adding a second entry.
    """
    driver_id: str
    period_start: date
    amount: Decimal

    @property
    def id(self) -> str:
        return f"{self.driver_id}_{self.period_start.isoformat()}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "driver_id": self.driver_id,
            "period_start": self.period_start.isoformat(),
            "amount": str(self.amount),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TollEntry":
        return cls(
            driver_id=data.get("driver_id") or data.get("driverId", ""),
            period_start=parse_date(data.get("period_start") or data.get("periodStart")),
            amount=to_decimal(data.get("amount")),
        )
