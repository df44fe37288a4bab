"""Receipt entity for the tvdepay application."""

from dataclasses import dataclass
import datetime
from decimal import Decimal
from typing import Optional, Dict, Any
from uuid import uuid4

from tvdepay.models.fields import to_decimal
from tvdepay.models.record import parse_date


@dataclass
class Receipt:
    """
    An invoice ("recibo verde") issued by a driver to the company.

    Attributes:
        driver_id: ID of the driver who issued the receipt
        driver_name: Driver's name
        amount: Invoiced amount
        date: Issue date
        id: Unique identifier for the receipt
        notes: Free-text notes
    """
    driver_id: str
    driver_name: str
    amount: Decimal
    date: Optional[datetime.date] = None
    id: Optional[str] = None
    notes: Optional[str] = None

    def __post_init__(self):
        """Initialize default values."""
        if self.id is None:
            self.id = str(uuid4())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "driver_id": self.driver_id,
            "driver_name": self.driver_name,
            "amount": str(self.amount),
            "date": self.date.isoformat() if self.date else None,
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Receipt":
        return cls(
            id=data.get("id"),
            driver_id=data.get("driver_id") or data.get("driverId", ""),
            driver_name=data.get("driver_name") or data.get("driverName", ""),
            amount=to_decimal(data.get("amount")),
            date=parse_date(data.get("date")),
            notes=data.get("notes"),
        )
