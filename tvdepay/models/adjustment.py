"""Pending adjustment entity for the tvdepay application."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, Dict, Any
from uuid import uuid4

from tvdepay.models.fields import parse_enum, to_decimal


class AdjustmentStatus(Enum):
    """Whether an adjustment is still waiting for a settlement."""
    PENDING = "PENDING"
    RESOLVED = "RESOLVED"


@dataclass
class Adjustment:
    """
    A one-off amount to carry into a driver's next settlement.

    Positive amounts are owed to the driver, negative amounts are owed
    to the company.

    Attributes:
        driver_id: ID of the driver the adjustment belongs to
        driver_name: Driver's name
        amount: Signed amount
        notes: Reason for the adjustment
        status: PENDING until a settlement absorbs it
        id: Unique identifier for the adjustment
        created_at: When the adjustment was registered
        resolved_in_settlement_id: Settlement that absorbed the adjustment
    """
    driver_id: str
    driver_name: str
    amount: Decimal
    notes: str
    status: AdjustmentStatus = AdjustmentStatus.PENDING
    id: Optional[str] = None
    created_at: Optional[str] = None
    resolved_in_settlement_id: Optional[str] = None

    def __post_init__(self):
        """Initialize default values."""
        if self.id is None:
            self.id = str(uuid4())
        if self.created_at is None:
            self.created_at = datetime.now().isoformat()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "driver_id": self.driver_id,
            "driver_name": self.driver_name,
            "amount": str(self.amount),
            "notes": self.notes,
            "status": self.status.value,
            "created_at": self.created_at,
            "resolved_in_settlement_id": self.resolved_in_settlement_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Adjustment":
        return cls(
            id=data.get("id"),
            driver_id=data.get("driver_id") or data.get("driverId", ""),
            driver_name=data.get("driver_name") or data.get("driverName", ""),
            amount=to_decimal(data.get("amount")),
            notes=data.get("notes", ""),
            status=parse_enum(AdjustmentStatus, data.get("status")) or AdjustmentStatus.PENDING,
            created_at=data.get("created_at") or data.get("dateCreated"),
            resolved_in_settlement_id=(
                data.get("resolved_in_settlement_id") or data.get("resolvedInCalculationId")
            ),
        )
