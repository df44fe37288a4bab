"""Settlement record entity for the tvdepay application."""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Optional, Dict, Any
from uuid import uuid4

from tvdepay.models.fields import parse_enum
from tvdepay.models.settlement import SettlementInput, sanitize


class SettlementStatus(Enum):
    """Review status of a stored settlement."""
    PENDING = "Pendente"
    ACCEPTED = "Aceito"
    REVISION_REQUESTED = "Revisão Solicitada"


def parse_date(value: Any) -> Optional[date]:
    """Parse an ISO date or datetime string, returning None if it is unusable."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


@dataclass
class SettlementRecord:
    """
    A stored driver-period settlement.

    Only the raw figures are persisted; the breakdown is recomputed from
    them every time it is displayed.

    Attributes:
        driver_id: ID of the driver the settlement belongs to
        driver_name: Driver's name at the time of the settlement
        figures: Raw period figures and policy flags, as stored
        period_start: First day of the settled period
        period_end: Last day of the settled period
        admin_id: ID of the admin who entered the figures
        status: Review status
        id: Unique identifier for the record
        created_at: When the record was created
        other_expenses_notes: Justification for other_expenses
        revision_notes: Driver's reason for requesting a revision
    """
    driver_id: str
    driver_name: str
    figures: Dict[str, Any]
    period_start: Optional[date] = None
    period_end: Optional[date] = None
    admin_id: Optional[str] = None
    status: SettlementStatus = SettlementStatus.PENDING
    id: Optional[str] = None
    created_at: Optional[str] = None
    other_expenses_notes: Optional[str] = None
    revision_notes: Optional[str] = None

    def __post_init__(self):
        """Initialize default values."""
        if self.id is None:
            self.id = str(uuid4())
        if self.created_at is None:
            self.created_at = datetime.now().isoformat()

    def to_input(self) -> SettlementInput:
        """Normalize the stored figures into an engine input."""
        return sanitize(self.figures)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for the record store."""
        data = dict(self.figures)
        data.update({
            "id": self.id,
            "driver_id": self.driver_id,
            "driver_name": self.driver_name,
            "admin_id": self.admin_id,
            "status": self.status.value,
            "created_at": self.created_at,
            "period_start": self.period_start.isoformat() if self.period_start else None,
            "period_end": self.period_end.isoformat() if self.period_end else None,
            "other_expenses_notes": self.other_expenses_notes,
            "revision_notes": self.revision_notes,
        })
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SettlementRecord":
        """Build a record from a record store document."""
        meta_keys = {
            "id", "driver_id", "driverId", "driver_name", "driverName", "admin_id", "adminId",
            "status", "created_at", "date", "period_start", "periodStart", "period_end",
            "periodEnd", "other_expenses_notes", "otherExpensesNotes", "revision_notes",
            "revisionNotes",
        }
        figures = {k: v for k, v in data.items() if k not in meta_keys}
        return cls(
            id=data.get("id"),
            driver_id=data.get("driver_id") or data.get("driverId", ""),
            driver_name=data.get("driver_name") or data.get("driverName", ""),
            admin_id=data.get("admin_id") or data.get("adminId"),
            figures=figures,
            status=parse_enum(SettlementStatus, data.get("status")) or SettlementStatus.PENDING,
            created_at=data.get("created_at") or data.get("date"),
            period_start=parse_date(data.get("period_start") or data.get("periodStart")),
            period_end=parse_date(data.get("period_end") or data.get("periodEnd")),
            other_expenses_notes=data.get("other_expenses_notes") or data.get("otherExpensesNotes"),
            revision_notes=data.get("revision_notes") or data.get("revisionNotes"),
        )
