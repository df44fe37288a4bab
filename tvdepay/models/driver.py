"""Driver profile entity for the tvdepay application."""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional, Dict, Any

from tvdepay.models.fields import parse_enum, pick, to_bool, to_decimal
from tvdepay.models.settlement import CompensationModel, PercentageSplit, FuelType


class SlotType(Enum):
    """How a slot rental driver pays for the slot."""
    PERCENTAGE = "PERCENTAGE"
    FIXED = "FIXED"


@dataclass
class DriverProfile:
    """
    Contractual configuration of a driver.

    Attributes:
        id: Unique identifier for the driver
        name: Driver's display name
        compensation_model: Compensation model of the contract
        matricula: Plate of the vehicle the driver works with
        slot_type: Percentage commission or fixed fee (SLOT_RENTAL only)
        slot_fixed_value: Weekly fee when slot_type is FIXED
        default_rental_value: Weekly rental when the model is FLEET_RENTAL
        percentage_split: Split sub-type (REVENUE_SHARE only)
        fuel_type: Default fuel type of the driver's vehicle
        is_iva_exempt: Whether the driver is exempt from IVA
        outstanding_debt: Debt still owed to the company
        debt_notes: Free-text notes about the debt
        vehicle_model: Vehicle model, informational
    """
    id: str
    name: str
    compensation_model: CompensationModel
    matricula: str = ""
    slot_type: SlotType = SlotType.PERCENTAGE
    slot_fixed_value: Decimal = Decimal("0")
    default_rental_value: Decimal = Decimal("0")
    percentage_split: Optional[PercentageSplit] = None
    fuel_type: Optional[FuelType] = None
    is_iva_exempt: bool = False
    outstanding_debt: Decimal = Decimal("0")
    debt_notes: Optional[str] = None
    vehicle_model: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DriverProfile":
        """Build a profile from a record store document (snake or camel case keys)."""
        model = parse_enum(CompensationModel, pick(data, ("compensation_model", "type")))
        return cls(
            id=str(data.get("id", "")),
            name=data.get("name", ""),
            compensation_model=model or CompensationModel.SLOT_RENTAL,
            matricula=data.get("matricula", ""),
            slot_type=parse_enum(SlotType, pick(data, ("slot_type", "slotType"))) or SlotType.PERCENTAGE,
            slot_fixed_value=to_decimal(pick(data, ("slot_fixed_value", "slotFixedValue"))),
            default_rental_value=to_decimal(pick(data, ("default_rental_value", "defaultRentalValue"))),
            percentage_split=parse_enum(PercentageSplit, pick(data, ("percentage_split", "percentageSplit", "percentageType"))),
            fuel_type=parse_enum(FuelType, pick(data, ("fuel_type", "fuelType"))),
            is_iva_exempt=to_bool(pick(data, ("is_iva_exempt", "isIvaExempt"))),
            outstanding_debt=to_decimal(pick(data, ("outstanding_debt", "outstandingDebt"))),
            debt_notes=pick(data, ("debt_notes", "debtNotes")),
            vehicle_model=pick(data, ("vehicle_model", "vehicleModel")),
        )

    @property
    def has_fixed_slot(self) -> bool:
        return (
            self.compensation_model == CompensationModel.SLOT_RENTAL
            and self.slot_type == SlotType.FIXED
        )
