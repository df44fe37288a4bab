"""Settlement entities for the tvdepay application.

This module defines the engine input (SettlementInput) and the immutable
breakdowns it produces, one result class per compensation model.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from tvdepay.models.fields import parse_enum, pick, to_bool, to_decimal

logger = logging.getLogger(__name__)


class CompensationModel(Enum):
    """Contractual compensation models for fleet drivers."""
    FLEET_RENTAL = "FROTA"
    SLOT_RENTAL = "SLOT"
    REVENUE_SHARE = "PERCENTAGE"


class PercentageSplit(Enum):
    """Company/driver split used by the revenue share model."""
    FIFTY_FIFTY = "50/50"
    SIXTY_FORTY = "60/40"


class FuelType(Enum):
    """Vehicle fuel types, which decide the fleet card cost-sharing cap."""
    DIESEL = "DIESEL"
    ELECTRIC = "ELECTRIC"


MONETARY_FIELDS = (
    "uber_earnings",
    "uber_tips",
    "uber_tolls",
    "uber_adjustments",
    "bolt_earnings",
    "bolt_tips",
    "bolt_tolls",
    "bolt_adjustments",
    "vehicle_rental",
    "fleet_card",
    "rental_tolls",
    "other_expenses",
    "debt_deduction",
)


@dataclass(frozen=True)
class SettlementInput:
    """
    Raw figures of one driver-period plus the selected policy flags.

    Attributes:
        compensation_model: Selects the calculation branch
        percentage_split: Split sub-type, only used by REVENUE_SHARE
        fuel_type: Fuel type, decides the fleet card cap for REVENUE_SHARE
        uber_*/bolt_*: Per-platform ride earnings, tips, tolls and adjustments
        vehicle_rental: Fixed rental or fixed slot fee for the period
        fleet_card: Fleet/fuel card spend for the period
        rental_tolls: Tolls billed to the rented vehicle
        other_expenses: Miscellaneous deduction
        debt_deduction: Prior debt amortized this period
        is_iva_exempt: Suppresses the IVA line
        is_slot_fee_exempt: Suppresses the slot commission
    """
    compensation_model: CompensationModel
    percentage_split: Optional[PercentageSplit] = None
    fuel_type: Optional[FuelType] = None
    uber_earnings: Decimal = Decimal("0")
    uber_tips: Decimal = Decimal("0")
    uber_tolls: Decimal = Decimal("0")
    uber_adjustments: Decimal = Decimal("0")
    bolt_earnings: Decimal = Decimal("0")
    bolt_tips: Decimal = Decimal("0")
    bolt_tolls: Decimal = Decimal("0")
    bolt_adjustments: Decimal = Decimal("0")
    vehicle_rental: Decimal = Decimal("0")
    fleet_card: Decimal = Decimal("0")
    rental_tolls: Decimal = Decimal("0")
    other_expenses: Decimal = Decimal("0")
    debt_deduction: Decimal = Decimal("0")
    is_iva_exempt: bool = False
    is_slot_fee_exempt: bool = False


# Keys used by records written before the field names settled
FIELD_ALIASES = {
    "compensation_model": ("compensation_model", "compensationModel", "type"),
    "percentage_split": ("percentage_split", "percentageSplit", "percentageType"),
    "fuel_type": ("fuel_type", "fuelType"),
    "uber_earnings": ("uber_earnings", "uberEarnings", "uberRides"),
    "uber_tips": ("uber_tips", "uberTips"),
    "uber_tolls": ("uber_tolls", "uberTolls"),
    "uber_adjustments": ("uber_adjustments", "uberAdjustments", "uberPreviousPeriodAdjustments"),
    "bolt_earnings": ("bolt_earnings", "boltEarnings", "boltRides"),
    "bolt_tips": ("bolt_tips", "boltTips"),
    "bolt_tolls": ("bolt_tolls", "boltTolls"),
    "bolt_adjustments": ("bolt_adjustments", "boltAdjustments", "boltPreviousPeriodAdjustments"),
    "vehicle_rental": ("vehicle_rental", "vehicleRental"),
    "fleet_card": ("fleet_card", "fleetCard"),
    "rental_tolls": ("rental_tolls", "rentalTolls"),
    "other_expenses": ("other_expenses", "otherExpenses"),
    "debt_deduction": ("debt_deduction", "debtDeduction", "debtDeductionRequested"),
    "is_iva_exempt": ("is_iva_exempt", "isIvaExempt"),
    "is_slot_fee_exempt": ("is_slot_fee_exempt", "isSlotFeeExempt", "isSlotExempt"),
}


def canonical_figures(raw: Mapping[str, Any]) -> Dict[str, Any]:
    """Rename snake_case, camelCase and legacy keys to the canonical field names, dropping the rest."""
    figures = {}
    for name, keys in FIELD_ALIASES.items():
        value = pick(raw, keys)
        if value is not None:
            figures[name] = value
    return figures


def sanitize(raw: Mapping[str, Any]) -> SettlementInput:
    """
    Normalize a partially filled mapping into a fully populated SettlementInput.

    Missing, None, NaN or unparseable monetary values become zero. A missing
    or unknown compensation model falls back to SLOT_RENTAL, and a revenue
    share record without a split falls back to FIFTY_FIFTY. An unknown fuel
    type is kept as None, which gives a zero fleet card cap.

    Args:
        raw: Raw figures, snake_case or legacy camelCase keys

    Returns:
        SettlementInput: Normalized engine input
    """
    model = parse_enum(CompensationModel, pick(raw, FIELD_ALIASES["compensation_model"]))
    if model is None:
        logger.debug("No usable compensation model in %r, defaulting to SLOT_RENTAL", raw)
        model = CompensationModel.SLOT_RENTAL

    split = None
    if model == CompensationModel.REVENUE_SHARE:
        split = parse_enum(PercentageSplit, pick(raw, FIELD_ALIASES["percentage_split"]))
        split = split or PercentageSplit.FIFTY_FIFTY

    amounts = {
        name: to_decimal(pick(raw, FIELD_ALIASES[name]))
        for name in MONETARY_FIELDS
    }

    return SettlementInput(
        compensation_model=model,
        percentage_split=split,
        fuel_type=parse_enum(FuelType, pick(raw, FIELD_ALIASES["fuel_type"])),
        is_iva_exempt=to_bool(pick(raw, FIELD_ALIASES["is_iva_exempt"])),
        is_slot_fee_exempt=to_bool(pick(raw, FIELD_ALIASES["is_slot_fee_exempt"])),
        **amounts,
    )


@dataclass(frozen=True)
class StandardResult:
    """
    Breakdown for the FLEET_RENTAL and SLOT_RENTAL models.

    Tips, platform tolls and adjustments are already part of total_earnings;
    the refunded_* lines only itemize them and do not change net_payable.
    """
    compensation_model: CompensationModel
    total_rides: Decimal
    total_tips: Decimal
    total_platform_tolls: Decimal
    total_adjustments: Decimal
    total_earnings: Decimal
    slot_fee: Decimal
    iva: Decimal
    vehicle_rental: Decimal
    fleet_card: Decimal
    rental_tolls: Decimal
    other_expenses: Decimal
    debt_deduction: Decimal
    platform_tolls_as_deduction: Decimal
    total_deductions: Decimal
    refunded_tips: Decimal
    refunded_tolls: Decimal
    refunded_adjustments: Decimal
    total_refunds: Decimal
    net_payable: Decimal

    @property
    def is_percentage(self) -> bool:
        return False

    @property
    def gross_earnings(self) -> Decimal:
        return self.total_earnings


@dataclass(frozen=True)
class RevenueShareResult:
    """Lines shared by both revenue share sub-types."""
    percentage_split: PercentageSplit
    fuel_type: Optional[FuelType]
    fleet_card_cap: Decimal
    total_rides: Decimal
    total_tips: Decimal
    total_platform_tolls: Decimal
    total_adjustments: Decimal
    base_earnings: Decimal
    total_earnings: Decimal
    refunded_tips: Decimal
    iva: Decimal
    fleet_card: Decimal
    debt_deduction: Decimal
    driver_share: Decimal
    net_payable: Decimal

    @property
    def compensation_model(self) -> CompensationModel:
        return CompensationModel.REVENUE_SHARE

    @property
    def is_percentage(self) -> bool:
        return True

    @property
    def gross_earnings(self) -> Decimal:
        """Everything the platforms paid for the period, tips included."""
        return self.total_earnings + self.refunded_tips

    @property
    def total_deductions(self) -> Decimal:
        return self.gross_earnings - self.net_payable


@dataclass(frozen=True)
class FiftyFiftyResult(RevenueShareResult):
    """50/50 split: IVA and the capped part of the fleet card are shared evenly."""
    driver_iva_cost: Decimal
    shared_fleet_card_split: Decimal
    company_fleet_card_cost: Decimal
    driver_fleet_card_cost: Decimal
    driver_costs: Decimal


@dataclass(frozen=True)
class SixtyFortyResult(RevenueShareResult):
    """60/40 split: company costs come off the top, the driver gets 40% of the rest."""
    company_assumes_fleet_card: Decimal
    driver_excess_fleet_card: Decimal
    vehicle_rental: Decimal
    rental_tolls: Decimal
    other_expenses: Decimal
    total_company_costs: Decimal
    net_to_split: Decimal
    company_share: Decimal
    driver_share_after_excess: Decimal
