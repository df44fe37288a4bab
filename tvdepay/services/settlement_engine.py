"""Settlement engine for the tvdepay application.

Turns one driver-period's raw figures into the full payout breakdown.
compute_settlement is a pure function: it performs no I/O, never rounds,
and never raises for a SettlementInput, whatever its values.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from functools import partial
from typing import Callable, Dict, Mapping, Optional, Union

from tvdepay.models.settlement import (
    CompensationModel,
    PercentageSplit,
    FuelType,
    SettlementInput,
    StandardResult,
    FiftyFiftyResult,
    SixtyFortyResult,
    sanitize,
)

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
IVA_RATE = Decimal("0.06")
SLOT_FEE_RATE = Decimal("0.04")
HALF = Decimal("0.5")
DRIVER_SHARE_SIXTY_FORTY = Decimal("0.4")
COMPANY_SHARE_SIXTY_FORTY = Decimal("0.6")

# Fleet card spend the company shares, per fuel type
FLEET_CARD_CAPS: Dict[FuelType, Decimal] = {
    FuelType.DIESEL: Decimal("120.00"),
    FuelType.ELECTRIC: Decimal("70.00"),
}

SettlementResult = Union[StandardResult, FiftyFiftyResult, SixtyFortyResult]
CapLookup = Callable[[Optional[FuelType]], Decimal]


@dataclass(frozen=True)
class Aggregates:
    """Platform totals every branch starts from."""
    total_rides: Decimal
    total_tips: Decimal
    total_platform_tolls: Decimal
    total_adjustments: Decimal

    @classmethod
    def of(cls, data: SettlementInput) -> "Aggregates":
        return cls(
            total_rides=data.uber_earnings + data.bolt_earnings,
            total_tips=data.uber_tips + data.bolt_tips,
            total_platform_tolls=data.uber_tolls + data.bolt_tolls,
            total_adjustments=data.uber_adjustments + data.bolt_adjustments,
        )


def _iva(data: SettlementInput, base: Decimal) -> Decimal:
    return ZERO if data.is_iva_exempt else base * IVA_RATE


def fleet_card_cap(fuel_type: Optional[FuelType], caps: Mapping[FuelType, Decimal],
                   log_level: int = logging.WARNING) -> Decimal:
    """Look up the shared fleet card cap; unknown fuel types share nothing."""
    cap = caps.get(fuel_type) if fuel_type is not None else None
    if cap is None:
        logger.log(
            log_level,
            "No fleet card cap for fuel type %s, the driver bears the full fleet card cost",
            fuel_type.value if fuel_type else None,
        )
        return ZERO
    return cap


# Standard models

def _standard(data: SettlementInput, agg: Aggregates, cap_for: CapLookup) -> StandardResult:
    is_slot = data.compensation_model == CompensationModel.SLOT_RENTAL
    is_fleet = data.compensation_model == CompensationModel.FLEET_RENTAL

    total_earnings = (
        agg.total_rides + agg.total_tips + agg.total_platform_tolls + agg.total_adjustments
    )
    slot_fee = total_earnings * SLOT_FEE_RATE if is_slot and not data.is_slot_fee_exempt else ZERO
    iva = _iva(data, total_earnings)

    # Fleet rental: the company fronts the tolls the platforms reimbursed
    platform_tolls_as_deduction = agg.total_platform_tolls if is_fleet else ZERO

    total_deductions = (
        data.vehicle_rental
        + slot_fee
        + iva
        + data.fleet_card
        + data.rental_tolls
        + data.other_expenses
        + data.debt_deduction
        + platform_tolls_as_deduction
    )

    refunded_tolls = agg.total_platform_tolls if is_slot else ZERO

    return StandardResult(
        compensation_model=data.compensation_model,
        total_rides=agg.total_rides,
        total_tips=agg.total_tips,
        total_platform_tolls=agg.total_platform_tolls,
        total_adjustments=agg.total_adjustments,
        total_earnings=total_earnings,
        slot_fee=slot_fee,
        iva=iva,
        vehicle_rental=data.vehicle_rental,
        fleet_card=data.fleet_card,
        rental_tolls=data.rental_tolls,
        other_expenses=data.other_expenses,
        debt_deduction=data.debt_deduction,
        platform_tolls_as_deduction=platform_tolls_as_deduction,
        total_deductions=total_deductions,
        refunded_tips=agg.total_tips,
        refunded_tolls=refunded_tolls,
        refunded_adjustments=agg.total_adjustments,
        total_refunds=agg.total_tips + refunded_tolls + agg.total_adjustments,
        net_payable=total_earnings - total_deductions,
    )


# Revenue share

def _fifty_fifty(data: SettlementInput, agg: Aggregates, total_earnings: Decimal,
                 iva: Decimal, cap: Decimal) -> FiftyFiftyResult:
    driver_share = total_earnings * HALF
    driver_iva_cost = iva / 2
    shared_fleet_card_split = min(data.fleet_card, cap)
    company_fleet_card_cost = shared_fleet_card_split / 2
    # Spend above the cap is not shared
    driver_fleet_card_cost = data.fleet_card - company_fleet_card_cost
    driver_costs = driver_iva_cost + driver_fleet_card_cost
    net_payable = driver_share - driver_costs + agg.total_tips - data.debt_deduction

    return FiftyFiftyResult(
        percentage_split=PercentageSplit.FIFTY_FIFTY,
        fuel_type=data.fuel_type,
        fleet_card_cap=cap,
        total_rides=agg.total_rides,
        total_tips=agg.total_tips,
        total_platform_tolls=agg.total_platform_tolls,
        total_adjustments=agg.total_adjustments,
        base_earnings=agg.total_rides,
        total_earnings=total_earnings,
        refunded_tips=agg.total_tips,
        iva=iva,
        fleet_card=data.fleet_card,
        debt_deduction=data.debt_deduction,
        driver_share=driver_share,
        net_payable=net_payable,
        driver_iva_cost=driver_iva_cost,
        shared_fleet_card_split=shared_fleet_card_split,
        company_fleet_card_cost=company_fleet_card_cost,
        driver_fleet_card_cost=driver_fleet_card_cost,
        driver_costs=driver_costs,
    )


def _sixty_forty(data: SettlementInput, agg: Aggregates, total_earnings: Decimal,
                 iva: Decimal, cap: Decimal) -> SixtyFortyResult:
    company_assumes_fleet_card = min(data.fleet_card, cap)
    driver_excess_fleet_card = max(ZERO, data.fleet_card - cap)
    total_company_costs = (
        iva
        + company_assumes_fleet_card
        + data.vehicle_rental
        + data.rental_tolls
        + data.other_expenses
    )
    net_to_split = total_earnings - total_company_costs
    driver_share = net_to_split * DRIVER_SHARE_SIXTY_FORTY
    # The excess comes out of the driver's share, not out of the pot
    driver_share_after_excess = driver_share - driver_excess_fleet_card
    net_payable = driver_share_after_excess + agg.total_tips - data.debt_deduction

    return SixtyFortyResult(
        percentage_split=PercentageSplit.SIXTY_FORTY,
        fuel_type=data.fuel_type,
        fleet_card_cap=cap,
        total_rides=agg.total_rides,
        total_tips=agg.total_tips,
        total_platform_tolls=agg.total_platform_tolls,
        total_adjustments=agg.total_adjustments,
        base_earnings=agg.total_rides,
        total_earnings=total_earnings,
        refunded_tips=agg.total_tips,
        iva=iva,
        fleet_card=data.fleet_card,
        debt_deduction=data.debt_deduction,
        driver_share=driver_share,
        net_payable=net_payable,
        company_assumes_fleet_card=company_assumes_fleet_card,
        driver_excess_fleet_card=driver_excess_fleet_card,
        vehicle_rental=data.vehicle_rental,
        rental_tolls=data.rental_tolls,
        other_expenses=data.other_expenses,
        total_company_costs=total_company_costs,
        net_to_split=net_to_split,
        company_share=net_to_split * COMPANY_SHARE_SIXTY_FORTY,
        driver_share_after_excess=driver_share_after_excess,
    )


SPLIT_HANDLERS: Dict[PercentageSplit, Callable[..., SettlementResult]] = {
    PercentageSplit.FIFTY_FIFTY: _fifty_fifty,
    PercentageSplit.SIXTY_FORTY: _sixty_forty,
}


def _revenue_share(data: SettlementInput, agg: Aggregates, cap_for: CapLookup) -> SettlementResult:
    # Tips are refunded in full and stay out of the split
    total_earnings = agg.total_rides + agg.total_platform_tolls + agg.total_adjustments
    iva = _iva(data, total_earnings)
    cap = cap_for(data.fuel_type)
    split = data.percentage_split or PercentageSplit.FIFTY_FIFTY
    return SPLIT_HANDLERS[split](data, agg, total_earnings, iva, cap)


MODEL_HANDLERS: Dict[CompensationModel, Callable[..., SettlementResult]] = {
    CompensationModel.FLEET_RENTAL: _standard,
    CompensationModel.SLOT_RENTAL: _standard,
    CompensationModel.REVENUE_SHARE: _revenue_share,
}


def compute_settlement(
    data: Union[SettlementInput, Mapping],
    fleet_card_caps: Optional[Mapping[FuelType, Decimal]] = None,
    missing_cap_log_level: int = logging.WARNING,
) -> SettlementResult:
    """
    Compute the payout breakdown of a driver-period.

    Args:
        data: Engine input; a raw mapping is run through sanitize first
        fleet_card_caps: Fuel type to shared fleet card cap table
            (default: FLEET_CARD_CAPS)
        missing_cap_log_level: Level of the log record emitted when a revenue
            share input has no fleet card cap; batch callers lower it to DEBUG

    Returns:
        SettlementResult: StandardResult for FLEET_RENTAL and SLOT_RENTAL,
        FiftyFiftyResult or SixtyFortyResult for REVENUE_SHARE
    """
    if not isinstance(data, SettlementInput):
        data = sanitize(data)
    caps = FLEET_CARD_CAPS if fleet_card_caps is None else fleet_card_caps
    agg = Aggregates.of(data)
    cap_for = partial(fleet_card_cap, caps=caps, log_level=missing_cap_log_level)
    return MODEL_HANDLERS[data.compensation_model](data, agg, cap_for)
