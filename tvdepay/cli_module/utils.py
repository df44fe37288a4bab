"""Utility functions for the CLI interface."""

import json
from decimal import Decimal, InvalidOperation, ROUND_HALF_EVEN
from typing import Any, Dict, List

import click

from tvdepay.models.settlement import (
    CompensationModel,
    StandardResult,
    FiftyFiftyResult,
    SixtyFortyResult,
)

CENT = Decimal("0.01")


class DecimalParamType(click.ParamType):
    """Money amounts as typed, without a float round trip."""
    name = "amount"

    def convert(self, value, param, ctx):
        if isinstance(value, Decimal):
            return value
        try:
            amount = Decimal(str(value).strip().replace(",", "."))
        except InvalidOperation:
            self.fail(f"{value!r} is not a valid amount", param, ctx)
        if not amount.is_finite():
            self.fail(f"{value!r} is not a valid amount", param, ctx)
        return amount


DECIMAL = DecimalParamType()


def format_currency(value: Decimal) -> str:
    """Round half-to-even to the cent and format as euros."""
    return f"€ {Decimal(value).quantize(CENT, rounding=ROUND_HALF_EVEN):.2f}"


def load_json_file(path: str) -> Dict[str, Any]:
    """Read a JSON object from a file, failing the command on bad content."""
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"{path} is not valid JSON: {e}")
    if not isinstance(data, dict):
        raise click.BadParameter(f"{path} must contain a JSON object")
    return data


def _standard_rows(result: StandardResult) -> List[list]:
    rows = [
        ["Rides", result.total_rides],
        ["Tips", result.total_tips],
        ["Platform tolls", result.total_platform_tolls],
        ["Adjustments", result.total_adjustments],
        ["Total earnings", result.total_earnings],
        ["Vehicle rental", result.vehicle_rental],
    ]
    if result.compensation_model == CompensationModel.SLOT_RENTAL:
        rows.append(["Slot fee (4%)", result.slot_fee])
    rows += [
        ["IVA (6%)", result.iva],
        ["Fleet card", result.fleet_card],
        ["Rental tolls", result.rental_tolls],
        ["Other expenses", result.other_expenses],
    ]
    if result.compensation_model == CompensationModel.FLEET_RENTAL:
        rows.append(["Platform tolls (deducted)", result.platform_tolls_as_deduction])
    rows += [
        ["Debt deduction", result.debt_deduction],
        ["Total deductions", result.total_deductions],
        ["Refunded tips", result.refunded_tips],
    ]
    if result.compensation_model == CompensationModel.SLOT_RENTAL:
        rows.append(["Refunded tolls", result.refunded_tolls])
    rows.append(["Refunded adjustments", result.refunded_adjustments])
    return rows


def _fifty_fifty_rows(result: FiftyFiftyResult) -> List[list]:
    return [
        ["Ride earnings", result.base_earnings],
        ["Platform tolls", result.total_platform_tolls],
        ["Adjustments", result.total_adjustments],
        ["Total earnings", result.total_earnings],
        ["Driver share (50%)", result.driver_share],
        ["IVA (driver half)", result.driver_iva_cost],
        ["Fleet card", result.fleet_card],
        ["Fleet card cap", result.fleet_card_cap],
        ["Fleet card (company)", result.company_fleet_card_cost],
        ["Fleet card (driver)", result.driver_fleet_card_cost],
        ["Driver costs", result.driver_costs],
        ["Refunded tips", result.refunded_tips],
        ["Debt deduction", result.debt_deduction],
    ]


def _sixty_forty_rows(result: SixtyFortyResult) -> List[list]:
    return [
        ["Ride earnings", result.base_earnings],
        ["Platform tolls", result.total_platform_tolls],
        ["Adjustments", result.total_adjustments],
        ["Total earnings", result.total_earnings],
        ["IVA (6%)", result.iva],
        ["Fleet card (company)", result.company_assumes_fleet_card],
        ["Vehicle rental", result.vehicle_rental],
        ["Rental tolls", result.rental_tolls],
        ["Other expenses", result.other_expenses],
        ["Total company costs", result.total_company_costs],
        ["Net to split", result.net_to_split],
        ["Company share (60%)", result.company_share],
        ["Driver share (40%)", result.driver_share],
        ["Fleet card above cap", result.driver_excess_fleet_card],
        ["Driver share after excess", result.driver_share_after_excess],
        ["Refunded tips", result.refunded_tips],
        ["Debt deduction", result.debt_deduction],
    ]


def breakdown_rows(result) -> List[List[str]]:
    """Receipt-style lines of a settlement result, amounts formatted."""
    if isinstance(result, FiftyFiftyResult):
        rows = _fifty_fifty_rows(result)
    elif isinstance(result, SixtyFortyResult):
        rows = _sixty_forty_rows(result)
    else:
        rows = _standard_rows(result)
    rows.append(["NET PAYABLE", result.net_payable])
    return [[label, format_currency(amount)] for label, amount in rows]


def model_label(result) -> str:
    """Human readable name of the result's compensation model."""
    if result.is_percentage:
        return f"Revenue share {result.percentage_split.value}"
    return {
        CompensationModel.FLEET_RENTAL: "Fleet rental",
        CompensationModel.SLOT_RENTAL: "Slot rental",
    }[result.compensation_model]
