"""Tests for input normalization and variant dispatch."""

from dataclasses import fields
from decimal import Decimal

import pytest

from tvdepay.models.settlement import (
    CompensationModel,
    FuelType,
    MONETARY_FIELDS,
    PercentageSplit,
    SettlementInput,
    sanitize,
)
from tvdepay.services.settlement_engine import MODEL_HANDLERS, SPLIT_HANDLERS, compute_settlement

D = Decimal


class TestSanitize:
    """sanitize turns partially filled records into complete inputs."""

    def test_empty_mapping(self):
        data = sanitize({})

        assert data.compensation_model == CompensationModel.SLOT_RENTAL
        assert data.percentage_split is None
        assert data.fuel_type is None
        assert data.is_iva_exempt is False
        assert data.is_slot_fee_exempt is False
        for name in MONETARY_FIELDS:
            assert getattr(data, name) == 0

    @pytest.mark.parametrize("value", [None, float("nan"), "", "abc", "NaN", float("inf")])
    def test_unusable_amounts_become_zero(self, value):
        data = sanitize({"compensation_model": "FROTA", "uber_earnings": value, "fleet_card": 10})

        assert data.uber_earnings == 0
        assert data.fleet_card == D("10")

    def test_floats_keep_their_decimal_value(self):
        data = sanitize({"uber_earnings": 450.50, "uber_tolls": 15.2})

        assert data.uber_earnings == D("450.50")
        assert data.uber_tolls == D("15.2")

    def test_numeric_strings(self):
        assert sanitize({"fleet_card": " 120.35 "}).fleet_card == D("120.35")

    def test_legacy_record_keys(self):
        data = sanitize({
            "type": "PERCENTAGE",
            "percentageType": "60/40",
            "fuelType": "ELECTRIC",
            "uberRides": 300,
            "boltRides": 200,
            "uberPreviousPeriodAdjustments": 12,
            "debtDeduction": 25,
            "isIvaExempt": True,
            "isSlotExempt": True,
        })

        assert data.compensation_model == CompensationModel.REVENUE_SHARE
        assert data.percentage_split == PercentageSplit.SIXTY_FORTY
        assert data.fuel_type == FuelType.ELECTRIC
        assert data.uber_earnings == D("300")
        assert data.bolt_earnings == D("200")
        assert data.uber_adjustments == D("12")
        assert data.debt_deduction == D("25")
        assert data.is_iva_exempt is True
        assert data.is_slot_fee_exempt is True

    def test_enum_names_are_accepted(self):
        data = sanitize({"compensation_model": "revenue_share", "percentage_split": "SIXTY_FORTY"})

        assert data.compensation_model == CompensationModel.REVENUE_SHARE
        assert data.percentage_split == PercentageSplit.SIXTY_FORTY

    def test_unknown_values(self):
        data = sanitize({"compensation_model": "LEASING", "fuel_type": "LPG"})

        assert data.compensation_model == CompensationModel.SLOT_RENTAL
        assert data.fuel_type is None

    def test_split_dropped_outside_revenue_share(self):
        data = sanitize({"compensation_model": "FROTA", "percentage_split": "50/50"})

        assert data.percentage_split is None

    def test_string_flags(self):
        assert sanitize({"is_iva_exempt": "true"}).is_iva_exempt is True
        assert sanitize({"is_iva_exempt": "false"}).is_iva_exempt is False

    def test_compute_accepts_raw_mappings(self):
        result = compute_settlement({"type": "FROTA", "uberRides": 100, "isIvaExempt": True})

        assert result.compensation_model == CompensationModel.FLEET_RENTAL
        assert result.net_payable == D("100")


class TestDispatch:
    """Every compensation variant has a handler."""

    def test_every_model_has_a_handler(self):
        assert set(MODEL_HANDLERS) == set(CompensationModel)

    def test_every_split_has_a_handler(self):
        assert set(SPLIT_HANDLERS) == set(PercentageSplit)


VARIANTS = [
    (CompensationModel.FLEET_RENTAL, None),
    (CompensationModel.SLOT_RENTAL, None),
    (CompensationModel.REVENUE_SHARE, PercentageSplit.FIFTY_FIFTY),
    (CompensationModel.REVENUE_SHARE, PercentageSplit.SIXTY_FORTY),
]


@pytest.mark.parametrize("model,split", VARIANTS)
@pytest.mark.parametrize("fuel_type", [None, FuelType.DIESEL])
def test_zero_input_gives_zero_breakdown(model, split, fuel_type):
    result = compute_settlement(
        SettlementInput(compensation_model=model, percentage_split=split, fuel_type=fuel_type)
    )

    assert result.net_payable == 0
    for field in fields(result):
        value = getattr(result, field.name)
        if isinstance(value, Decimal) and field.name != "fleet_card_cap":
            assert value == 0, field.name


@pytest.mark.parametrize("model,split", VARIANTS)
def test_results_are_immutable(model, split):
    result = compute_settlement(SettlementInput(compensation_model=model, percentage_split=split))

    with pytest.raises(AttributeError):
        result.net_payable = D("1")
