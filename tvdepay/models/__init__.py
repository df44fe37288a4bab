"""Entity models for the tvdepay application."""
from tvdepay.models.settlement import (
    CompensationModel,
    PercentageSplit,
    FuelType,
    SettlementInput,
    StandardResult,
    RevenueShareResult,
    FiftyFiftyResult,
    SixtyFortyResult,
    canonical_figures,
    sanitize,
)
from tvdepay.models.driver import DriverProfile, SlotType
from tvdepay.models.record import SettlementRecord, SettlementStatus
from tvdepay.models.receipt import Receipt
from tvdepay.models.adjustment import Adjustment, AdjustmentStatus
from tvdepay.models.toll import TollEntry, week_start


__all__ = [
    'CompensationModel',
    'PercentageSplit',
    'FuelType',
    'SettlementInput',
    'StandardResult',
    'RevenueShareResult',
    'FiftyFiftyResult',
    'SixtyFortyResult',
    'canonical_figures',
    'sanitize',
    'DriverProfile',
    'SlotType',
    'SettlementRecord',
    'SettlementStatus',
    'Receipt',
    'Adjustment',
    'AdjustmentStatus',
    'TollEntry',
    'week_start',
]
