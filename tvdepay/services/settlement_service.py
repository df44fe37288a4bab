"""Settlement service for the tvdepay application."""

import logging
from datetime import date
from typing import Dict, Any, Optional, List, Tuple

import requests

from tvdepay import config
from tvdepay.models.driver import DriverProfile
from tvdepay.models.fields import ZERO, parse_enum, pick, to_bool, to_decimal
from tvdepay.models.record import SettlementRecord, SettlementStatus
from tvdepay.models.settlement import (
    CompensationModel,
    FuelType,
    MONETARY_FIELDS,
    PercentageSplit,
    SettlementInput,
    FIELD_ALIASES,
    canonical_figures,
    sanitize,
)
from tvdepay.models.adjustment import AdjustmentStatus
from tvdepay.services.adjustment_service import AdjustmentService, AdjustmentServiceError
from tvdepay.services.toll_service import TollService, TollServiceError
from tvdepay.services.settlement_engine import SettlementResult, compute_settlement

logger = logging.getLogger(__name__)

# Base URL for the record store
BASE_URL = config.STORE_URL


class SettlementServiceError(Exception):
    """Custom exception for settlement service errors."""
    pass


def input_to_figures(data: SettlementInput) -> Dict[str, Any]:
    """Serialize an engine input into a JSON-friendly document, amounts as exact decimal strings."""
    figures: Dict[str, Any] = {name: str(getattr(data, name)) for name in MONETARY_FIELDS}
    figures.update({
        "compensation_model": data.compensation_model.value,
        "percentage_split": data.percentage_split.value if data.percentage_split else None,
        "fuel_type": data.fuel_type.value if data.fuel_type else None,
        "is_iva_exempt": data.is_iva_exempt,
        "is_slot_fee_exempt": data.is_slot_fee_exempt,
    })
    return figures


class SettlementService:
    """Service for building, storing and reviewing driver settlements."""

    SETTLEMENT_COLLECTION = "settlements"
    DRIVER_COLLECTION = "drivers"

    @staticmethod
    def build_input(profile: DriverProfile, figures: Dict[str, Any]) -> SettlementInput:
        """
        Resolve a driver's contract and the period figures into an engine input.

        Contract parameters come from the profile unless the figures carry
        them explicitly. Fixed-fee slot drivers never pay the slot commission
        and default to their fixed fee as vehicle_rental; fleet drivers default
        to their usual rental; percentage slot drivers pay no rental.

        Args:
            profile: The driver's profile
            figures: Raw period figures (snake or camel case keys)

        Returns:
            SettlementInput: Fully resolved input

        Raises:
            SettlementServiceError: If the debt deduction is negative or larger
                than the driver's outstanding debt
        """
        raw = dict(figures)
        model = profile.compensation_model

        def given(name):
            return pick(raw, FIELD_ALIASES[name])

        split = parse_enum(PercentageSplit, given("percentage_split")) or profile.percentage_split
        fuel_type = parse_enum(FuelType, given("fuel_type")) or profile.fuel_type

        iva_flag = given("is_iva_exempt")
        is_iva_exempt = profile.is_iva_exempt if iva_flag is None else to_bool(iva_flag)

        is_slot_fee_exempt = to_bool(given("is_slot_fee_exempt")) or profile.has_fixed_slot

        rental = given("vehicle_rental")
        if model == CompensationModel.FLEET_RENTAL:
            vehicle_rental = profile.default_rental_value if rental is None else to_decimal(rental)
        elif profile.has_fixed_slot:
            vehicle_rental = profile.slot_fixed_value if rental is None else to_decimal(rental)
        elif model == CompensationModel.SLOT_RENTAL:
            vehicle_rental = ZERO
        else:
            vehicle_rental = to_decimal(rental)

        debt_deduction = to_decimal(given("debt_deduction"))
        if debt_deduction < 0:
            raise SettlementServiceError("Debt deduction cannot be negative")
        if debt_deduction > profile.outstanding_debt:
            raise SettlementServiceError(
                f"Debt deduction {debt_deduction} exceeds the outstanding debt "
                f"of {profile.outstanding_debt} for {profile.name}"
            )

        amounts = {
            name: to_decimal(given(name))
            for name in MONETARY_FIELDS
            if name not in ("vehicle_rental", "debt_deduction")
        }
        resolved = sanitize({
            "compensation_model": model.value,
            "percentage_split": split.value if split else None,
            "fuel_type": fuel_type.value if fuel_type else None,
            "is_iva_exempt": is_iva_exempt,
            "is_slot_fee_exempt": is_slot_fee_exempt,
            "vehicle_rental": vehicle_rental,
            "debt_deduction": debt_deduction,
            **amounts,
        })
        logger.debug("Resolved settlement input for driver %s: %r", profile.id, resolved)
        return resolved

    @staticmethod
    def get_driver(driver_id: str) -> DriverProfile:
        """
        Get a driver's profile from the record store.

        Raises:
            SettlementServiceError: If the driver is not found or the store fails
        """
        try:
            response = requests.get(
                f"{BASE_URL}/{SettlementService.DRIVER_COLLECTION}/{driver_id}",
                timeout=config.REQUEST_TIMEOUT,
            )
            if response.status_code == 404:
                raise SettlementServiceError(f"Driver {driver_id} not found")
            response.raise_for_status()
            return DriverProfile.from_dict(response.json())
        except requests.RequestException as e:
            raise SettlementServiceError(f"Failed to get driver: {str(e)}")

    @staticmethod
    def get_record(record_id: str) -> SettlementRecord:
        """
        Get a stored settlement.

        Raises:
            SettlementServiceError: If the record is not found or the store fails
        """
        try:
            response = requests.get(
                f"{BASE_URL}/{SettlementService.SETTLEMENT_COLLECTION}/{record_id}",
                timeout=config.REQUEST_TIMEOUT,
            )
            if response.status_code == 404:
                raise SettlementServiceError(f"Settlement {record_id} not found")
            response.raise_for_status()
            return SettlementRecord.from_dict(response.json())
        except requests.RequestException as e:
            raise SettlementServiceError(f"Failed to get settlement: {str(e)}")

    @staticmethod
    def list_records(driver_id: Optional[str] = None,
                     status: Optional[SettlementStatus] = None) -> List[SettlementRecord]:
        """
        List stored settlements, newest first.

        Args:
            driver_id: Only settlements of this driver
            status: Only settlements in this status

        Returns:
            List[SettlementRecord]: Matching settlements
        """
        params = {}
        if driver_id:
            params["driver_id"] = driver_id
        if status:
            params["status"] = status.value

        url = f"{BASE_URL}/{SettlementService.SETTLEMENT_COLLECTION}"
        if params:
            url = f"{url}/query"

        try:
            response = requests.get(url, params=params or None, timeout=config.REQUEST_TIMEOUT)
            if response.status_code == 404:
                return []
            response.raise_for_status()
            records = [SettlementRecord.from_dict(item) for item in response.json()]
        except requests.RequestException as e:
            raise SettlementServiceError(f"Failed to list settlements: {str(e)}")

        return sorted(records, key=lambda r: r.created_at or "", reverse=True)

    @staticmethod
    def create_record(profile: DriverProfile, figures: Dict[str, Any], period_start: date,
                      period_end: date, admin_id: Optional[str] = None,
                      other_expenses_notes: Optional[str] = None,
                      apply_adjustments: bool = False,
                      prefill_tolls: bool = False) -> SettlementRecord:
        """
        Store a new PENDING settlement for a driver.

        Args:
            profile: The driver's profile
            figures: Raw period figures (snake or camel case keys)
            period_start: First day of the period
            period_end: Last day of the period
            admin_id: ID of the admin entering the figures
            other_expenses_notes: Justification for other_expenses
            apply_adjustments: Add the driver's pending adjustments to
                uber_adjustments and mark them resolved by this settlement
            prefill_tolls: Take rental_tolls from the tolls registered for the
                week of period_start when the figures do not carry it

        Raises:
            SettlementServiceError: If the figures are invalid or the store fails
        """
        if period_end < period_start:
            raise SettlementServiceError("Period end cannot be before period start")

        figures = canonical_figures(figures)
        pending = []
        try:
            if prefill_tolls and "rental_tolls" not in figures:
                toll = TollService.get_toll(profile.id, period_start)
                if toll:
                    figures["rental_tolls"] = toll.amount
            if apply_adjustments:
                pending = AdjustmentService.list_adjustments(
                    driver_id=profile.id, status=AdjustmentStatus.PENDING
                )
                if pending:
                    figures["uber_adjustments"] = (
                        to_decimal(figures.get("uber_adjustments"))
                        + sum((a.amount for a in pending), ZERO)
                    )
        except (TollServiceError, AdjustmentServiceError) as e:
            raise SettlementServiceError(str(e))

        settlement_input = SettlementService.build_input(profile, figures)
        record = SettlementRecord(
            driver_id=profile.id,
            driver_name=profile.name,
            figures=input_to_figures(settlement_input),
            period_start=period_start,
            period_end=period_end,
            admin_id=admin_id,
            other_expenses_notes=other_expenses_notes,
        )

        try:
            response = requests.post(
                f"{BASE_URL}/{SettlementService.SETTLEMENT_COLLECTION}",
                json=record.to_dict(),
                timeout=config.REQUEST_TIMEOUT,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise SettlementServiceError(f"Failed to create settlement: {str(e)}")

        logger.info("Created settlement %s for driver %s", record.id, profile.id)
        if pending:
            try:
                AdjustmentService.resolve_adjustments(pending, record.id)
            except AdjustmentServiceError as e:
                raise SettlementServiceError(str(e))
        return SettlementRecord.from_dict(response.json())

    @staticmethod
    def update_record(record_id: str, figures: Dict[str, Any]) -> SettlementRecord:
        """
        Apply an admin edit to a settlement.

        The edited settlement goes back to PENDING and any revision notes are
        cleared, so the driver reviews it again.

        Raises:
            SettlementServiceError: If the settlement is accepted already, the
                figures are invalid or the store fails
        """
        record = SettlementService.get_record(record_id)
        if record.status == SettlementStatus.ACCEPTED:
            raise SettlementServiceError("Accepted settlements cannot be edited")

        profile = SettlementService.get_driver(record.driver_id)
        merged = canonical_figures(record.figures)
        merged.update(canonical_figures(figures))
        settlement_input = SettlementService.build_input(profile, merged)

        record.figures = input_to_figures(settlement_input)
        record.status = SettlementStatus.PENDING
        record.revision_notes = None
        return SettlementService._save(record, "update")

    @staticmethod
    def accept_record(record_id: str) -> SettlementRecord:
        """
        Accept a pending settlement on the driver's behalf.

        Raises:
            SettlementServiceError: If the settlement is not pending
        """
        record = SettlementService.get_record(record_id)
        if record.status != SettlementStatus.PENDING:
            raise SettlementServiceError(
                f"Only pending settlements can be accepted (current status: {record.status.value})"
            )
        record.status = SettlementStatus.ACCEPTED
        return SettlementService._save(record, "accept")

    @staticmethod
    def request_revision(record_id: str, notes: str) -> SettlementRecord:
        """
        Contest a pending settlement.

        Raises:
            SettlementServiceError: If no reason is given or the settlement is not pending
        """
        if not notes or not notes.strip():
            raise SettlementServiceError("A reason is required to request a revision")

        record = SettlementService.get_record(record_id)
        if record.status != SettlementStatus.PENDING:
            raise SettlementServiceError(
                f"Only pending settlements can be contested (current status: {record.status.value})"
            )
        record.status = SettlementStatus.REVISION_REQUESTED
        record.revision_notes = notes.strip()
        return SettlementService._save(record, "request revision for")

    @staticmethod
    def delete_record(record_id: str) -> None:
        """
        Delete a settlement.

        Raises:
            SettlementServiceError: If the settlement is not found or the store fails
        """
        try:
            response = requests.delete(
                f"{BASE_URL}/{SettlementService.SETTLEMENT_COLLECTION}/{record_id}",
                timeout=config.REQUEST_TIMEOUT,
            )
            if response.status_code == 404:
                raise SettlementServiceError(f"Settlement {record_id} not found")
            response.raise_for_status()
        except requests.RequestException as e:
            raise SettlementServiceError(f"Failed to delete settlement: {str(e)}")

        logger.info("Deleted settlement %s", record_id)

    @staticmethod
    def compute_record(record_id: str) -> Tuple[SettlementRecord, SettlementResult]:
        """Fetch a settlement and compute its breakdown."""
        record = SettlementService.get_record(record_id)
        return record, compute_settlement(record.to_input())

    @staticmethod
    def _save(record: SettlementRecord, action: str) -> SettlementRecord:
        try:
            response = requests.put(
                f"{BASE_URL}/{SettlementService.SETTLEMENT_COLLECTION}/{record.id}",
                json=record.to_dict(),
                timeout=config.REQUEST_TIMEOUT,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise SettlementServiceError(f"Failed to {action} settlement: {str(e)}")

        logger.info("Settlement %s is now %s", record.id, record.status.value)
        return SettlementRecord.from_dict(response.json())
