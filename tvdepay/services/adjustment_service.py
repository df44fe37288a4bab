"""Adjustment service for the tvdepay application.

Pending adjustments are one-off amounts the admin registers between
settlements. The next settlement created for the driver absorbs them and
marks them RESOLVED.
"""

import logging
from decimal import Decimal
from typing import Iterable, List, Optional

import requests

from tvdepay import config
from tvdepay.models.adjustment import Adjustment, AdjustmentStatus
from tvdepay.models.driver import DriverProfile

logger = logging.getLogger(__name__)

# Base URL for the record store
BASE_URL = config.STORE_URL


class AdjustmentServiceError(Exception):
    """Custom exception for adjustment service errors."""
    pass


class AdjustmentService:
    """Service for managing pending adjustments."""

    ADJUSTMENT_COLLECTION = "adjustments"

    @staticmethod
    def create_adjustment(profile: DriverProfile, amount: Decimal, notes: str) -> Adjustment:
        """
        Register a pending adjustment for a driver.

        Args:
            profile: The driver the adjustment belongs to
            amount: Owed to the driver when positive, to the company when negative
            notes: Reason for the adjustment

        Raises:
            AdjustmentServiceError: If the amount is zero, no reason is given or the store fails
        """
        if amount == 0:
            raise AdjustmentServiceError("Adjustment amount cannot be zero")
        if not notes or not notes.strip():
            raise AdjustmentServiceError("A reason is required for an adjustment")

        adjustment = Adjustment(
            driver_id=profile.id,
            driver_name=profile.name,
            amount=amount,
            notes=notes.strip(),
        )

        try:
            response = requests.post(
                f"{BASE_URL}/{AdjustmentService.ADJUSTMENT_COLLECTION}",
                json=adjustment.to_dict(),
                timeout=config.REQUEST_TIMEOUT,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise AdjustmentServiceError(f"Failed to create adjustment: {str(e)}")

        logger.info("Registered adjustment %s of %s for driver %s", adjustment.id, amount, profile.id)
        return Adjustment.from_dict(response.json())

    @staticmethod
    def get_adjustment(adjustment_id: str) -> Adjustment:
        try:
            response = requests.get(
                f"{BASE_URL}/{AdjustmentService.ADJUSTMENT_COLLECTION}/{adjustment_id}",
                timeout=config.REQUEST_TIMEOUT,
            )
            if response.status_code == 404:
                raise AdjustmentServiceError(f"Adjustment {adjustment_id} not found")
            response.raise_for_status()
            return Adjustment.from_dict(response.json())
        except requests.RequestException as e:
            raise AdjustmentServiceError(f"Failed to get adjustment: {str(e)}")

    @staticmethod
    def list_adjustments(driver_id: Optional[str] = None,
                         status: Optional[AdjustmentStatus] = None) -> List[Adjustment]:
        """List adjustments, newest first."""
        params = {}
        if driver_id:
            params["driver_id"] = driver_id
        if status:
            params["status"] = status.value

        url = f"{BASE_URL}/{AdjustmentService.ADJUSTMENT_COLLECTION}"
        if params:
            url = f"{url}/query"

        try:
            response = requests.get(url, params=params or None, timeout=config.REQUEST_TIMEOUT)
            if response.status_code == 404:
                return []
            response.raise_for_status()
            adjustments = [Adjustment.from_dict(item) for item in response.json()]
        except requests.RequestException as e:
            raise AdjustmentServiceError(f"Failed to list adjustments: {str(e)}")

        return sorted(adjustments, key=lambda a: a.created_at or "", reverse=True)

    @staticmethod
    def delete_adjustment(adjustment_id: str) -> None:
        """
        Delete a pending adjustment.

        Raises:
            AdjustmentServiceError: If the adjustment is resolved already
        """
        adjustment = AdjustmentService.get_adjustment(adjustment_id)
        if adjustment.status != AdjustmentStatus.PENDING:
            raise AdjustmentServiceError(
                f"Adjustment {adjustment_id} is already resolved and cannot be deleted"
            )

        try:
            response = requests.delete(
                f"{BASE_URL}/{AdjustmentService.ADJUSTMENT_COLLECTION}/{adjustment_id}",
                timeout=config.REQUEST_TIMEOUT,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise AdjustmentServiceError(f"Failed to delete adjustment: {str(e)}")

        logger.info("Deleted adjustment %s", adjustment_id)

    @staticmethod
    def resolve_adjustments(adjustments: Iterable[Adjustment], settlement_id: str) -> None:
        """Mark adjustments as absorbed by a settlement."""
        for adjustment in adjustments:
            adjustment.status = AdjustmentStatus.RESOLVED
            adjustment.resolved_in_settlement_id = settlement_id
            try:
                response = requests.put(
                    f"{BASE_URL}/{AdjustmentService.ADJUSTMENT_COLLECTION}/{adjustment.id}",
                    json=adjustment.to_dict(),
                    timeout=config.REQUEST_TIMEOUT,
                )
                response.raise_for_status()
            except requests.RequestException as e:
                raise AdjustmentServiceError(f"Failed to resolve adjustment: {str(e)}")

            logger.info("Adjustment %s resolved in settlement %s", adjustment.id, settlement_id)
