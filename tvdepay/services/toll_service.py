"""Toll service for the tvdepay application.

The admin registers what the rented vehicle spent on tolls each week. The
amount is added to the driver's outstanding debt and prefills the
rental_tolls figure of the settlement for that week.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional

import requests

from tvdepay import config
from tvdepay.models.fields import to_decimal
from tvdepay.models.toll import TollEntry, week_start

logger = logging.getLogger(__name__)

# Base URL for the record store
BASE_URL = config.STORE_URL


class TollServiceError(Exception):
    """Custom exception for toll service errors."""
    pass


class TollService:
    """Service for weekly rental toll registration."""

    TOLL_COLLECTION = "tolls"
    DRIVER_COLLECTION = "drivers"

    @staticmethod
    def get_toll(driver_id: str, day: date) -> Optional[TollEntry]:
        """Get the tolls registered for the week containing day, if any."""
        entry_id = f"{driver_id}_{week_start(day).isoformat()}"
        try:
            response = requests.get(
                f"{BASE_URL}/{TollService.TOLL_COLLECTION}/{entry_id}",
                timeout=config.REQUEST_TIMEOUT,
            )
            if response.status_code == 404:
                return None
            response.raise_for_status()
            return TollEntry.from_dict(response.json())
        except requests.RequestException as e:
            raise TollServiceError(f"Failed to get tolls: {str(e)}")

    @staticmethod
    def register_toll(driver_id: str, day: date, amount: Decimal) -> TollEntry:
        """
        Register the rental tolls of a week and update the driver's debt.

        The week is moved back to its Monday. Registering a week again
        replaces its amount, and the debt only moves by the difference.

        Args:
            driver_id: ID of the driver renting the vehicle
            day: Any day of the week
            amount: Toll total for the week

        Returns:
            TollEntry: The stored entry

        Raises:
            TollServiceError: If the amount is negative or the store fails
        """
        if amount < 0:
            raise TollServiceError("Toll amount cannot be negative")

        existing = TollService.get_toll(driver_id, day)
        entry = TollEntry(driver_id=driver_id, period_start=week_start(day), amount=amount)
        url = f"{BASE_URL}/{TollService.TOLL_COLLECTION}"

        try:
            if existing:
                response = requests.put(
                    f"{url}/{entry.id}", json=entry.to_dict(), timeout=config.REQUEST_TIMEOUT
                )
            else:
                response = requests.post(url, json=entry.to_dict(), timeout=config.REQUEST_TIMEOUT)
            response.raise_for_status()
        except requests.RequestException as e:
            raise TollServiceError(f"Failed to save tolls: {str(e)}")

        difference = amount - (existing.amount if existing else Decimal("0"))
        if difference != 0:
            TollService._add_to_debt(driver_id, difference)

        logger.info("Registered tolls of %s for driver %s, week of %s", amount, driver_id, entry.period_start)
        return entry

    @staticmethod
    def _add_to_debt(driver_id: str, difference: Decimal) -> None:
        url = f"{BASE_URL}/{TollService.DRIVER_COLLECTION}/{driver_id}"
        try:
            response = requests.get(url, timeout=config.REQUEST_TIMEOUT)
            if response.status_code == 404:
                raise TollServiceError(f"Driver {driver_id} not found")
            response.raise_for_status()
            driver = response.json()

            key = "outstandingDebt" if "outstandingDebt" in driver else "outstanding_debt"
            driver[key] = str(to_decimal(driver.get(key)) + difference)

            response = requests.put(url, json=driver, timeout=config.REQUEST_TIMEOUT)
            response.raise_for_status()
        except requests.RequestException as e:
            raise TollServiceError(f"Failed to update driver debt: {str(e)}")

        logger.info("Outstanding debt of driver %s changed by %s", driver_id, difference)
