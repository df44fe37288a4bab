"""Receipt service for the tvdepay application."""

import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional

import requests

from tvdepay import config
from tvdepay.models.driver import DriverProfile
from tvdepay.models.receipt import Receipt

logger = logging.getLogger(__name__)

# Base URL for the record store
BASE_URL = config.STORE_URL


class ReceiptServiceError(Exception):
    """Custom exception for receipt service errors."""
    pass


class ReceiptService:
    """Service for the receipts drivers issue to the company."""

    RECEIPT_COLLECTION = "receipts"

    @staticmethod
    def create_receipt(profile: DriverProfile, amount: Decimal, issued_on: date,
                       notes: Optional[str] = None) -> Receipt:
        """
        Register a receipt issued by a driver.

        Args:
            profile: The driver who issued the receipt
            amount: Invoiced amount, must be positive
            issued_on: Issue date of the receipt
            notes: Free-text notes

        Returns:
            Receipt: The stored receipt

        Raises:
            ReceiptServiceError: If the amount is not positive or the store fails
        """
        if amount <= 0:
            raise ReceiptServiceError("Receipt amount must be positive")

        receipt = Receipt(
            driver_id=profile.id,
            driver_name=profile.name,
            amount=amount,
            date=issued_on,
            notes=notes,
        )

        try:
            response = requests.post(
                f"{BASE_URL}/{ReceiptService.RECEIPT_COLLECTION}",
                json=receipt.to_dict(),
                timeout=config.REQUEST_TIMEOUT,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise ReceiptServiceError(f"Failed to create receipt: {str(e)}")

        logger.info("Registered receipt %s of %s for driver %s", receipt.id, amount, profile.id)
        return Receipt.from_dict(response.json())

    @staticmethod
    def list_receipts(driver_id: Optional[str] = None) -> List[Receipt]:
        """
        List receipts, most recent first.

        Args:
            driver_id: Only receipts of this driver

        Returns:
            List[Receipt]: Matching receipts
        """
        url = f"{BASE_URL}/{ReceiptService.RECEIPT_COLLECTION}"

        try:
            if driver_id:
                response = requests.get(
                    f"{url}/query",
                    params={"driver_id": driver_id},
                    timeout=config.REQUEST_TIMEOUT,
                )
            else:
                response = requests.get(url, timeout=config.REQUEST_TIMEOUT)
            if response.status_code == 404:
                return []
            response.raise_for_status()
            receipts = [Receipt.from_dict(item) for item in response.json()]
        except requests.RequestException as e:
            raise ReceiptServiceError(f"Failed to list receipts: {str(e)}")

        return sorted(receipts, key=lambda r: r.date or date.min, reverse=True)

    @staticmethod
    def delete_receipt(receipt_id: str) -> None:
        """
        Delete a receipt.

        Raises:
            ReceiptServiceError: If the receipt is not found or the store fails
        """
        try:
            response = requests.delete(
                f"{BASE_URL}/{ReceiptService.RECEIPT_COLLECTION}/{receipt_id}",
                timeout=config.REQUEST_TIMEOUT,
            )
            if response.status_code == 404:
                raise ReceiptServiceError(f"Receipt {receipt_id} not found")
            response.raise_for_status()
        except requests.RequestException as e:
            raise ReceiptServiceError(f"Failed to delete receipt: {str(e)}")

        logger.info("Deleted receipt %s", receipt_id)
