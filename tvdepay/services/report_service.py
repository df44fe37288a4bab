"""Report service for the tvdepay application.

Aggregates accepted settlements per driver over a date window and reconciles
the payable totals against the receipts drivers issued.
"""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple

import requests

from tvdepay import config
from tvdepay.models.fields import ZERO
from tvdepay.models.receipt import Receipt
from tvdepay.models.record import SettlementRecord, SettlementStatus
from tvdepay.services.receipt_service import ReceiptService, ReceiptServiceError
from tvdepay.services.settlement_engine import FLEET_CARD_CAPS, compute_settlement

logger = logging.getLogger(__name__)

# Base URL for the record store
BASE_URL = config.STORE_URL

# Reports run from the 20th of one month to the 20th of the next
CUTOFF_DAY = 20


class ReportServiceError(Exception):
    """Custom exception for report service errors."""
    pass


@dataclass
class ReportRow:
    """Accepted settlement totals of one driver."""
    driver_id: str
    driver_name: str
    total_earnings: Decimal = ZERO
    total_deductions: Decimal = ZERO
    total_net_payable: Decimal = ZERO
    settlement_count: int = 0


@dataclass
class BalanceRow:
    """What a driver is owed against what they have invoiced."""
    driver_id: str
    driver_name: str
    total_net_payable: Decimal
    total_receipts: Decimal
    settlement_count: int
    receipt_count: int

    @property
    def pending_balance(self) -> Decimal:
        return self.total_net_payable - self.total_receipts


def default_report_window(today: Optional[date] = None) -> Tuple[date, date]:
    """Return (20th of the previous month, 20th of the current month)."""
    today = today or date.today()
    end = today.replace(day=CUTOFF_DAY)
    if today.month == 1:
        start = date(today.year - 1, 12, CUTOFF_DAY)
    else:
        start = date(today.year, today.month - 1, CUTOFF_DAY)
    return start, end


def _in_window(day: Optional[date], start: date, end: date) -> bool:
    return day is not None and start <= day <= end


def build_report(records: Iterable[SettlementRecord], start: date, end: date,
                 driver_id: Optional[str] = None) -> List[ReportRow]:
    """
    Total the accepted settlements whose period ends inside [start, end].

    Args:
        records: Settlements to consider, in any status
        start: First day of the window
        end: Last day of the window, included whole
        driver_id: Restrict the report to one driver

    Returns:
        List[ReportRow]: One row per driver, sorted by driver name
    """
    rows = {}
    uncapped = []
    for record in records:
        if record.status != SettlementStatus.ACCEPTED:
            continue
        if driver_id and record.driver_id != driver_id:
            continue
        if not _in_window(record.period_end, start, end):
            continue

        result = compute_settlement(record.to_input(), missing_cap_log_level=logging.DEBUG)
        if result.is_percentage and result.fuel_type not in FLEET_CARD_CAPS:
            uncapped.append(record.id)
        row = rows.setdefault(record.driver_id, ReportRow(record.driver_id, record.driver_name))
        row.total_earnings += result.gross_earnings
        row.total_deductions += result.total_deductions
        row.total_net_payable += result.net_payable
        row.settlement_count += 1

    if uncapped:
        logger.warning(
            "%d revenue share settlements have no fleet card cap, the drivers bore the full "
            "fleet card cost: %s",
            len(uncapped), ", ".join(uncapped),
        )

    return sorted(rows.values(), key=lambda r: r.driver_name.lower())


def reconcile(rows: Iterable[ReportRow], receipts: Iterable[Receipt], start: date,
              end: date) -> List[BalanceRow]:
    """
    Match report rows against the receipts dated inside [start, end].

    Drivers with receipts but no accepted settlement in the window get a row
    too, with a negative pending balance.
    """
    balances = {
        row.driver_id: BalanceRow(
            driver_id=row.driver_id,
            driver_name=row.driver_name,
            total_net_payable=row.total_net_payable,
            total_receipts=ZERO,
            settlement_count=row.settlement_count,
            receipt_count=0,
        )
        for row in rows
    }

    for receipt in receipts:
        if not _in_window(receipt.date, start, end):
            continue
        balance = balances.get(receipt.driver_id)
        if balance is None:
            balance = balances[receipt.driver_id] = BalanceRow(
                driver_id=receipt.driver_id,
                driver_name=receipt.driver_name,
                total_net_payable=ZERO,
                total_receipts=ZERO,
                settlement_count=0,
                receipt_count=0,
            )
        balance.total_receipts += receipt.amount
        balance.receipt_count += 1

    return sorted(balances.values(), key=lambda b: b.driver_name.lower())


class ReportService:
    """Service for fetching report data from the record store."""

    SETTLEMENT_COLLECTION = "settlements"

    @staticmethod
    def fetch_balances(start: date, end: date,
                       driver_id: Optional[str] = None) -> List[BalanceRow]:
        """
        Build the reconciled balances of the window from stored data.

        Raises:
            ReportServiceError: If the record store fails
        """
        params = {"status": SettlementStatus.ACCEPTED.value}
        if driver_id:
            params["driver_id"] = driver_id

        try:
            response = requests.get(
                f"{BASE_URL}/{ReportService.SETTLEMENT_COLLECTION}/query",
                params=params,
                timeout=config.REQUEST_TIMEOUT,
            )
            response.raise_for_status()
            records = [SettlementRecord.from_dict(item) for item in response.json()]
            receipts = ReceiptService.list_receipts(driver_id=driver_id)
        except (requests.RequestException, ReceiptServiceError) as e:
            raise ReportServiceError(f"Failed to fetch report data: {str(e)}")

        logger.info(
            "Reconciling %d settlements and %d receipts from %s to %s",
            len(records), len(receipts), start, end,
        )
        rows = build_report(records, start, end, driver_id=driver_id)
        return reconcile(rows, receipts, start, end)
