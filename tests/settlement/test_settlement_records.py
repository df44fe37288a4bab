"""Tests for stored settlement review in tvdepay."""

import json
from datetime import date
from decimal import Decimal

import pytest
import responses
from responses import matchers

from tvdepay.models.driver import DriverProfile
from tvdepay.models.record import SettlementStatus
from tvdepay.models.settlement import CompensationModel
from tvdepay.services.settlement_service import BASE_URL, SettlementService, SettlementServiceError

TEST_RECORD_ID = "calc-01"
TEST_DRIVER_ID = "driver-frota-01"


@pytest.fixture
def mock_driver_data():
    """Fixture for a fleet driver document."""
    return {
        "id": TEST_DRIVER_ID,
        "name": "Condutor Frota",
        "matricula": "AA-01-BB",
        "type": "FROTA",
        "defaultRentalValue": 200,
        "outstandingDebt": 100,
    }


@pytest.fixture
def mock_pending_record():
    """Fixture for a pending settlement in the legacy document shape."""
    return {
        "id": TEST_RECORD_ID,
        "driverId": TEST_DRIVER_ID,
        "driverName": "Condutor Frota",
        "adminId": "admin-01",
        "type": "FROTA",
        "status": "Pendente",
        "date": "2025-03-10T09:00:00",
        "periodStart": "2025-03-03",
        "periodEnd": "2025-03-09",
        "uberRides": 450.50,
        "uberTips": 25.00,
        "uberTolls": 15.20,
        "boltRides": 380.75,
        "boltTips": 18.50,
        "boltTolls": 10.80,
        "vehicleRental": 200.00,
        "fleetCard": 150.00,
        "rentalTolls": 22.50,
        "otherExpenses": 10.00,
    }


def _put_echo(request):
    return (200, {}, request.body)


class TestGetAndCompute:
    """Fetching and computing stored settlements."""

    @responses.activate
    def test_compute_record(self, mock_pending_record):
        responses.add(
            responses.GET,
            f"{BASE_URL}/settlements/{TEST_RECORD_ID}",
            json=mock_pending_record,
            status=200,
        )

        record, result = SettlementService.compute_record(TEST_RECORD_ID)

        assert record.driver_id == TEST_DRIVER_ID
        assert record.status == SettlementStatus.PENDING
        assert record.period_end == date(2025, 3, 9)
        assert result.compensation_model == CompensationModel.FLEET_RENTAL
        assert result.net_payable == Decimal("438.205")

    @responses.activate
    def test_missing_record(self):
        responses.add(responses.GET, f"{BASE_URL}/settlements/nope", json={"error": "Not found"}, status=404)

        with pytest.raises(SettlementServiceError, match="not found"):
            SettlementService.get_record("nope")

    @responses.activate
    def test_store_failure_is_wrapped(self):
        responses.add(responses.GET, f"{BASE_URL}/settlements/{TEST_RECORD_ID}", status=500)

        with pytest.raises(SettlementServiceError, match="Failed to get settlement"):
            SettlementService.get_record(TEST_RECORD_ID)

    @responses.activate
    def test_list_records_with_filters(self, mock_pending_record):
        older = dict(mock_pending_record, id="calc-00", date="2025-03-01T09:00:00")
        responses.add(
            responses.GET,
            f"{BASE_URL}/settlements/query",
            json=[older, mock_pending_record],
            status=200,
            match=[matchers.query_param_matcher({"driver_id": TEST_DRIVER_ID, "status": "Pendente"})],
        )

        records = SettlementService.list_records(driver_id=TEST_DRIVER_ID, status=SettlementStatus.PENDING)

        assert [r.id for r in records] == [TEST_RECORD_ID, "calc-00"]


class TestStatusTransitions:
    """Accepting and contesting settlements."""

    @responses.activate
    def test_accept_pending(self, mock_pending_record):
        responses.add(responses.GET, f"{BASE_URL}/settlements/{TEST_RECORD_ID}", json=mock_pending_record)
        responses.add_callback(responses.PUT, f"{BASE_URL}/settlements/{TEST_RECORD_ID}", callback=_put_echo)

        record = SettlementService.accept_record(TEST_RECORD_ID)

        assert record.status == SettlementStatus.ACCEPTED
        sent = json.loads(responses.calls[1].request.body)
        assert sent["status"] == "Aceito"
        assert sent["uberRides"] == 450.50

    @responses.activate
    def test_accept_twice_fails(self, mock_pending_record):
        accepted = dict(mock_pending_record, status="Aceito")
        responses.add(responses.GET, f"{BASE_URL}/settlements/{TEST_RECORD_ID}", json=accepted)

        with pytest.raises(SettlementServiceError, match="Only pending settlements can be accepted"):
            SettlementService.accept_record(TEST_RECORD_ID)
        assert len(responses.calls) == 1

    @responses.activate
    def test_request_revision(self, mock_pending_record):
        responses.add(responses.GET, f"{BASE_URL}/settlements/{TEST_RECORD_ID}", json=mock_pending_record)
        responses.add_callback(responses.PUT, f"{BASE_URL}/settlements/{TEST_RECORD_ID}", callback=_put_echo)

        record = SettlementService.request_revision(TEST_RECORD_ID, "  Falta o bónus de 50€.  ")

        assert record.status == SettlementStatus.REVISION_REQUESTED
        assert record.revision_notes == "Falta o bónus de 50€."

    def test_revision_requires_notes(self):
        with pytest.raises(SettlementServiceError, match="reason is required"):
            SettlementService.request_revision(TEST_RECORD_ID, "   ")

    @responses.activate
    def test_edit_resets_to_pending(self, mock_pending_record, mock_driver_data):
        contested = dict(mock_pending_record, status="Revisão Solicitada", revisionNotes="Falta o bónus")
        responses.add(responses.GET, f"{BASE_URL}/settlements/{TEST_RECORD_ID}", json=contested)
        responses.add(responses.GET, f"{BASE_URL}/drivers/{TEST_DRIVER_ID}", json=mock_driver_data)
        responses.add_callback(responses.PUT, f"{BASE_URL}/settlements/{TEST_RECORD_ID}", callback=_put_echo)

        record = SettlementService.update_record(TEST_RECORD_ID, {"uber_adjustments": 50})

        assert record.status == SettlementStatus.PENDING
        assert record.revision_notes is None
        assert record.to_input().uber_adjustments == Decimal("50")
        assert record.to_input().uber_earnings == Decimal("450.5")

    @responses.activate
    def test_edit_rejects_excess_debt(self, mock_pending_record, mock_driver_data):
        responses.add(responses.GET, f"{BASE_URL}/settlements/{TEST_RECORD_ID}", json=mock_pending_record)
        responses.add(responses.GET, f"{BASE_URL}/drivers/{TEST_DRIVER_ID}", json=mock_driver_data)

        with pytest.raises(SettlementServiceError, match="exceeds the outstanding debt"):
            SettlementService.update_record(TEST_RECORD_ID, {"debt_deduction": 120})

    @responses.activate
    def test_edit_with_camel_case_keys(self, mock_driver_data):
        stored = {
            "id": TEST_RECORD_ID,
            "driver_id": TEST_DRIVER_ID,
            "driver_name": "Condutor Frota",
            "status": "Revisão Solicitada",
            "period_start": "2025-03-03",
            "period_end": "2025-03-09",
            "compensation_model": "FROTA",
            "fleet_card": "150.0",
            "uber_earnings": "500.0",
            "vehicle_rental": "200",
        }
        responses.add(responses.GET, f"{BASE_URL}/settlements/{TEST_RECORD_ID}", json=stored)
        responses.add(responses.GET, f"{BASE_URL}/drivers/{TEST_DRIVER_ID}", json=mock_driver_data)
        responses.add_callback(responses.PUT, f"{BASE_URL}/settlements/{TEST_RECORD_ID}", callback=_put_echo)

        record = SettlementService.update_record(TEST_RECORD_ID, {"fleetCard": 0, "uberRides": 600})

        sent = json.loads(responses.calls[2].request.body)
        assert sent["fleet_card"] == "0"
        assert sent["uber_earnings"] == "600"
        assert sent["vehicle_rental"] == "200"
        assert sent["status"] == "Pendente"
        assert "fleetCard" not in sent
        assert record.to_input().fleet_card == Decimal("0")
        assert record.to_input().uber_earnings == Decimal("600")


class TestCreateRecord:
    """Storing new settlements."""

    @responses.activate
    def test_create_pending_record(self, mock_driver_data):
        responses.add_callback(responses.POST, f"{BASE_URL}/settlements", callback=lambda r: (201, {}, r.body))
        profile = DriverProfile.from_dict(mock_driver_data)

        record = SettlementService.create_record(
            profile,
            {"uber_earnings": 500, "debt_deduction": 40},
            period_start=date(2025, 3, 3),
            period_end=date(2025, 3, 9),
            admin_id="admin-01",
        )

        assert record.status == SettlementStatus.PENDING
        assert record.driver_id == TEST_DRIVER_ID
        sent = json.loads(responses.calls[0].request.body)
        assert sent["vehicle_rental"] == "200"
        assert sent["debt_deduction"] == "40"
        assert sent["compensation_model"] == "FROTA"
        assert sent["period_end"] == "2025-03-09"

    def test_period_order_is_checked(self, mock_driver_data):
        profile = DriverProfile.from_dict(mock_driver_data)

        with pytest.raises(SettlementServiceError, match="Period end"):
            SettlementService.create_record(profile, {}, date(2025, 3, 9), date(2025, 3, 3))

    @responses.activate
    def test_amounts_are_stored_exactly(self, mock_driver_data):
        responses.add_callback(responses.POST, f"{BASE_URL}/settlements", callback=lambda r: (201, {}, r.body))
        profile = DriverProfile.from_dict(mock_driver_data)

        record = SettlementService.create_record(
            profile,
            {"uberRides": "12345678901234.56789", "fleetCard": 0.1},
            period_start=date(2025, 3, 3),
            period_end=date(2025, 3, 9),
        )

        sent = json.loads(responses.calls[0].request.body)
        assert sent["uber_earnings"] == "12345678901234.56789"
        assert sent["fleet_card"] == "0.1"
        assert record.to_input().uber_earnings == Decimal("12345678901234.56789")


class TestDeleteRecord:
    """Removing stored settlements."""

    @responses.activate
    def test_delete(self):
        responses.add(responses.DELETE, f"{BASE_URL}/settlements/{TEST_RECORD_ID}", json={}, status=200)

        SettlementService.delete_record(TEST_RECORD_ID)

        assert len(responses.calls) == 1
        assert responses.calls[0].request.method == "DELETE"

    @responses.activate
    def test_delete_missing(self):
        responses.add(responses.DELETE, f"{BASE_URL}/settlements/nope", json={"error": "Not found"}, status=404)

        with pytest.raises(SettlementServiceError, match="Settlement nope not found"):
            SettlementService.delete_record("nope")

    @responses.activate
    def test_delete_store_failure(self):
        responses.add(responses.DELETE, f"{BASE_URL}/settlements/{TEST_RECORD_ID}", status=500)

        with pytest.raises(SettlementServiceError, match="Failed to delete settlement"):
            SettlementService.delete_record(TEST_RECORD_ID)
