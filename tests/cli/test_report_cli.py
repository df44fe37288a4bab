import unittest
from datetime import date
from unittest.mock import patch

import responses
from responses import matchers
from click.testing import CliRunner

from tvdepay.cli_module.cli import cli
from tvdepay.services.report_service import BASE_URL


class TestBalancesCommand(unittest.TestCase):
    """Test suite for the report balances command."""

    def setUp(self):
        """Set up accepted settlements and receipts in the store."""
        self.settlements = [
            {
                "id": "s1",
                "driver_id": "d1",
                "driver_name": "Rui",
                "status": "Aceito",
                "period_end": "2025-03-09",
                "compensation_model": "FROTA",
                "uber_earnings": 500,
                "vehicle_rental": 200,
                "is_iva_exempt": True,
            },
            {
                "id": "s2",
                "driver_id": "d2",
                "driver_name": "Ana",
                "status": "Aceito",
                "period_end": "2025-03-16",
                "compensation_model": "FROTA",
                "uber_earnings": 250,
                "is_iva_exempt": True,
            },
        ]
        self.receipts = [
            {"id": "r1", "driver_id": "d1", "driver_name": "Rui", "amount": 120.5, "date": "2025-03-12"},
        ]

        self.runner = CliRunner()

        # Start response mocking
        responses.start()

    def tearDown(self):
        """Clean up mocks after each test."""
        responses.stop()
        responses.reset()

    def test_balances_table(self):
        responses.add(responses.GET, f"{BASE_URL}/settlements/query", json=self.settlements)
        responses.add(responses.GET, f"{BASE_URL}/receipts", json=self.receipts)

        result = self.runner.invoke(
            cli, ["report", "balances", "--start", "2025-02-20", "--end", "2025-03-20"]
        )

        self.assertEqual(0, result.exit_code, result.output)
        self.assertIn("Balances from 2025-02-20 to 2025-03-20", result.output)
        self.assertIn("Rui", result.output)
        self.assertIn("€ 179.50", result.output)
        self.assertIn("TOTAL", result.output)
        self.assertIn("€ 550.00", result.output)
        self.assertIn("€ 429.50", result.output)
        self.assertLess(result.output.index("Ana"), result.output.index("Rui"))

    def test_balances_for_one_driver(self):
        responses.add(
            responses.GET,
            f"{BASE_URL}/settlements/query",
            json=self.settlements[:1],
            match=[matchers.query_param_matcher({"status": "Aceito", "driver_id": "d1"})],
        )
        responses.add(
            responses.GET,
            f"{BASE_URL}/receipts/query",
            json=self.receipts,
            match=[matchers.query_param_matcher({"driver_id": "d1"})],
        )

        result = self.runner.invoke(cli, [
            "report", "balances", "--start", "2025-02-20", "--end", "2025-03-20", "--driver", "d1",
        ])

        self.assertEqual(0, result.exit_code, result.output)
        self.assertIn("€ 179.50", result.output)
        self.assertNotIn("Ana", result.output)

    @patch("tvdepay.cli_module.commands.report_commands.default_report_window")
    def test_default_window(self, mock_window):
        mock_window.return_value = (date(2024, 12, 20), date(2025, 1, 20))
        responses.add(responses.GET, f"{BASE_URL}/settlements/query", json=self.settlements)
        responses.add(responses.GET, f"{BASE_URL}/receipts", json=[])

        result = self.runner.invoke(cli, ["report", "balances"])

        self.assertEqual(0, result.exit_code, result.output)
        self.assertIn("Balances from 2024-12-20 to 2025-01-20", result.output)
        self.assertIn("No accepted settlements or receipts in this period.", result.output)

    def test_reversed_window(self):
        result = self.runner.invoke(
            cli, ["report", "balances", "--start", "2025-03-20", "--end", "2025-02-20"]
        )

        self.assertIn("Error: the end date cannot be before the start date", result.output)
        self.assertEqual(len(responses.calls), 0)

    def test_store_unavailable(self):
        responses.add(responses.GET, f"{BASE_URL}/settlements/query", status=500)

        result = self.runner.invoke(
            cli, ["report", "balances", "--start", "2025-02-20", "--end", "2025-03-20"]
        )

        self.assertIn("Error: Failed to fetch report data", result.output)


if __name__ == '__main__':
    unittest.main()
