import unittest
import json

import responses
from responses import matchers
from click.testing import CliRunner

from tvdepay.cli_module.cli import cli
from tvdepay.services.receipt_service import BASE_URL


class TestReceiptCommands(unittest.TestCase):
    """Test suite for the receipt CLI commands."""

    def setUp(self):
        """Set up a driver and stored receipts."""
        self.driver = {"id": "d1", "name": "Rui", "type": "FROTA"}
        self.receipts = [
            {"id": "r1-0000-aaaa", "driver_id": "d1", "driver_name": "Rui", "amount": "300",
             "date": "2025-03-01"},
            {"id": "r2-0000-bbbb", "driver_id": "d1", "driver_name": "Rui", "amount": "120.5",
             "date": "2025-03-12", "notes": "Semana 11"},
        ]

        self.runner = CliRunner()

        # Start response mocking
        responses.start()

    def tearDown(self):
        """Clean up mocks after each test."""
        responses.stop()
        responses.reset()

    def test_add(self):
        responses.add(responses.GET, f"{BASE_URL}/drivers/d1", json=self.driver)
        responses.add_callback(
            responses.POST,
            f"{BASE_URL}/receipts",
            callback=lambda request: (201, {}, request.body),
        )

        result = self.runner.invoke(cli, ["receipt", "add", "d1", "250,10", "--date", "2025-03-14"])

        self.assertEqual(0, result.exit_code, result.output)
        self.assertIn("of € 250.10 registered for Rui", result.output)
        sent = json.loads(responses.calls[1].request.body)
        self.assertEqual(sent["amount"], "250.10")
        self.assertEqual(sent["date"], "2025-03-14")

    def test_add_rejects_bad_amount(self):
        result = self.runner.invoke(cli, ["receipt", "add", "d1", "abc", "--date", "2025-03-14"])

        self.assertNotEqual(0, result.exit_code)
        self.assertIn("is not a valid amount", result.output)
        self.assertEqual(len(responses.calls), 0)

    def test_add_zero_amount(self):
        responses.add(responses.GET, f"{BASE_URL}/drivers/d1", json=self.driver)

        result = self.runner.invoke(cli, ["receipt", "add", "d1", "0", "--date", "2025-03-14"])

        self.assertIn("Error: Receipt amount must be positive", result.output)

    def test_list_for_driver(self):
        responses.add(
            responses.GET,
            f"{BASE_URL}/receipts/query",
            json=self.receipts,
            match=[matchers.query_param_matcher({"driver_id": "d1"})],
        )

        result = self.runner.invoke(cli, ["receipt", "list", "--driver", "d1"])

        self.assertEqual(0, result.exit_code, result.output)
        self.assertIn("€ 120.50", result.output)
        self.assertIn("Semana 11", result.output)
        self.assertLess(result.output.index("2025-03-12"), result.output.index("2025-03-01"))

    def test_list_empty(self):
        responses.add(responses.GET, f"{BASE_URL}/receipts", json=[])

        result = self.runner.invoke(cli, ["receipt", "list"])

        self.assertIn("No receipts found.", result.output)

    def test_delete(self):
        responses.add(responses.DELETE, f"{BASE_URL}/receipts/r1-0000-aaaa", json={}, status=200)

        result = self.runner.invoke(cli, ["receipt", "delete", "r1-0000-aaaa", "--confirm"])

        self.assertEqual(0, result.exit_code, result.output)
        self.assertIn("Receipt r1-0000-aaaa deleted.", result.output)

    def test_delete_prompts(self):
        result = self.runner.invoke(cli, ["receipt", "delete", "r1-0000-aaaa"], input="n\n")

        self.assertIn("Receipt deletion cancelled.", result.output)
        self.assertEqual(len(responses.calls), 0)

    def test_delete_missing(self):
        responses.add(responses.DELETE, f"{BASE_URL}/receipts/nope", json={}, status=404)

        result = self.runner.invoke(cli, ["receipt", "delete", "nope", "--confirm"])

        self.assertIn("Error: Receipt nope not found", result.output)


if __name__ == '__main__':
    unittest.main()
