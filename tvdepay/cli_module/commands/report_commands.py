"""Report commands for the tvdepay CLI."""

import click
from tabulate import tabulate

from tvdepay.models.fields import ZERO
from tvdepay.services.report_service import ReportService, ReportServiceError, default_report_window
from tvdepay.cli_module.utils import format_currency


@click.group(name="report")
def report_group():
    """Reporting and reconciliation commands."""
    pass


@report_group.command(name="balances")
@click.option("--start", type=click.DateTime(formats=["%Y-%m-%d"]),
              help="First day of the window (default: 20th of last month)")
@click.option("--end", type=click.DateTime(formats=["%Y-%m-%d"]),
              help="Last day of the window (default: 20th of this month)")
@click.option("--driver", "driver_id", help="Only this driver ID")
def balances(start, end, driver_id):
    """Accepted settlements against issued receipts, per driver."""
    default_start, default_end = default_report_window()
    start = start.date() if start else default_start
    end = end.date() if end else default_end

    if end < start:
        click.echo("Error: the end date cannot be before the start date", err=True)
        return

    try:
        rows = ReportService.fetch_balances(start, end, driver_id=driver_id)
    except ReportServiceError as e:
        click.echo(f"Error: {str(e)}", err=True)
        return

    click.echo(f"\n📊 Balances from {start.isoformat()} to {end.isoformat()}")

    if not rows:
        click.echo("No accepted settlements or receipts in this period.")
        return

    table_data = [
        [
            row.driver_name,
            row.settlement_count,
            format_currency(row.total_net_payable),
            format_currency(row.total_receipts),
            format_currency(row.pending_balance),
        ]
        for row in rows
    ]
    table_data.append([
        "TOTAL",
        sum(row.settlement_count for row in rows),
        format_currency(sum((row.total_net_payable for row in rows), ZERO)),
        format_currency(sum((row.total_receipts for row in rows), ZERO)),
        format_currency(sum((row.pending_balance for row in rows), ZERO)),
    ])

    click.echo(tabulate(
        table_data,
        headers=["Driver", "Settlements", "Net payable", "Receipts", "Pending"],
        tablefmt="pretty",
    ))
