"""Receipt commands for the tvdepay CLI."""

import click
from tabulate import tabulate

from tvdepay.services.receipt_service import ReceiptService, ReceiptServiceError
from tvdepay.services.settlement_service import SettlementService, SettlementServiceError
from tvdepay.cli_module.utils import DECIMAL, format_currency


@click.group(name="receipt")
def receipt_group():
    """Driver receipt commands."""
    pass


@receipt_group.command(name="add")
@click.argument("driver_id")
@click.argument("amount", type=DECIMAL)
@click.option("--date", "issued_on", required=True, type=click.DateTime(formats=["%Y-%m-%d"]),
              help="Issue date of the receipt")
@click.option("--notes", help="Free-text notes")
def add(driver_id, amount, issued_on, notes):
    """Register a receipt of AMOUNT issued by DRIVER_ID."""
    try:
        profile = SettlementService.get_driver(driver_id)
        receipt = ReceiptService.create_receipt(profile, amount, issued_on.date(), notes=notes)
    except (SettlementServiceError, ReceiptServiceError) as e:
        click.echo(f"Error: {str(e)}", err=True)
        return

    click.echo(f"\n✅ Receipt {receipt.id} of {format_currency(receipt.amount)} "
               f"registered for {receipt.driver_name}.")


@receipt_group.command(name="list")
@click.option("--driver", "driver_id", help="Only receipts of this driver ID")
def list_receipts(driver_id):
    """List receipts, most recent first."""
    try:
        receipts = ReceiptService.list_receipts(driver_id=driver_id)
    except ReceiptServiceError as e:
        click.echo(f"Error: {str(e)}", err=True)
        return

    if not receipts:
        click.echo("No receipts found.")
        return

    table_data = [
        [receipt.id[:8], receipt.driver_name, receipt.date, format_currency(receipt.amount), receipt.notes or ""]
        for receipt in receipts
    ]
    click.echo(tabulate(
        table_data,
        headers=["ID", "Driver", "Date", "Amount", "Notes"],
        tablefmt="pretty",
    ))


@receipt_group.command(name="delete")
@click.argument("receipt_id")
@click.option("--confirm", is_flag=True, help="Confirm deletion without prompting")
def delete(receipt_id, confirm):
    """Delete a receipt."""
    if not confirm and not click.confirm("Are you sure you want to delete this receipt?"):
        click.echo("Receipt deletion cancelled.")
        return

    try:
        ReceiptService.delete_receipt(receipt_id)
    except ReceiptServiceError as e:
        click.echo(f"Error: {str(e)}", err=True)
        return

    click.echo(f"Receipt {receipt_id} deleted.")
