"""Pending adjustment commands for the tvdepay CLI."""

import click
from tabulate import tabulate

from tvdepay.models.adjustment import AdjustmentStatus
from tvdepay.services.adjustment_service import AdjustmentService, AdjustmentServiceError
from tvdepay.services.settlement_service import SettlementService, SettlementServiceError
from tvdepay.cli_module.utils import DECIMAL, format_currency


@click.group(name="adjustment")
def adjustment_group():
    """Pending adjustment commands."""
    pass


@adjustment_group.command(name="add")
@click.argument("driver_id")
@click.argument("amount", type=DECIMAL)
@click.option("--notes", required=True, help="Reason for the adjustment")
def add(driver_id, amount, notes):
    """
    Register AMOUNT for DRIVER_ID's next settlement.

    Positive amounts are paid to the driver, negative amounts are charged.
    Put negative amounts after "--", e.g. adjustment add --notes Fine d1 -- -20
    """
    try:
        profile = SettlementService.get_driver(driver_id)
        adjustment = AdjustmentService.create_adjustment(profile, amount, notes)
    except (SettlementServiceError, AdjustmentServiceError) as e:
        click.echo(f"Error: {str(e)}", err=True)
        return

    click.echo(f"\n✅ Adjustment {adjustment.id} of {format_currency(adjustment.amount)} "
               f"registered for {adjustment.driver_name}.")


@adjustment_group.command(name="list")
@click.option("--driver", "driver_id", help="Only adjustments of this driver ID")
@click.option("--all", "show_all", is_flag=True, help="Include resolved adjustments")
def list_adjustments(driver_id, show_all):
    """List pending adjustments."""
    try:
        adjustments = AdjustmentService.list_adjustments(
            driver_id=driver_id,
            status=None if show_all else AdjustmentStatus.PENDING,
        )
    except AdjustmentServiceError as e:
        click.echo(f"Error: {str(e)}", err=True)
        return

    if not adjustments:
        click.echo("No adjustments found.")
        return

    table_data = [
        [
            adjustment.id[:8],
            adjustment.driver_name,
            format_currency(adjustment.amount),
            adjustment.status.value,
            adjustment.notes,
        ]
        for adjustment in adjustments
    ]
    click.echo(tabulate(
        table_data,
        headers=["ID", "Driver", "Amount", "Status", "Notes"],
        tablefmt="pretty",
    ))


@adjustment_group.command(name="delete")
@click.argument("adjustment_id")
@click.option("--confirm", is_flag=True, help="Confirm deletion without prompting")
def delete(adjustment_id, confirm):
    """Delete a pending adjustment."""
    if not confirm and not click.confirm("Are you sure you want to delete this adjustment?"):
        click.echo("Adjustment deletion cancelled.")
        return

    try:
        AdjustmentService.delete_adjustment(adjustment_id)
    except AdjustmentServiceError as e:
        click.echo(f"Error: {str(e)}", err=True)
        return

    click.echo(f"Adjustment {adjustment_id} deleted.")
