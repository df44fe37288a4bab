"""Rental toll commands for the tvdepay CLI."""

import click

from tvdepay.models.toll import week_start
from tvdepay.services.toll_service import TollService, TollServiceError
from tvdepay.cli_module.utils import DECIMAL, format_currency


@click.group(name="toll")
def toll_group():
    """Weekly rental toll commands."""
    pass


@toll_group.command(name="register")
@click.argument("driver_id")
@click.argument("amount", type=DECIMAL)
@click.option("--week", required=True, type=click.DateTime(formats=["%Y-%m-%d"]),
              help="Any day of the week; moved back to its Monday")
def register(driver_id, amount, week):
    """Register AMOUNT of rental tolls for DRIVER_ID and add it to their debt."""
    try:
        entry = TollService.register_toll(driver_id, week.date(), amount)
    except TollServiceError as e:
        click.echo(f"Error: {str(e)}", err=True)
        return

    click.echo(f"\n✅ Tolls of {format_currency(entry.amount)} registered for the week of "
               f"{entry.period_start.isoformat()}.")


@toll_group.command(name="show")
@click.argument("driver_id")
@click.option("--week", required=True, type=click.DateTime(formats=["%Y-%m-%d"]),
              help="Any day of the week")
def show(driver_id, week):
    """Show the rental tolls registered for a week."""
    try:
        entry = TollService.get_toll(driver_id, week.date())
    except TollServiceError as e:
        click.echo(f"Error: {str(e)}", err=True)
        return

    monday = week_start(week.date()).isoformat()
    if entry is None:
        click.echo(f"No tolls registered for the week of {monday}.")
        return

    click.echo(f"Tolls for the week of {monday}: {format_currency(entry.amount)}")
