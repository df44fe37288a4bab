"""
Settlement commands for the tvdepay CLI.

This module implements commands to compute a settlement breakdown from raw
figures and to review the settlements held by the record store.
"""

import logging

import click
from tabulate import tabulate

from tvdepay.models.driver import DriverProfile
from tvdepay.models.record import SettlementStatus
from tvdepay.models.settlement import sanitize
from tvdepay.services.settlement_engine import compute_settlement
from tvdepay.services.settlement_service import SettlementService, SettlementServiceError
from tvdepay.cli_module.utils import breakdown_rows, format_currency, load_json_file, model_label

STATUS_CHOICES = {
    "pending": SettlementStatus.PENDING,
    "accepted": SettlementStatus.ACCEPTED,
    "revision": SettlementStatus.REVISION_REQUESTED,
}


def _print_breakdown(result):
    click.echo(f"Model: {model_label(result)}")
    click.echo(tabulate(breakdown_rows(result), headers=["Item", "Amount"],
                        tablefmt="pretty", colalign=("left", "right")))


@click.group(name="settlement")
def settlement_group():
    """Settlement calculation and review commands."""
    pass


@settlement_group.command(name="compute")
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--profile", "profile_file", type=click.Path(exists=True, dir_okay=False),
              help="JSON file with the driver's profile; resolves contract defaults")
def compute(input_file, profile_file):
    """Compute the breakdown of the figures in INPUT_FILE."""
    figures = load_json_file(input_file)

    try:
        if profile_file:
            profile = DriverProfile.from_dict(load_json_file(profile_file))
            settlement_input = SettlementService.build_input(profile, figures)
        else:
            settlement_input = sanitize(figures)
    except SettlementServiceError as e:
        click.echo(f"Error: {str(e)}", err=True)
        return

    _print_breakdown(compute_settlement(settlement_input))


@settlement_group.command(name="create")
@click.argument("driver_id")
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--start", required=True, type=click.DateTime(formats=["%Y-%m-%d"]),
              help="First day of the period")
@click.option("--end", required=True, type=click.DateTime(formats=["%Y-%m-%d"]),
              help="Last day of the period")
@click.option("--admin", "admin_id", help="ID of the admin entering the figures")
@click.option("--notes", help="Justification for other expenses")
@click.option("--apply-adjustments", is_flag=True,
              help="Carry the driver's pending adjustments into this settlement")
@click.option("--prefill-tolls", is_flag=True,
              help="Use the rental tolls registered for the week when INPUT_FILE has none")
def create(driver_id, input_file, start, end, admin_id, notes, apply_adjustments, prefill_tolls):
    """Store the figures in INPUT_FILE as a pending settlement for DRIVER_ID."""
    figures = load_json_file(input_file)

    try:
        profile = SettlementService.get_driver(driver_id)
        record = SettlementService.create_record(
            profile,
            figures,
            period_start=start.date(),
            period_end=end.date(),
            admin_id=admin_id,
            other_expenses_notes=notes,
            apply_adjustments=apply_adjustments,
            prefill_tolls=prefill_tolls,
        )
    except SettlementServiceError as e:
        click.echo(f"Error: {str(e)}", err=True)
        return

    click.echo(f"\n✅ Settlement {record.id} created for {record.driver_name}.")
    _print_breakdown(compute_settlement(record.to_input()))


@settlement_group.command(name="edit")
@click.argument("settlement_id")
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False))
def edit(settlement_id, input_file):
    """Amend a settlement with the figures in INPUT_FILE; it becomes pending again."""
    figures = load_json_file(input_file)

    try:
        record = SettlementService.update_record(settlement_id, figures)
    except SettlementServiceError as e:
        click.echo(f"Error: {str(e)}", err=True)
        return

    click.echo(f"\n✅ Settlement {record.id} updated and awaiting review.")
    _print_breakdown(compute_settlement(record.to_input()))


@settlement_group.command(name="show")
@click.argument("settlement_id")
def show(settlement_id):
    """Show a stored settlement and its breakdown."""
    try:
        record, result = SettlementService.compute_record(settlement_id)
    except SettlementServiceError as e:
        click.echo(f"Error: {str(e)}", err=True)
        return

    click.echo(f"\nSettlement {record.id}")
    click.echo(f"Driver: {record.driver_name}")
    click.echo(f"Period: {record.period_start} to {record.period_end}")
    click.echo(f"Status: {record.status.value}")
    if record.other_expenses_notes:
        click.echo(f"Other expenses: {record.other_expenses_notes}")
    if record.revision_notes:
        click.echo(f"Revision notes: {record.revision_notes}")
    click.echo()
    _print_breakdown(result)


@settlement_group.command(name="list")
@click.option("--driver", "driver_id", help="Only settlements of this driver ID")
@click.option("--status", type=click.Choice(list(STATUS_CHOICES)), help="Only settlements in this status")
def list_settlements(driver_id, status):
    """List stored settlements, newest first."""
    try:
        records = SettlementService.list_records(
            driver_id=driver_id, status=STATUS_CHOICES.get(status)
        )
    except SettlementServiceError as e:
        click.echo(f"Error: {str(e)}", err=True)
        return

    if not records:
        click.echo("No settlements found.")
        return

    table_data = []
    for record in records:
        result = compute_settlement(record.to_input(), missing_cap_log_level=logging.DEBUG)
        table_data.append([
            record.id[:8],
            record.driver_name,
            f"{record.period_start} - {record.period_end}",
            record.status.value,
            format_currency(result.net_payable),
        ])

    click.echo(tabulate(
        table_data,
        headers=["ID", "Driver", "Period", "Status", "Net payable"],
        tablefmt="pretty",
    ))


@settlement_group.command(name="accept")
@click.argument("settlement_id")
def accept(settlement_id):
    """Accept a pending settlement."""
    try:
        record = SettlementService.accept_record(settlement_id)
    except SettlementServiceError as e:
        click.echo(f"Error: {str(e)}", err=True)
        return

    click.echo(f"\n✅ Settlement {record.id} accepted.")


@settlement_group.command(name="revise")
@click.argument("settlement_id")
@click.option("--notes", required=True, help="Why the settlement should be revised")
def request_revision(settlement_id, notes):
    """Contest a pending settlement."""
    try:
        record = SettlementService.request_revision(settlement_id, notes)
    except SettlementServiceError as e:
        click.echo(f"Error: {str(e)}", err=True)
        return

    click.echo(f"\nRevision requested for settlement {record.id}.")
    click.echo(f"Notes: {record.revision_notes}")


@settlement_group.command(name="delete")
@click.argument("settlement_id")
@click.option("--confirm", is_flag=True, help="Confirm deletion without prompting")
def delete(settlement_id, confirm):
    """Delete a stored settlement."""
    try:
        record = SettlementService.get_record(settlement_id)

        click.echo(f"Settlement {record.id}: {record.driver_name}, "
                   f"{record.period_start} to {record.period_end} ({record.status.value})")

        if not confirm and not click.confirm("Are you sure you want to delete this settlement?"):
            click.echo("Settlement deletion cancelled.")
            return

        SettlementService.delete_record(settlement_id)
    except SettlementServiceError as e:
        click.echo(f"Error: {str(e)}", err=True)
        return

    click.echo(f"Settlement {settlement_id} deleted.")
