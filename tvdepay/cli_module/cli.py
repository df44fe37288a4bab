"""Main CLI entry point for the tvdepay application."""

import logging

import click

from tvdepay import config

# Set context settings to properly display help for all commands
CONTEXT_SETTINGS = {
    "help_option_names": ["-h", "--help"],
    "max_content_width": 120,
    "show_default": True
}

from tvdepay.cli_module.commands.settlement_commands import settlement_group
from tvdepay.cli_module.commands.report_commands import report_group
from tvdepay.cli_module.commands.receipt_commands import receipt_group
from tvdepay.cli_module.commands.adjustment_commands import adjustment_group
from tvdepay.cli_module.commands.toll_commands import toll_group


@click.group(context_settings=CONTEXT_SETTINGS)
@click.option("--verbose", "-v", is_flag=True, help="Log debug output")
def cli(verbose):
    """tvdepay CLI for fleet driver settlements."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# Register all command groups
cli.add_command(settlement_group)
cli.add_command(report_group)
cli.add_command(receipt_group)
cli.add_command(adjustment_group)
cli.add_command(toll_group)


def main():
    """Entry point for the application."""
    cli()


if __name__ == '__main__':
    main()
