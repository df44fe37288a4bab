"""Command modules for the tvdepay CLI."""

from tvdepay.cli_module.commands.settlement_commands import settlement_group
from tvdepay.cli_module.commands.report_commands import report_group
from tvdepay.cli_module.commands.receipt_commands import receipt_group
from tvdepay.cli_module.commands.adjustment_commands import adjustment_group
from tvdepay.cli_module.commands.toll_commands import toll_group

__all__ = [
    'settlement_group',
    'report_group',
    'receipt_group',
    'adjustment_group',
    'toll_group',
]
