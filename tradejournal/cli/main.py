"""Main CLI entry point for TradeJournal.

This module provides the main click group and lazy loading
of command modules to keep startup fast.
"""

import logging
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler


class LazyGroup(click.Group):
    """Click group whose subcommands are imported on first use.

    Each subcommand is registered as ``"package.module:attribute"``, so
    ``tradejournal --help`` and a single command only import the modules
    they need.
    """

    def __init__(self, *args, lazy_subcommands: dict[str, str] | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.lazy_subcommands = dict(lazy_subcommands or {})

    def list_commands(self, ctx: click.Context) -> list[str]:
        return sorted(set(super().list_commands(ctx)) | set(self.lazy_subcommands))

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        if cmd_name not in self.commands and cmd_name in self.lazy_subcommands:
            self.add_command(self._import_command(cmd_name), name=cmd_name)
        return super().get_command(ctx, cmd_name)

    def _import_command(self, cmd_name: str) -> click.Command:
        import importlib

        target = self.lazy_subcommands[cmd_name]
        module_path, _, attr_name = target.partition(":")
        command = getattr(importlib.import_module(module_path), attr_name, None)
        if not isinstance(command, click.Command):
            raise click.ClickException(f"'{target}' is not a click command")
        return command


# Command name -> "module:attribute"
LAZY_SUBCOMMANDS = {
    "init": "tradejournal.cli.account:init",
    "account": "tradejournal.cli.account:account",
    "summary": "tradejournal.cli.account:summary",
    "add": "tradejournal.cli.entries:add",
    "edit": "tradejournal.cli.entries:edit",
    "list": "tradejournal.cli.entries:list_entries",
    "clear": "tradejournal.cli.entries:clear",
    "export": "tradejournal.cli.transfer:export_csv",
    "import": "tradejournal.cli.transfer:import_csv",
}


CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


def configure_logging(level: str) -> None:
    """Route log records through rich at the given level."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@click.group(cls=LazyGroup, lazy_subcommands=LAZY_SUBCOMMANDS, context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="tradejournal")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file to use instead of ~/.config/tradejournal/config.toml.",
)
@click.option("-v", "--verbose", is_flag=True, default=False, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path], verbose: bool) -> None:
    """TradeJournal - a trading journal for the command line.
    
    Record trades, no-trade analyses, deposits and withdrawals,
    review them as a table, and move them in and out as CSV.
    
    \b
    Quick Start:
      tradejournal init                      # Create a config file
      tradejournal add --kind Deposit --pnl 500
      tradejournal list                      # View entries
      tradejournal export journal.csv        # Export to CSV
    """
    from tradejournal.config import load_config

    obj = ctx.ensure_object(dict)
    obj["config_path"] = config_path
    obj["config"] = load_config(config_path)

    level = "DEBUG" if verbose else obj["config"].get("logging", {}).get("level", "WARNING")
    configure_logging(level)


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
