"""Shared helpers for TradeJournal CLI commands."""

import click
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

console = Console()


def get_config(ctx: click.Context) -> dict:
    """Configuration loaded by the root command, or loaded now."""
    obj = ctx.ensure_object(dict)
    if "config" not in obj:
        from tradejournal.config import load_config

        obj["config"] = load_config(obj.get("config_path"))
    return obj["config"]


def get_service(ctx: click.Context):
    """Build the journal service for the configured database and account."""
    from tradejournal.config import get_account_id, get_db_path
    from tradejournal.db.store import JournalStore
    from tradejournal.journal import JournalService

    config = get_config(ctx)
    account_config = config.get("account", {})
    store = JournalStore(get_db_path(config))
    return JournalService(
        store,
        get_account_id(config),
        default_name=account_config.get("default_name", "Demo Account"),
        default_initial_balance=account_config.get("default_initial_balance", 10000.0),
    )


def print_error(message: str, title: str = "Error") -> None:
    console.print(Panel(
        f"[red]{escape(message)}[/red]",
        title=f"[bold red]{title}[/bold red]",
        border_style="red",
    ))


def format_validation_error(error: ValidationError) -> str:
    """One line per failed field, without pydantic's prefixes."""
    lines = []
    for err in error.errors():
        message = err["msg"].removeprefix("Value error, ")
        location = ".".join(str(part) for part in err.get("loc", ()))
        lines.append(f"{location}: {message}" if location else message)
    return "\n".join(lines)


def format_money(value) -> str:
    if value is None:
        return "N/A"
    color = "green" if value >= 0 else "red"
    return f"[{color}]{value:,.2f}[/{color}]"
