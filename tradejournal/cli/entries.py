"""Entry commands for TradeJournal CLI.

Handles adding, editing, listing and clearing journal entries.
"""

from datetime import date, datetime
from pathlib import Path
from typing import Optional

import click
from pydantic import ValidationError
from rich.markup import escape
from rich.panel import Panel

from tradejournal.cli.common import (
    console,
    format_money,
    format_validation_error,
    get_service,
    print_error,
)

KIND_CHOICES = ["Long", "Short", "No Trade", "NoTrade", "Withdrawal", "Deposit"]


def _parse_time(value: str) -> tuple[int, int]:
    try:
        parsed = datetime.strptime(value, "%H:%M")
    except ValueError:
        raise click.BadParameter(f"Invalid time '{value}'. Use HH:MM (24-hour).")
    return parsed.hour, parsed.minute


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise click.BadParameter(f"Invalid date '{value}'. Use YYYY-MM-DD.")


def _screenshot_value(value: str) -> str:
    """Embed an image file as a data URI; anything else is kept as a reference."""
    from tradejournal.form import load_screenshot

    path = Path(value).expanduser()
    if path.is_file():
        try:
            return load_screenshot(path)
        except ValueError as e:
            raise click.BadParameter(str(e))
    return value


def entry_options(func):
    """Options shared by the add and edit commands."""
    options = [
        click.option("--date", "entry_date", type=str, default=None, help="Entry date (YYYY-MM-DD)."),
        click.option("--time", "entry_time", type=str, default=None, help="Entry time (HH:MM, 24-hour)."),
        click.option("--market", type=str, default=None, help="Market/asset (e.g. NAS100, EURUSD)."),
        click.option("--entry", "entry_price", type=float, default=None, help="Entry price."),
        click.option("--sl", "stop_loss_price", type=float, default=None, help="Stop loss price."),
        click.option("--tp", "take_profit_price", type=float, default=None, help="Take profit price."),
        click.option("--exit", "exit_price", type=float, default=None, help="Actual exit price."),
        click.option("--size", "position_size", type=float, default=None, help="Position size."),
        click.option(
            "--pnl", "profit_or_loss", type=float, default=None,
            help="Closed position P/L, or the amount for a withdrawal/deposit.",
        ),
        click.option("--screenshot", type=str, default=None, help="Image file to embed, or a reference."),
        click.option("--notes", type=str, default=None, help="Notes."),
        click.option("--rating", "discipline_rating", type=click.IntRange(1, 5), default=None, help="Discipline rating (1-5)."),
        click.option("--emotion", "emotional_state", type=str, default=None, help="Emotional state."),
        click.option("--session", type=str, default=None, help="Trading session (e.g. London, NY)."),
        click.option("--reason-entry", "reason_for_entry", type=str, default=None, help="Reason for entry or transaction."),
        click.option("--reason-exit", "reason_for_exit", type=str, default=None, help="Reason for exit."),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _collect_fields(entry_date, entry_time, screenshot, **fields) -> dict:
    """Turn CLI options into EntryForm fields, dropping the ones not given."""
    values = {key: value for key, value in fields.items() if value is not None}
    if entry_date is not None:
        values["date"] = _parse_date(entry_date)
    if entry_time is not None:
        values["hour"], values["minute"] = _parse_time(entry_time)
    if screenshot is not None:
        values["screenshot"] = _screenshot_value(screenshot)
    return values


def _entry_summary(entry) -> str:
    lines = [
        f"[bold]{entry.kind.value}[/bold] {escape(entry.market)}",
        f"Date:    {entry.date.isoformat()} {entry.time}",
        f"ID:      [dim]{escape(entry.id)}[/dim]",
    ]
    if entry.kind.is_trade:
        lines.append(f"RRR:     {escape(entry.risk_reward_ratio or 'N/A')}")
    lines.append(f"P/L:     {format_money(entry.profit_or_loss)}")
    lines.append(f"Balance: {entry.balance_at_entry:,.2f}")
    return "\n".join(lines)


@click.command()
@click.option(
    "--kind",
    type=click.Choice(KIND_CHOICES, case_sensitive=False),
    required=True,
    help="Entry kind (direction).",
)
@entry_options
@click.pass_context
def add(ctx: click.Context, kind: str, entry_date, entry_time, screenshot, **fields) -> None:
    """Add a journal entry.

    The balance at entry and the risk/reward ratio are filled in
    automatically.

    \b
    Examples:
      tradejournal add --kind Long --market NAS100 --entry 100 --sl 90 --tp 120 --size 1
      tradejournal add --kind Deposit --pnl 500
      tradejournal add --kind "No Trade" --market EURUSD --notes "Choppy, stayed out"
    """
    from tradejournal.calc import estimate_points_pnl
    from tradejournal.form import EntryForm

    values = _collect_fields(entry_date, entry_time, screenshot, **fields)
    values["kind"] = kind
    if "hour" not in values:
        now = datetime.now()
        values["hour"], values["minute"] = now.hour, now.minute

    try:
        form = EntryForm(**values)
    except ValidationError as e:
        print_error(format_validation_error(e), title="Invalid Entry")
        raise SystemExit(1)

    service = get_service(ctx)
    entry = service.add_entry(form)

    text = _entry_summary(entry)
    points = estimate_points_pnl(entry.kind, entry.entry_price, entry.exit_price, entry.position_size)
    if points is not None:
        text += f"\n[dim]Points value: {points:.2f}[/dim]"

    console.print(Panel(
        text,
        title="[bold green]Entry Added[/bold green]",
        border_style="green",
    ))


def _resolve_entry_id(service, prefix: str) -> Optional[str]:
    entry = service.get_entry(prefix)
    if entry is not None:
        return entry.id
    matches = [e.id for e in service.get_entries() if e.id.startswith(prefix)]
    if len(matches) == 1:
        return matches[0]
    return None


@click.command()
@click.argument("entry_id")
@click.option(
    "--kind",
    type=click.Choice(KIND_CHOICES, case_sensitive=False),
    default=None,
    help="Entry kind (direction).",
)
@entry_options
@click.pass_context
def edit(ctx: click.Context, entry_id: str, kind: Optional[str], entry_date, entry_time, screenshot, **fields) -> None:
    """Edit a journal entry.

    ENTRY_ID is the entry's ID or a unique prefix of it. Only the given
    options change; the balances of later entries are recomputed.

    \b
    Examples:
      tradejournal edit 3f2a9c1b --pnl 250
      tradejournal edit 3f2a9c1b --exit 118 --reason-exit "Target hit"
    """
    from tradejournal.form import EntryForm

    service = get_service(ctx)
    resolved = _resolve_entry_id(service, entry_id)
    if resolved is None:
        print_error(f"No unique entry matches '{entry_id}'.", title="Not Found")
        raise SystemExit(1)

    values = _collect_fields(entry_date, entry_time, screenshot, **fields)
    if kind is not None:
        values["kind"] = kind

    try:
        form = EntryForm.from_entry(service.get_entry(resolved), **values)
    except ValidationError as e:
        print_error(format_validation_error(e), title="Invalid Entry")
        raise SystemExit(1)

    try:
        entry = service.edit_entry(resolved, form)
    except KeyError:
        print_error(f"Entry '{resolved}' no longer exists.", title="Not Found")
        raise SystemExit(1)

    console.print(Panel(
        _entry_summary(entry),
        title="[bold green]Entry Updated[/bold green]",
        border_style="green",
    ))


@click.command(name="list")
@click.option(
    "--limit",
    type=click.IntRange(min=1),
    default=None,
    help="Show only the most recent N entries.",
)
@click.pass_context
def list_entries(ctx: click.Context, limit: Optional[int]) -> None:
    """Display journal entries.

    \b
    Examples:
      tradejournal list            # All entries
      tradejournal list --limit 10 # Last 10 entries
    """
    from tradejournal.cli.table import render_entries

    service = get_service(ctx)
    data = service.get_data()
    entries = data.entries

    if not entries:
        console.print(Panel(
            "[dim]No journal entries yet. Add one with 'tradejournal add'.[/dim]",
            title=f"[bold]{escape(data.account_name)}[/bold]",
            border_style="dim",
        ))
        return

    if limit is not None:
        entries = entries[-limit:]

    console.print(render_entries(entries, title=f"{escape(data.account_name)} - Journal Entries"))
    console.print(f"\n[bold]Entries:[/bold] {len(data.entries)}")
    console.print(f"[bold]Current Balance:[/bold] {format_money(service.current_balance())}")


@click.command()
@click.option("--yes", is_flag=True, default=False, help="Do not ask for confirmation.")
@click.pass_context
def clear(ctx: click.Context, yes: bool) -> None:
    """Delete all journal entries of the account.

    \b
    Examples:
      tradejournal clear
      tradejournal clear --yes
    """
    if not yes:
        click.confirm("Delete all journal entries?", abort=True)

    deleted = get_service(ctx).clear()
    console.print(f"[green]Deleted {deleted} entries.[/green]")
