"""Account commands for TradeJournal CLI.

Handles configuration setup, account settings and the account overview.
"""

from typing import Optional

import click
from rich.markup import escape
from rich.panel import Panel

from tradejournal.cli.common import console, format_money, get_service


@click.command()
@click.option("--force", is_flag=True, default=False, help="Overwrite an existing config file.")
@click.pass_context
def init(ctx: click.Context, force: bool) -> None:
    """Create a template configuration file.

    \b
    Examples:
      tradejournal init
    """
    from tradejournal.config import create_template_config, get_config_path

    obj = ctx.ensure_object(dict)
    config_path = obj.get("config_path") or get_config_path()

    if config_path.exists() and not force:
        console.print(f"[yellow]Config already exists:[/yellow] {escape(str(config_path))}")
        return

    path = create_template_config(config_path)
    console.print(Panel(
        f"Config written to [cyan]{escape(str(path))}[/cyan]\n\n"
        "Edit it to change the database location or the account ID.",
        title="[bold green]Initialized[/bold green]",
        border_style="green",
    ))


@click.command()
@click.option("--name", type=str, default=None, help="Rename the account.")
@click.option(
    "--initial-balance",
    type=float,
    default=None,
    help="Change the initial balance (recomputes all entry balances).",
)
@click.pass_context
def account(ctx: click.Context, name: Optional[str], initial_balance: Optional[float]) -> None:
    """Show or update account settings.

    \b
    Examples:
      tradejournal account
      tradejournal account --name "Prop Challenge" --initial-balance 50000
    """
    service = get_service(ctx)

    if name is not None:
        service.rename_account(name)
    if initial_balance is not None:
        service.set_initial_balance(initial_balance)

    acct = service.get_account()
    console.print(Panel(
        f"[bold]{escape(acct.name)}[/bold]\n\n"
        f"Account ID:      [dim]{escape(acct.id)}[/dim]\n"
        f"Initial Balance: {acct.initial_balance:,.2f}\n"
        f"Current Balance: {format_money(service.current_balance())}",
        title="[bold cyan]Account[/bold cyan]",
        border_style="cyan",
    ))


@click.command()
@click.pass_context
def summary(ctx: click.Context) -> None:
    """Display the account overview.

    Shows balances, deposits and withdrawals, and trade statistics.

    \b
    Examples:
      tradejournal summary
    """
    service = get_service(ctx)
    acct = service.get_account()
    stats = service.summary()

    text = (
        f"[bold]{escape(acct.name)}[/bold]\n\n"
        f"Initial Balance: {stats['initial_balance']:,.2f}\n"
        f"Trading P/L:     {format_money(stats['trading_pnl'])}\n"
        f"Deposits:        {format_money(stats['deposits'])}\n"
        f"Withdrawals:     {format_money(stats['withdrawals'])}\n"
        f"{'─' * 30}\n"
        f"[bold]Current Balance: {format_money(stats['current_balance'])}[/bold]\n\n"
        f"[dim]Trades: {stats['total_trades']} | "
        f"Open: {stats['open_trades']} | "
        f"Wins: {stats['winning_trades']} | "
        f"Losses: {stats['losing_trades']} | "
        f"Win Rate: {stats['win_rate']:.1f}%[/dim]\n"
        f"[dim]No-trade analyses: {stats['no_trades']}[/dim]"
    )

    console.print(Panel(
        text,
        title="[bold cyan]Account Overview[/bold cyan]",
        border_style="cyan",
    ))
