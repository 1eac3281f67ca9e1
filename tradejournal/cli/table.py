"""Journal table rendering."""

from typing import Optional

from rich.markup import escape
from rich.table import Table

from tradejournal.models import EntryKind, JournalEntry


KIND_STYLES = {
    EntryKind.LONG: "green",
    EntryKind.SHORT: "red",
    EntryKind.NO_TRADE: "dim",
    EntryKind.WITHDRAWAL: "yellow",
    EntryKind.DEPOSIT: "cyan",
}


def _number(value: Optional[float]) -> str:
    return "N/A" if value is None else f"{value:,.2f}"


def _pnl(value: Optional[float]) -> str:
    if value is None:
        return "N/A"
    color = "green" if value >= 0 else "red"
    sign = "+" if value >= 0 else ""
    return f"[{color}]{sign}{value:,.2f}[/{color}]"


def _screenshot(value: Optional[str]) -> str:
    if not value:
        return "N/A"
    if value.startswith("data:image"):
        return "Embedded"
    return escape(value if len(value) <= 20 else value[:17] + "...")


def render_entries(entries: list[JournalEntry], title: str = "Journal Entries") -> Table:
    """Build a table of journal entries.

    Args:
        entries: Entries to show, in display order.
        title: Table title.

    Returns:
        A rich Table ready to print.
    """
    table = Table(
        title=title,
        show_header=True,
        header_style="bold cyan",
    )

    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Date", style="bold")
    table.add_column("Time")
    table.add_column("Kind", justify="center")
    table.add_column("Market")
    table.add_column("Entry", justify="right")
    table.add_column("SL", justify="right")
    table.add_column("TP", justify="right")
    table.add_column("Exit", justify="right")
    table.add_column("Size", justify="right")
    table.add_column("RRR", justify="right")
    table.add_column("P/L", justify="right")
    table.add_column("Balance", justify="right")
    table.add_column("Rating", justify="center")
    table.add_column("Screenshot")
    table.add_column("Session")

    for entry in entries:
        style = KIND_STYLES[entry.kind]
        table.add_row(
            escape(entry.id[:8]),
            entry.date.strftime("%Y-%m-%d"),
            entry.time,
            f"[{style}]{entry.kind.value}[/{style}]",
            escape(entry.market),
            _number(entry.entry_price),
            _number(entry.stop_loss_price),
            _number(entry.take_profit_price),
            _number(entry.exit_price),
            _number(entry.position_size),
            escape(entry.risk_reward_ratio or "N/A"),
            _pnl(entry.profit_or_loss),
            _number(entry.balance_at_entry),
            str(entry.discipline_rating),
            _screenshot(entry.screenshot),
            escape(entry.session or "N/A"),
        )

    return table
