"""Derived numbers for journal entries.

Risk/reward ratio, estimated points P&L, the running balance chain and
the account summary shown by the CLI.
"""

import math
from typing import Optional

from tradejournal.models import EntryKind, JournalEntry


def _as_number(value) -> Optional[float]:
    """Coerce a price-like value to a finite float, or None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def calculate_rrr(
    kind: Optional[EntryKind],
    entry_price,
    stop_loss_price,
    take_profit_price,
) -> str:
    """Calculate the risk/reward ratio of a planned trade.

    Args:
        kind: Entry kind. Only Long and Short have a ratio.
        entry_price: Entry price.
        stop_loss_price: Stop loss price.
        take_profit_price: Take profit price.

    Returns:
        "N/A" when not a trade or a price is missing, "Invalid" when the
        stop or target sits on the wrong side of the entry, "Invalid Risk"
        when the risk is not positive, otherwise e.g. "2.00:1".
    """
    if kind is None or not kind.is_trade:
        return "N/A"

    entry = _as_number(entry_price)
    stop = _as_number(stop_loss_price)
    target = _as_number(take_profit_price)
    if entry is None or stop is None or target is None:
        return "N/A"

    if kind == EntryKind.LONG:
        if entry <= stop or target <= entry:
            return "Invalid"
        risk = entry - stop
        reward = target - entry
    else:
        if entry >= stop or target >= entry:
            return "Invalid"
        risk = stop - entry
        reward = entry - target

    if risk <= 0:
        return "Invalid Risk"
    return f"{reward / risk:.2f}:1"


def estimate_points_pnl(
    kind: Optional[EntryKind],
    entry_price,
    exit_price,
    position_size,
) -> Optional[float]:
    """Estimate P&L in points times size from entry and exit prices.

    This is a hint only; the currency P&L is entered by the user.

    Returns:
        Estimated value, or None when not a closed trade.
    """
    if kind is None or not kind.is_trade:
        return None

    entry = _as_number(entry_price)
    exit_ = _as_number(exit_price)
    size = _as_number(position_size)
    if entry is None or exit_ is None or size is None:
        return None

    points = exit_ - entry if kind == EntryKind.LONG else entry - exit_
    return points * size


def recompute_balances(
    initial_balance: float, entries: list[JournalEntry]
) -> list[JournalEntry]:
    """Restamp balance_at_entry along the whole entry chain.

    Entries are ordered by (date, time); each entry's balance is the
    initial balance plus the P&L of every entry before it.

    Args:
        initial_balance: Account starting balance.
        entries: Entries in any order.

    Returns:
        New list of entries, oldest first, with balances recomputed.
    """
    running = initial_balance
    restamped = []
    for entry in sorted(entries, key=lambda e: e.sort_key()):
        if entry.balance_at_entry != running:
            entry = entry.model_copy(update={"balance_at_entry": running})
        restamped.append(entry)
        running += entry.profit_or_loss or 0.0
    return restamped


def next_balance(initial_balance: float, entries: list[JournalEntry]) -> float:
    """Balance a newly created entry is stamped with."""
    return initial_balance + sum(e.profit_or_loss or 0.0 for e in entries)


def calculate_summary(initial_balance: float, entries: list[JournalEntry]) -> dict:
    """Calculate account overview metrics.

    Args:
        initial_balance: Account starting balance.
        entries: Journal entries.

    Returns:
        Dictionary with balance and trade metrics.
    """
    trading_pnl = 0.0
    deposits = 0.0
    withdrawals = 0.0
    total_trades = 0
    open_trades = 0
    winning_trades = 0
    losing_trades = 0
    no_trades = 0

    for entry in entries:
        pnl = entry.profit_or_loss
        if entry.kind == EntryKind.DEPOSIT:
            deposits += pnl or 0.0
        elif entry.kind == EntryKind.WITHDRAWAL:
            withdrawals += pnl or 0.0
        elif entry.kind == EntryKind.NO_TRADE:
            no_trades += 1
        else:
            total_trades += 1
            if entry.is_open:
                open_trades += 1
            if pnl is not None:
                trading_pnl += pnl
                if pnl > 0:
                    winning_trades += 1
                elif pnl < 0:
                    losing_trades += 1

    decided = winning_trades + losing_trades
    win_rate = (winning_trades / decided * 100) if decided > 0 else 0.0

    return {
        "initial_balance": initial_balance,
        "current_balance": next_balance(initial_balance, entries),
        "trading_pnl": trading_pnl,
        "deposits": deposits,
        "withdrawals": withdrawals,
        "total_trades": total_trades,
        "open_trades": open_trades,
        "winning_trades": winning_trades,
        "losing_trades": losing_trades,
        "no_trades": no_trades,
        "win_rate": win_rate,
    }
