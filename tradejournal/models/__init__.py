"""Data models for TradeJournal."""

from tradejournal.models.account import Account
from tradejournal.models.entry import (
    ACCOUNT_TRANSACTION_MARKET,
    EntryKind,
    JournalEntry,
    new_entry_id,
)
from tradejournal.models.journal import JournalData

__all__ = [
    "ACCOUNT_TRANSACTION_MARKET",
    "Account",
    "EntryKind",
    "JournalData",
    "JournalEntry",
    "new_entry_id",
]
