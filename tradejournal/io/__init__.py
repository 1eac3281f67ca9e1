"""Interchange formats for TradeJournal."""

from tradejournal.io.csv_codec import (
    ImportResult,
    JournalImportError,
    parse_journal,
    serialize_journal,
)

__all__ = [
    "ImportResult",
    "JournalImportError",
    "parse_journal",
    "serialize_journal",
]
