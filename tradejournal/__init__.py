"""TradeJournal - a single-user trading journal with CSV import/export."""

__version__ = "0.1.0"
