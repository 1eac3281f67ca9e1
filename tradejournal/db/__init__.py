"""Persistence layer for TradeJournal."""
