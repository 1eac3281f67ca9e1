"""Tests for the journal service.

**Feature: trading-journal**
"""

import tempfile
from datetime import date
from pathlib import Path

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from tradejournal.db.store import JournalStore
from tradejournal.form import EntryForm
from tradejournal.io.csv_codec import JournalImportError
from tradejournal.journal import JournalService
from tradejournal.models import EntryKind


@pytest.fixture
def service():
    """Journal service over a temporary database."""
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JournalStore(Path(tmpdir) / "journal.db")
        yield JournalService(store, "test_account", default_name="Test", default_initial_balance=1000.0)


def trade(day: int, hour: int = 9, pnl=None, **extra) -> EntryForm:
    values = dict(
        date=date(2024, 7, day),
        hour=hour,
        minute=0,
        kind="Long",
        market="NAS100",
        entry_price=100.0,
        stop_loss_price=95.0,
        take_profit_price=110.0,
        position_size=1.0,
        profit_or_loss=pnl,
    )
    values.update(extra)
    return EntryForm(**values)


def deposit(day: int, amount: float, hour: int = 8) -> EntryForm:
    return EntryForm(date=date(2024, 7, day), hour=hour, minute=0, kind="Deposit", profit_or_loss=amount)


def balances(service: JournalService) -> list[float]:
    return [entry.balance_at_entry for entry in service.get_entries()]


class TestAccount:
    """
    **Feature: trading-journal, Account Settings**
    """

    def test_default_account_is_created(self, service: JournalService):
        account = service.get_account()

        assert account.id == "test_account"
        assert account.name == "Test"
        assert account.initial_balance == 1000.0

    def test_rename(self, service: JournalService):
        service.rename_account("Funded")
        assert service.get_account().name == "Funded"

    def test_initial_balance_change_restamps(self, service: JournalService):
        service.add_entry(trade(1, pnl=100.0))
        service.add_entry(trade(2, pnl=-50.0))

        service.set_initial_balance(5000.0)

        assert balances(service) == [5000.0, 5100.0]
        assert service.current_balance() == 5050.0


class TestBalanceStamping:
    """
    **Feature: trading-journal, Balance Stamping**

    *For any* sequence of additions, each entry's balance equals the
    initial balance plus the P/L of every earlier entry.
    """

    def test_add_stamps_running_balance(self, service: JournalService):
        first = service.add_entry(trade(1, pnl=200.0))
        second = service.add_entry(deposit(2, 500.0))
        third = service.add_entry(trade(3))

        assert first.balance_at_entry == 1000.0
        assert second.balance_at_entry == 1200.0
        assert second.market == "Account Transaction"
        assert third.balance_at_entry == 1700.0
        assert third.risk_reward_ratio == "2.00:1"

    def test_backdated_add_restamps_later_entries(self, service: JournalService):
        service.add_entry(trade(10, pnl=100.0))
        service.add_entry(trade(12, pnl=100.0))

        backdated = service.add_entry(deposit(5, 1000.0))

        assert backdated.balance_at_entry == 1000.0
        assert balances(service) == [1000.0, 2000.0, 2100.0]

    @given(amounts=st.lists(st.integers(min_value=-500, max_value=500), min_size=1, max_size=8))
    @settings(max_examples=20, deadline=None)
    def test_chain_invariant(self, amounts: list[int]):
        with tempfile.TemporaryDirectory() as tmpdir:
            service = JournalService(JournalStore(Path(tmpdir) / "j.db"), "acct", default_initial_balance=0.0)

            for hour, amount in enumerate(amounts):
                service.add_entry(trade(1, hour=hour, pnl=float(amount)))

            running = 0.0
            for entry, amount in zip(service.get_entries(), amounts):
                assert entry.balance_at_entry == running
                running += amount
            assert service.current_balance() == running


class TestEditEntry:
    """
    **Feature: trading-journal, Entry Editing**

    Editing keeps the entry's ID and recomputes the balances that follow it.
    """

    def test_edit_updates_later_balances(self, service: JournalService):
        first = service.add_entry(trade(1, pnl=100.0))
        service.add_entry(trade(2, pnl=50.0))
        service.add_entry(trade(3))

        edited = service.edit_entry(first.id, EntryForm.from_entry(first, profit_or_loss=300.0))

        assert edited.id == first.id
        assert edited.profit_or_loss == 300.0
        assert balances(service) == [1000.0, 1300.0, 1350.0]

    def test_edit_moving_entry_in_time(self, service: JournalService):
        early = service.add_entry(deposit(1, 400.0))
        service.add_entry(trade(2, pnl=-100.0))

        service.edit_entry(early.id, EntryForm.from_entry(early, date=date(2024, 7, 3)))

        entries = service.get_entries()
        assert [e.kind for e in entries] == [EntryKind.LONG, EntryKind.DEPOSIT]
        assert balances(service) == [1000.0, 900.0]

    def test_edit_recomputes_ratio(self, service: JournalService):
        entry = service.add_entry(trade(1))

        edited = service.edit_entry(entry.id, EntryForm.from_entry(entry, take_profit_price=115.0))

        assert edited.risk_reward_ratio == "3.00:1"

    def test_edit_missing_entry(self, service: JournalService):
        with pytest.raises(KeyError):
            service.edit_entry("missing", trade(1))

    def test_clear(self, service: JournalService):
        service.add_entry(trade(1, pnl=10.0))
        service.add_entry(trade(2, pnl=10.0))

        assert service.clear() == 2
        assert service.get_entries() == []
        assert service.current_balance() == 1000.0


class TestSummary:
    """
    **Feature: trading-journal, Account Overview**
    """

    def test_summary(self, service: JournalService):
        service.add_entry(trade(1, pnl=200.0, exit_price=104.0))
        service.add_entry(trade(2, pnl=-50.0, exit_price=97.5))
        service.add_entry(deposit(3, 300.0))
        service.add_entry(EntryForm(date=date(2024, 7, 4), hour=9, minute=0, kind="Withdrawal", profit_or_loss=-100.0))

        stats = service.summary()

        assert stats["trading_pnl"] == 150.0
        assert stats["deposits"] == 300.0
        assert stats["withdrawals"] == -100.0
        assert stats["current_balance"] == 1350.0
        assert stats["total_trades"] == 2
        assert stats["win_rate"] == 50.0


class TestCsvTransfer:
    """
    **Feature: trading-journal, CSV Import and Export**

    Importing an export reproduces the account; an import replaces the
    account's settings and entries.
    """

    def test_export_import_round_trip(self, service: JournalService):
        service.rename_account("Prop, Phase 1")
        service.add_entry(trade(1, pnl=120.0, notes='Scaled "out", early'))
        service.add_entry(deposit(2, 250.0))
        before = service.get_data()

        text = service.export_csv()
        service.clear()
        service.set_initial_balance(1.0)
        result = service.import_csv(text)

        assert result.warnings == []
        assert service.get_data() == before
        assert service.get_entries()[1].risk_reward_ratio == "N/A"

    def test_import_replaces_entries(self, service: JournalService):
        service.add_entry(trade(1, pnl=5.0))
        csv_text = (
            "accountName,initialBalance,id,date,time,kind,market,balanceAtEntry,profitOrLoss,disciplineRating\n"
            "Imported,2500,a1,2024-01-02,09:00,Long,NAS100,2500,100,4\n"
            "Imported,2500,a2,2024-01-03,09:00,Deposit,Account Transaction,2600,400,3\n"
        )

        result = service.import_csv(csv_text)

        account = service.get_account()
        assert account.name == "Imported"
        assert account.initial_balance == 2500.0
        assert [e.id for e in service.get_entries()] == ["a1", "a2"]
        assert len(result.data.entries) == 2

    def test_duplicate_ids_get_new_ids(self, service: JournalService):
        csv_text = (
            "id,date,time,kind,market,balanceAtEntry,disciplineRating\n"
            "same,2024-01-02,09:00,Long,NAS100,0,3\n"
            "same,2024-01-02,10:00,Short,NAS100,0,3\n"
        )

        result = service.import_csv(csv_text)

        ids = [e.id for e in service.get_entries()]
        assert len(set(ids)) == 2
        assert "same" in ids
        assert any("Duplicate entry id" in warning for warning in result.warnings)

    def test_failed_import_keeps_existing_data(self, service: JournalService):
        service.add_entry(trade(1, pnl=5.0))

        with pytest.raises(JournalImportError):
            service.import_csv("")

        assert len(service.get_entries()) == 1
