"""Tests for entry form validation and entry building.

**Feature: trading-journal**
"""

from datetime import date

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st
from pydantic import ValidationError

from tradejournal.form import EntryForm, build_entry, load_screenshot
from tradejournal.models import ACCOUNT_TRANSACTION_MARKET, EntryKind, JournalEntry


def trade_form(**overrides) -> EntryForm:
    values = dict(
        date=date(2024, 6, 3),
        hour=9,
        minute=5,
        kind="Long",
        market="NAS100",
        entry_price=100.0,
        stop_loss_price=90.0,
        take_profit_price=120.0,
        position_size=1.0,
    )
    values.update(overrides)
    return EntryForm(**values)


def error_text(exc_info) -> str:
    return str(exc_info.value)


class TestTradeValidation:
    """
    **Feature: trading-journal, Trade Form Validation**

    Long and Short entries need prices, a positive size and a market.
    """

    @pytest.mark.parametrize(
        "field,message",
        [
            ("entry_price", "Entry Price is required for trades."),
            ("stop_loss_price", "Stop Loss is required for trades."),
            ("take_profit_price", "Take Profit is required for trades."),
            ("position_size", "Position Size must be a positive number for trades."),
        ],
    )
    def test_missing_price(self, field, message):
        with pytest.raises(ValidationError) as exc_info:
            trade_form(**{field: None})
        assert message in error_text(exc_info)

    @pytest.mark.parametrize("size", [0, -1.5])
    def test_size_must_be_positive(self, size):
        with pytest.raises(ValidationError) as exc_info:
            trade_form(position_size=size)
        assert "Position Size must be a positive number" in error_text(exc_info)

    @pytest.mark.parametrize("market", ["", "   "])
    def test_market_required(self, market):
        with pytest.raises(ValidationError) as exc_info:
            trade_form(market=market)
        assert "Market/Asset is required." in error_text(exc_info)

    def test_no_trade_needs_only_market(self):
        form = EntryForm(hour=10, minute=0, kind="NoTrade", market="EURUSD")
        assert form.kind == EntryKind.NO_TRADE

        with pytest.raises(ValidationError) as exc_info:
            EntryForm(hour=10, minute=0, kind="No Trade")
        assert "Market/Asset is required." in error_text(exc_info)

    @pytest.mark.parametrize("hour,minute", [(24, 0), (-1, 0), (12, 60)])
    def test_time_range(self, hour, minute):
        with pytest.raises(ValidationError):
            trade_form(hour=hour, minute=minute)

    @pytest.mark.parametrize("rating", [0, 6])
    def test_rating_range(self, rating):
        with pytest.raises(ValidationError):
            trade_form(discipline_rating=rating)

    def test_unknown_kind(self):
        with pytest.raises(ValidationError):
            trade_form(kind="Sideways")

    def test_time_is_zero_padded(self):
        assert trade_form(hour=7, minute=3).time == "07:03"


class TestTransactionValidation:
    """
    **Feature: trading-journal, Transaction Form Validation**

    Withdrawals and deposits need a correctly signed amount and no market.
    """

    def test_amount_required(self):
        with pytest.raises(ValidationError) as exc_info:
            EntryForm(hour=8, minute=0, kind="Deposit")
        assert "Amount is required for withdrawals/deposits." in error_text(exc_info)

    def test_withdrawal_must_not_be_positive(self):
        with pytest.raises(ValidationError) as exc_info:
            EntryForm(hour=8, minute=0, kind="Withdrawal", profit_or_loss=100.0)
        assert "Withdrawal amount should be negative or zero." in error_text(exc_info)

    def test_deposit_must_not_be_negative(self):
        with pytest.raises(ValidationError) as exc_info:
            EntryForm(hour=8, minute=0, kind="Deposit", profit_or_loss=-100.0)
        assert "Deposit amount should be positive or zero." in error_text(exc_info)

    @pytest.mark.parametrize("kind,amount", [("Withdrawal", 0.0), ("Withdrawal", -250.0), ("Deposit", 0.0), ("Deposit", 500.0)])
    def test_valid_amounts(self, kind, amount):
        form = EntryForm(hour=8, minute=0, kind=kind, profit_or_loss=amount)
        assert form.profit_or_loss == amount


class TestBuildEntry:
    """
    **Feature: trading-journal, Entry Building**

    *For any* valid form, the built entry carries the derived ratio and the
    fields allowed for its kind.
    """

    def test_trade_entry(self):
        entry = build_entry(trade_form(exit_price=118.0, profit_or_loss=36.0, session="NY"), 10000.0)

        assert entry.kind == EntryKind.LONG
        assert entry.time == "09:05"
        assert entry.risk_reward_ratio == "2.00:1"
        assert entry.balance_at_entry == 10000.0
        assert entry.exit_price == 118.0
        assert entry.session == "NY"
        assert entry.id

    def test_market_is_trimmed(self):
        assert build_entry(trade_form(market="  EURUSD "), 0.0).market == "EURUSD"

    def test_transaction_entry(self):
        form = EntryForm(
            hour=8,
            minute=30,
            kind="Deposit",
            market="ignored",
            entry_price=5.0,
            profit_or_loss=500.0,
            discipline_rating=5,
            reason_for_entry="Top up",
        )

        entry = build_entry(form, 1000.0)

        assert entry.market == ACCOUNT_TRANSACTION_MARKET
        assert entry.entry_price is None
        assert entry.position_size is None
        assert entry.risk_reward_ratio == "N/A"
        assert entry.discipline_rating == 3
        assert entry.profit_or_loss == 500.0
        assert entry.reason_for_entry == "Top up"

    def test_no_trade_drops_prices(self):
        form = EntryForm(hour=12, minute=0, kind="No Trade", market="GOLD", entry_price=1900.0, discipline_rating=5)

        entry = build_entry(form, 0.0)

        assert entry.entry_price is None
        assert entry.risk_reward_ratio == "N/A"
        assert entry.discipline_rating == 5
        assert entry.market == "GOLD"

    def test_entry_id_is_kept(self):
        assert build_entry(trade_form(), 0.0, entry_id="fixed").id == "fixed"

    @given(
        entry=st.floats(min_value=1, max_value=1e6),
        risk=st.floats(min_value=0.01, max_value=1e3),
        reward=st.floats(min_value=0.01, max_value=1e3),
    )
    @settings(max_examples=50)
    def test_short_ratio_is_formatted(self, entry, risk, reward):
        form = trade_form(
            kind="Short",
            entry_price=entry,
            stop_loss_price=entry + risk,
            take_profit_price=entry - reward,
        )

        ratio = build_entry(form, 0.0).risk_reward_ratio

        assert ratio == "Invalid" or ratio.endswith(":1")


class TestFromEntry:
    """
    **Feature: trading-journal, Edit Form Loading**
    """

    def test_loads_entry_and_applies_changes(self):
        original = build_entry(trade_form(notes="first"), 10000.0)

        form = EntryForm.from_entry(original, notes="second", exit_price=110.0)

        assert form.hour == 9
        assert form.minute == 5
        assert form.notes == "second"
        assert form.exit_price == 110.0
        assert form.market == "NAS100"

    def test_round_trips_to_same_entry(self):
        original = build_entry(trade_form(emotional_state="Calm"), 10000.0)

        rebuilt = build_entry(EntryForm.from_entry(original), original.balance_at_entry, entry_id=original.id)

        assert rebuilt == original

    def test_changes_are_validated(self):
        original = build_entry(trade_form(), 0.0)
        with pytest.raises(ValidationError):
            EntryForm.from_entry(original, stop_loss_price=None)

    @pytest.mark.parametrize("time", ["9:30", "09:30:00", "24:00", "abc"])
    def test_entries_only_hold_clock_times(self, time):
        with pytest.raises(ValidationError):
            JournalEntry(date=date(2024, 1, 1), time=time, kind=EntryKind.NO_TRADE, market="DAX", balance_at_entry=0.0)

    def test_kind_change_to_transaction(self):
        original = JournalEntry(
            date=date(2024, 1, 1), time="10:00", kind=EntryKind.NO_TRADE, market="DAX", balance_at_entry=0.0
        )

        form = EntryForm.from_entry(original, kind="Withdrawal", profit_or_loss=-50.0)

        assert build_entry(form, 0.0).market == ACCOUNT_TRANSACTION_MARKET


class TestLoadScreenshot:
    """
    **Feature: trading-journal, Screenshot Embedding**
    """

    def test_png_becomes_data_uri(self, tmp_path):
        image = tmp_path / "chart.png"
        image.write_bytes(b"\x89PNG\r\n\x1a\n")

        assert load_screenshot(image) == "data:image/png;base64,iVBORw0KGgo="

    def test_non_image_is_rejected(self, tmp_path):
        text_file = tmp_path / "notes.txt"
        text_file.write_text("hello")

        with pytest.raises(ValueError):
            load_screenshot(text_file)
