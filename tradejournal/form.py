"""Entry form for TradeJournal.

Collects user input, validates it according to the entry kind and turns
it into a JournalEntry with its derived fields filled in.
"""

import base64
import mimetypes
from datetime import date as date_type
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from tradejournal.calc import calculate_rrr
from tradejournal.models import (
    ACCOUNT_TRANSACTION_MARKET,
    EntryKind,
    JournalEntry,
    new_entry_id,
)


class EntryForm(BaseModel):
    """User input for a new or edited journal entry."""

    date: date_type = Field(default_factory=date_type.today, description="Entry date")
    hour: int = Field(..., ge=0, le=23, description="Entry hour (0-23)")
    minute: int = Field(..., ge=0, le=59, description="Entry minute (0-59)")
    kind: EntryKind = Field(..., description="Entry kind")
    market: str = Field(default="", description="Market/asset traded")
    entry_price: Optional[float] = Field(default=None, description="Entry price")
    position_size: Optional[float] = Field(default=None, description="Position size")
    stop_loss_price: Optional[float] = Field(default=None, description="Stop loss price")
    take_profit_price: Optional[float] = Field(default=None, description="Take profit price")
    exit_price: Optional[float] = Field(default=None, description="Actual exit price")
    profit_or_loss: Optional[float] = Field(
        default=None, description="Closed position P&L, or amount for transactions"
    )
    screenshot: Optional[str] = Field(default=None, description="Screenshot data URI or reference")
    notes: Optional[str] = Field(default=None, description="Notes")
    discipline_rating: int = Field(default=3, ge=1, le=5, description="Discipline rating")
    emotional_state: Optional[str] = Field(default=None, description="Emotional state")
    session: Optional[str] = Field(default=None, description="Trading session")
    reason_for_entry: Optional[str] = Field(default=None, description="Reason for entry")
    reason_for_exit: Optional[str] = Field(default=None, description="Reason for exit")

    @field_validator("kind", mode="before")
    @classmethod
    def _parse_kind(cls, value):
        if isinstance(value, str):
            kind = EntryKind.parse(value)
            if kind is None:
                raise ValueError(f"Unknown entry kind: {value}")
            return kind
        return value

    @model_validator(mode="after")
    def _check_kind_fields(self) -> "EntryForm":
        if self.kind.is_trade:
            if self.entry_price is None:
                raise ValueError("Entry Price is required for trades.")
            if self.stop_loss_price is None:
                raise ValueError("Stop Loss is required for trades.")
            if self.take_profit_price is None:
                raise ValueError("Take Profit is required for trades.")
            if self.position_size is None or self.position_size <= 0:
                raise ValueError("Position Size must be a positive number for trades.")
        elif self.kind.is_transaction:
            if self.profit_or_loss is None:
                raise ValueError("Amount is required for withdrawals/deposits.")
            if self.kind == EntryKind.WITHDRAWAL and self.profit_or_loss > 0:
                raise ValueError("Withdrawal amount should be negative or zero.")
            if self.kind == EntryKind.DEPOSIT and self.profit_or_loss < 0:
                raise ValueError("Deposit amount should be positive or zero.")

        if not self.kind.is_transaction and not self.market.strip():
            raise ValueError("Market/Asset is required.")
        return self

    @property
    def time(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"

    @classmethod
    def from_entry(cls, entry: JournalEntry, **changes) -> "EntryForm":
        """Load an existing entry into a form, optionally overriding fields.

        Args:
            entry: Entry being edited.
            **changes: Form fields to replace.

        Returns:
            A validated form.
        """
        hour, _, minute = entry.time.partition(":")
        values = {
            "date": entry.date,
            "hour": int(hour),
            "minute": int(minute or 0),
            "kind": entry.kind,
            "market": entry.market,
            "entry_price": entry.entry_price,
            "position_size": entry.position_size,
            "stop_loss_price": entry.stop_loss_price,
            "take_profit_price": entry.take_profit_price,
            "exit_price": entry.exit_price,
            "profit_or_loss": entry.profit_or_loss,
            "screenshot": entry.screenshot,
            "notes": entry.notes,
            "discipline_rating": entry.discipline_rating,
            "emotional_state": entry.emotional_state,
            "session": entry.session,
            "reason_for_entry": entry.reason_for_entry,
            "reason_for_exit": entry.reason_for_exit,
        }
        values.update(changes)
        return cls(**values)


def build_entry(
    form: EntryForm,
    balance_at_entry: float,
    entry_id: Optional[str] = None,
) -> JournalEntry:
    """Turn a validated form into a journal entry.

    Trade-only fields are dropped for non-trades, transactions get the
    account-transaction market and a neutral discipline rating, and the
    risk/reward ratio is computed from the prices.

    Args:
        form: Validated form input.
        balance_at_entry: Running balance before this entry.
        entry_id: ID to keep when editing; a new one is minted otherwise.

    Returns:
        The new entry.
    """
    is_trade = form.kind.is_trade
    is_transaction = form.kind.is_transaction

    return JournalEntry(
        id=entry_id or new_entry_id(),
        date=form.date,
        time=form.time,
        kind=form.kind,
        market=ACCOUNT_TRANSACTION_MARKET if is_transaction else form.market.strip(),
        entry_price=form.entry_price if is_trade else None,
        stop_loss_price=form.stop_loss_price if is_trade else None,
        take_profit_price=form.take_profit_price if is_trade else None,
        exit_price=form.exit_price if is_trade else None,
        position_size=form.position_size if is_trade else None,
        risk_reward_ratio=calculate_rrr(
            form.kind, form.entry_price, form.stop_loss_price, form.take_profit_price
        ),
        profit_or_loss=form.profit_or_loss,
        balance_at_entry=balance_at_entry,
        screenshot=form.screenshot,
        notes=form.notes,
        discipline_rating=3 if is_transaction else form.discipline_rating,
        emotional_state=form.emotional_state,
        session=form.session,
        reason_for_entry=form.reason_for_entry,
        reason_for_exit=form.reason_for_exit,
    )


def load_screenshot(path: Path) -> str:
    """Read an image file into a data URI.

    Args:
        path: Image file path.

    Returns:
        A ``data:<mime>;base64,...`` string.
    """
    mime_type, _ = mimetypes.guess_type(path.name)
    if mime_type is None or not mime_type.startswith("image/"):
        raise ValueError(f"Not an image file: {path}")
    encoded = base64.b64encode(path.read_bytes()).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"
