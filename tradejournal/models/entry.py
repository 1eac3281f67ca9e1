"""JournalEntry data model."""

from datetime import date as date_type
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, Field


ACCOUNT_TRANSACTION_MARKET = "Account Transaction"


class EntryKind(str, Enum):
    """Kind of journal entry (shown as "direction" to the user)."""

    LONG = "Long"
    SHORT = "Short"
    NO_TRADE = "No Trade"
    WITHDRAWAL = "Withdrawal"
    DEPOSIT = "Deposit"

    @property
    def is_trade(self) -> bool:
        return self in (EntryKind.LONG, EntryKind.SHORT)

    @property
    def is_transaction(self) -> bool:
        return self in (EntryKind.WITHDRAWAL, EntryKind.DEPOSIT)

    @classmethod
    def parse(cls, value: str) -> Optional["EntryKind"]:
        """Look up a kind by its tag, tolerating spacing and case.

        Args:
            value: Raw tag such as "Long", "No Trade" or "NoTrade".

        Returns:
            The matching kind, or None if the tag is not recognized.
        """
        key = value.replace(" ", "").replace("_", "").lower()
        for kind in cls:
            if kind.value.replace(" ", "").lower() == key:
                return kind
        return None


def new_entry_id() -> str:
    """Mint an opaque entry identifier."""
    return uuid4().hex


class JournalEntry(BaseModel):
    """Represents one row of the trading journal."""

    id: str = Field(default_factory=new_entry_id, min_length=1, description="Entry ID")
    date: date_type = Field(..., description="Entry date")
    time: str = Field(
        ..., pattern=r"^([01][0-9]|2[0-3]):[0-5][0-9]$", description="Entry time (HH:MM, 24-hour)"
    )
    kind: EntryKind = Field(..., description="Entry kind")
    market: str = Field(..., min_length=1, description="Instrument or transaction sentinel")
    entry_price: Optional[float] = Field(default=None, description="Entry price")
    stop_loss_price: Optional[float] = Field(default=None, description="Stop loss price")
    take_profit_price: Optional[float] = Field(default=None, description="Take profit price")
    exit_price: Optional[float] = Field(
        default=None, description="Actual exit price (None while the position is open)"
    )
    position_size: Optional[float] = Field(default=None, description="Position size")
    risk_reward_ratio: Optional[str] = Field(
        default=None, description="Risk/reward ratio, e.g. '2.50:1'"
    )
    profit_or_loss: Optional[float] = Field(
        default=None,
        description="Realized P&L for trades, signed cash amount for transactions",
    )
    balance_at_entry: float = Field(
        ..., description="Account balance immediately before this entry"
    )
    screenshot: Optional[str] = Field(
        default=None, description="Screenshot data URI or textual reference"
    )
    notes: Optional[str] = Field(default=None, description="User notes")
    discipline_rating: int = Field(default=3, ge=1, le=5, description="Discipline rating")
    emotional_state: Optional[str] = Field(default=None, description="Emotional state")
    session: Optional[str] = Field(default=None, description="Trading session")
    reason_for_entry: Optional[str] = Field(
        default=None, description="Reason for entry (or for the transaction)"
    )
    reason_for_exit: Optional[str] = Field(default=None, description="Reason for exit")

    model_config = {"frozen": True}

    @property
    def is_open(self) -> bool:
        """A trade without an exit price is still open."""
        return self.kind.is_trade and self.exit_price is None

    def sort_key(self) -> tuple[date_type, str]:
        return (self.date, self.time)
