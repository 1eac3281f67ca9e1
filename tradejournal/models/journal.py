"""JournalData data model."""

from pydantic import BaseModel, Field

from tradejournal.models.entry import JournalEntry


class JournalData(BaseModel):
    """Represents a whole account: its settings plus every entry, oldest first."""

    account_name: str = Field(..., description="Account name")
    initial_balance: float = Field(..., description="Starting balance")
    entries: list[JournalEntry] = Field(default_factory=list, description="Journal entries")

    model_config = {"frozen": True}
