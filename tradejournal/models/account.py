"""Account data model."""

from pydantic import BaseModel, Field


DEFAULT_ACCOUNT_ID = "default_account"
DEFAULT_ACCOUNT_NAME = "Demo Account"
DEFAULT_INITIAL_BALANCE = 10000.0


class Account(BaseModel):
    """Represents the single trading account a store manages."""

    id: str = Field(default=DEFAULT_ACCOUNT_ID, min_length=1, description="Account ID")
    name: str = Field(default=DEFAULT_ACCOUNT_NAME, description="Account name")
    initial_balance: float = Field(
        default=DEFAULT_INITIAL_BALANCE, description="Starting balance"
    )

    model_config = {"frozen": True}
