"""Pydantic domain models for duo-ledger."""

import uuid
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

# ============================================================================
# Ledger Models
# ============================================================================


class EntryKind(str, Enum):
    """What a ledger entry represents."""

    ORDINARY_EXPENSE = "ordinary_expense"
    DEBT_SETTLEMENT = "debt_settlement"

    @classmethod
    def coerce(cls, value: Any) -> "EntryKind":
        """
        Map a raw stored value to a kind.

        Only explicit settlements (including the legacy "debt_payment" tag)
        are settlements; anything else is an ordinary expense.
        """
        if isinstance(value, EntryKind):
            return value
        if isinstance(value, str) and value.strip().lower() in (
            "debt_settlement",
            "debt_payment",
        ):
            return cls.DEBT_SETTLEMENT
        return cls.ORDINARY_EXPENSE


class Member(BaseModel):
    """A ledger participant."""

    id: str
    username: str | None = None
    first_name: str | None = None

    @property
    def display_name(self) -> str:
        """Name used in replies: first name, then @username, then a fallback."""
        if self.first_name:
            return self.first_name
        if self.username:
            return f"@{self.username}"
        return "User"


class LedgerEntry(BaseModel):
    """An immutable fact about money moving within the group."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    amount_minor: int = Field(ge=0)  # cents
    payer_id: str
    kind: EntryKind = EntryKind.ORDINARY_EXPENSE
    category: str = "other"
    description: str = ""
    currency: str = "ARS"
    occurred_at: datetime = Field(default_factory=datetime.now)
    created_at: datetime = Field(default_factory=datetime.now)

    @field_validator("kind", mode="before")
    @classmethod
    def _coerce_kind(cls, value: Any) -> EntryKind:
        return EntryKind.coerce(value)

    @property
    def is_settlement(self) -> bool:
        return self.kind is EntryKind.DEBT_SETTLEMENT


# ============================================================================
# Balance Models
# ============================================================================


class BalanceResult(BaseModel):
    """
    A 50/50 balance between two parties, derived fresh per query.

    Sign convention for net_balance:
    - positive: party_b owes party_a
    - negative: party_a owes party_b

    share and net_balance are exact Decimals in minor units; an odd total
    yields a half-unit share that is only rounded when formatted.
    """

    party_a: Member
    party_b: Member
    paid_a: int
    paid_b: int
    settlement_a_to_b: int = 0
    settlement_b_to_a: int = 0
    total: int
    share: Decimal
    net_balance: Decimal
    overflow_warning: str | None = None

    @property
    def is_even(self) -> bool:
        """True when less than one minor unit separates the parties."""
        return abs(self.net_balance) < 1

    @property
    def debtor(self) -> Member | None:
        if self.is_even:
            return None
        return self.party_b if self.net_balance > 0 else self.party_a

    @property
    def creditor(self) -> Member | None:
        if self.is_even:
            return None
        return self.party_a if self.net_balance > 0 else self.party_b

    @property
    def amount_owed(self) -> Decimal:
        return abs(self.net_balance)


# ============================================================================
# Reporting Models
# ============================================================================


class MonthTotal(BaseModel):
    """Spending total for one month of a year summary."""

    year: int
    month: int
    name: str
    total_minor: int


class ExpenseCommand(BaseModel):
    """Arguments parsed from an expense or payment chat command."""

    amount: str
    category: str | None = None
    description: str


class ChatMessage(BaseModel):
    """An incoming chat message, independent of any transport."""

    user_id: str
    text: str
    username: str | None = None
    first_name: str | None = None
