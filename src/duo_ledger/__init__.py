"""duo-ledger - Shared expense ledger with a 50/50 balance for two people."""

__version__ = "0.1.0"

from .balance import attribute_payer, classify_entry, compute_balance
from .config import Settings, load_settings
from .db import Database
from .exceptions import InvalidAmountError
from .models import BalanceResult, EntryKind, LedgerEntry, Member
from .money import format_amount, parse_amount
from .service import LedgerService

__all__ = [
    "Settings",
    "load_settings",
    "Database",
    "BalanceResult",
    "EntryKind",
    "LedgerEntry",
    "Member",
    "InvalidAmountError",
    "attribute_payer",
    "classify_entry",
    "compute_balance",
    "format_amount",
    "parse_amount",
    "LedgerService",
]
