"""Custom exceptions for duo-ledger."""


class DuoLedgerError(Exception):
    """Base exception for all duo-ledger errors."""

    pass


class ConfigurationError(DuoLedgerError):
    """Raised when configuration is invalid or missing."""

    pass


class InvalidAmountError(DuoLedgerError, ValueError):
    """Raised when amount text does not reduce to a non-negative number."""

    def __init__(self, raw: str, message: str | None = None):
        self.raw = raw
        super().__init__(message or f"Invalid amount: {raw!r}")


class InvalidCategoryError(DuoLedgerError, ValueError):
    """Raised when a category override is not a known category."""

    def __init__(self, category: str):
        self.category = category
        super().__init__(f"Invalid category: {category}")


class InvalidPeriodError(DuoLedgerError, ValueError):
    """Raised when a month or year argument cannot be parsed."""

    pass


class InvalidCommandError(DuoLedgerError, ValueError):
    """Raised when chat command arguments are missing or malformed."""

    pass


class EntryNotFoundError(DuoLedgerError):
    """Raised when a ledger entry id does not exist."""

    def __init__(self, entry_id: str):
        self.entry_id = entry_id
        super().__init__(f"Entry not found: {entry_id}")
