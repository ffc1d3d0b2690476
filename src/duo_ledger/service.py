"""Service layer that composes storage, money parsing and balance logic.

This module provides the operations a chat or CLI front end calls; it owns
no state beyond the database handle it is given.
"""

import logging
from collections import defaultdict
from collections.abc import Callable
from datetime import datetime

from .balance import compute_balance
from .categories import DEFAULT_CATEGORY, validate_category
from .commands import DEFAULT_PAYMENT_DESCRIPTION
from .config import Settings
from .db import Database
from .exceptions import EntryNotFoundError
from .export import generate_csv
from .models import BalanceResult, EntryKind, LedgerEntry, Member, MonthTotal
from .money import format_amount, parse_amount
from .periods import Period, month_range, year_month_ranges

logger = logging.getLogger(__name__)


class LedgerService:
    """Service for recording and reporting shared expenses."""

    def __init__(
        self,
        settings: Settings,
        database: Database,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """Initialize the ledger service."""
        self.settings = settings
        self.db = database
        self.clock = clock

    # ========================================================================
    # Members
    # ========================================================================

    def register_member(
        self,
        member_id: str,
        username: str | None = None,
        first_name: str | None = None,
    ) -> Member:
        """Find or create a member, refreshing any names provided."""
        return self.db.upsert_member(
            Member(id=str(member_id), username=username, first_name=first_name)
        )

    def get_member(self, member_id: str) -> Member | None:
        return self.db.get_member(str(member_id))

    def members_by_id(self) -> dict[str, Member]:
        return {member.id: member for member in self.db.get_members()}

    # ========================================================================
    # Recording
    # ========================================================================

    def add_expense(
        self,
        member: Member,
        amount_input: str,
        description: str,
        category: str | None = None,
    ) -> LedgerEntry:
        """
        Record an ordinary expense paid by a member.

        Args:
            member: The member who paid
            amount_input: Amount as typed, e.g. "12.500" or "12500,50"
            description: What the money was spent on
            category: Optional category override

        Returns:
            The saved entry

        Raises:
            InvalidAmountError: If the amount cannot be parsed
            InvalidCategoryError: If the category override is unknown
        """
        amount_minor = parse_amount(amount_input)
        resolved_category = validate_category(category)
        entry = self._record(
            member,
            amount_minor,
            description,
            resolved_category,
            EntryKind.ORDINARY_EXPENSE,
        )
        logger.info(
            f"Recorded expense {entry.id} of {format_amount(amount_minor)} "
            f"by {member.id} ({resolved_category})"
        )
        return entry

    def add_debt_payment(
        self, member: Member, amount_input: str, description: str = ""
    ) -> LedgerEntry:
        """Record a member paying the other party back."""
        amount_minor = parse_amount(amount_input)
        entry = self._record(
            member,
            amount_minor,
            description or DEFAULT_PAYMENT_DESCRIPTION,
            DEFAULT_CATEGORY,
            EntryKind.DEBT_SETTLEMENT,
        )
        logger.info(
            f"Recorded debt payment {entry.id} of {format_amount(amount_minor)} "
            f"by {member.id}"
        )
        return entry

    def _record(
        self,
        member: Member,
        amount_minor: int,
        description: str,
        category: str,
        kind: EntryKind,
    ) -> LedgerEntry:
        self.db.upsert_member(member)
        now = self.clock()
        entry = LedgerEntry(
            amount_minor=amount_minor,
            payer_id=member.id,
            kind=kind,
            category=category,
            description=description,
            currency=self.settings.currency,
            occurred_at=now,
            created_at=now,
        )
        return self.db.save_entry(entry)

    # ========================================================================
    # Editing
    # ========================================================================

    def delete_entry(self, entry_id: str) -> bool:
        """Delete an entry by id. Returns False if it did not exist."""
        deleted = self.db.delete_entry(entry_id)
        if deleted:
            logger.info(f"Deleted entry {entry_id}")
        return deleted

    def update_entry_amount(self, entry_id: str, amount_input: str) -> LedgerEntry:
        """
        Replace an entry's amount.

        Entries are immutable, so the stored record is replaced by a copy
        carrying the new amount.

        Raises:
            EntryNotFoundError: If no entry has this id
            InvalidAmountError: If the amount cannot be parsed
        """
        amount_minor = parse_amount(amount_input)
        existing = self.db.get_entry(entry_id)
        if existing is None:
            raise EntryNotFoundError(entry_id)

        updated = existing.model_copy(update={"amount_minor": amount_minor})
        self.db.save_entry(updated)
        logger.info(
            f"Updated entry {entry_id}: {format_amount(existing.amount_minor)} "
            f"-> {format_amount(amount_minor)}"
        )
        return updated

    # ========================================================================
    # Reporting
    # ========================================================================

    def resolve_period(self, month_input: str | None = None) -> Period:
        """Resolve a month argument against the service clock."""
        return month_range(month_input, today=self.clock().date())

    def get_month_entries(
        self, month_input: str | None = None
    ) -> tuple[list[LedgerEntry], Period]:
        """Get a month's entries, oldest first."""
        period = self.resolve_period(month_input)
        return self.db.list_entries(period.start, period.end), period

    def get_balance(self, month_input: str | None = None) -> BalanceResult | None:
        """
        Compute the 50/50 balance for a month (default: current month).

        Returns:
            The balance, or None when the month has no entries
        """
        entries, period = self.get_month_entries(month_input)
        members = self.db.get_active_members()
        balance = compute_balance(entries, members)

        if balance is None:
            logger.info(f"No entries in {period.name}; nothing to balance")
        else:
            logger.info(
                f"Balance for {period.name}: net {format_amount(balance.net_balance)} "
                f"over {len(entries)} entries"
            )
            if balance.overflow_warning:
                logger.warning(balance.overflow_warning)

        return balance

    def get_month_total(self, month_input: str | None = None) -> tuple[int, Period]:
        """Total spent in a month. Debt payments are not spending."""
        entries, period = self.get_month_entries(month_input)
        total = sum(entry.amount_minor for entry in entries if not entry.is_settlement)
        return total, period

    def get_month_summary(
        self, month_input: str | None = None
    ) -> tuple[dict[str, int], Period]:
        """Spending per category for a month, largest first."""
        entries, period = self.get_month_entries(month_input)
        summary: dict[str, int] = defaultdict(int)
        for entry in entries:
            if not entry.is_settlement:
                summary[entry.category] += entry.amount_minor

        ordered = dict(sorted(summary.items(), key=lambda item: item[1], reverse=True))
        return ordered, period

    def get_year_summary(self, year_input: str | int | None = None) -> list[MonthTotal]:
        """Spending per month for a whole year."""
        periods = year_month_ranges(year_input, today=self.clock().date())
        entries = self.db.list_entries(periods[0].start, periods[-1].end)

        totals = []
        for period in periods:
            total = sum(
                entry.amount_minor
                for entry in entries
                if not entry.is_settlement and period.contains(entry.occurred_at)
            )
            totals.append(
                MonthTotal(
                    year=period.year,
                    month=period.month,
                    name=period.name,
                    total_minor=total,
                )
            )
        return totals

    def get_last_entries(self, count: int | None = None) -> list[LedgerEntry]:
        """Get the most recently recorded entries, newest first."""
        limit = count if count is not None else self.settings.last_entries_default
        return self.db.get_last_entries(max(limit, 0))

    def find_entries(
        self, term: str, month_input: str | None = None
    ) -> tuple[list[LedgerEntry], Period | None]:
        """
        Search entries by description.

        Without a month the search covers the whole ledger and the returned
        period is None.
        """
        if month_input:
            period = self.resolve_period(month_input)
            return self.db.search_entries(term, period.start, period.end), period
        return self.db.search_entries(term), None

    def export_month_csv(self, month_input: str | None = None) -> tuple[str, Period]:
        """Render a month's entries as CSV text."""
        entries, period = self.get_month_entries(month_input)
        content = generate_csv(entries, self.members_by_id(), self.settings.currency)
        logger.info(f"Exported {len(entries)} entries for {period.name}")
        return content, period
