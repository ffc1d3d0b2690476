"""Transport-agnostic chat command dispatcher.

A chat front end hands each incoming message to ChatDispatcher.handle() and
sends back the returned reply. Nothing here knows about a specific chat
network.
"""

import logging
import re
from collections.abc import Callable

from pydantic import BaseModel

from .access import is_user_allowed, warn_if_unrestricted
from .categories import CATEGORIES
from .commands import parse_expense_command, split_command
from .config import Settings
from .exceptions import (
    DuoLedgerError,
    EntryNotFoundError,
    InvalidAmountError,
    InvalidCategoryError,
    InvalidCommandError,
    InvalidPeriodError,
)
from .models import BalanceResult, ChatMessage, LedgerEntry, Member
from .money import format_amount
from .service import LedgerService
from .session import SessionState, SessionStore

logger = logging.getLogger(__name__)

_MONTH_ARG = re.compile(r"^([0-9]{4}-[0-9]{1,2}|[0-9]{1,2})$")

HELP_TEXT = """\
Available commands:

Recording
  /g <amount> <description>              Record an expense
  /g <amount> [category] <description>   Record with a category
  /pago <amount> [description]           Record a debt payment

Month queries
  /month [YYYY-MM]     Total spent in the month
  /summary [YYYY-MM]   Spending per category
  /balance [YYYY-MM]   Who owes whom (counts debt payments)

Year
  /year [YYYY]         Month-by-month totals

Entries
  /find <term> [YYYY-MM]   Search by description
  /last [n]                Last n entries (default {last_default})
  /edit <id> <amount>      Change an entry's amount
  /del <id>                Delete an entry
  /csv [YYYY-MM]           Export the month as CSV

Categories: {categories}
Amounts accept "12500", "12.500", "12500,50" or "12,500.50".
"""


class ChatReply(BaseModel):
    """A reply to send back, with an optional file attachment."""

    text: str
    filename: str | None = None
    document: str | None = None


class ChatDispatcher:
    """Routes chat messages to ledger operations."""

    def __init__(
        self,
        service: LedgerService,
        settings: Settings,
        sessions: SessionStore,
    ):
        self.service = service
        self.settings = settings
        self.sessions = sessions
        warn_if_unrestricted(settings)
        self._handlers: dict[str, Callable[[ChatMessage, str], ChatReply]] = {
            "start": self._start,
            "help": self._help,
            "g": self._expense,
            "pago": self._payment,
            "month": self._month,
            "summary": self._summary,
            "balance": self._balance,
            "year": self._year,
            "find": self._find,
            "last": self._last,
            "edit": self._edit,
            "del": self._delete,
            "csv": self._csv,
        }

    def handle(self, message: ChatMessage) -> ChatReply:
        """
        Handle one incoming message.

        Any command clears the sender's pending session. Plain text is only
        meaningful while a session is waiting for it.
        """
        if not is_user_allowed(message.user_id, self.settings):
            return ChatReply(
                text="Sorry, you don't have access to this ledger. "
                "It is private and only available to authorized users."
            )

        self.sessions.purge_expired()
        command, args = split_command(message.text)

        if not command:
            return self._plain_text(message)

        self.sessions.clear(message.user_id)
        handler = self._handlers.get(command)
        if handler is None:
            return ChatReply(text=f"Unknown command /{command}. Send /help for usage.")

        logger.debug(f"Dispatching /{command} from user {message.user_id}")
        try:
            return handler(message, args)
        except InvalidAmountError as e:
            return ChatReply(text=f"{e}\n\nExample: /g 12500 wine malbec")
        except InvalidCategoryError as e:
            return ChatReply(
                text=f"{e}\n\nAvailable categories: {', '.join(CATEGORIES)}"
            )
        except (InvalidCommandError, InvalidPeriodError, EntryNotFoundError) as e:
            return ChatReply(text=f"{e}\n\nSend /help for usage.")
        except DuoLedgerError as e:
            logger.error(f"Error handling /{command}: {e}")
            return ChatReply(text=f"Error: {e}")

    # ========================================================================
    # Helpers
    # ========================================================================

    def _member_for(self, message: ChatMessage) -> Member:
        existing = self.service.get_member(message.user_id)
        if existing is not None:
            return existing
        return self.service.register_member(
            message.user_id, message.username, message.first_name
        )

    def _describe(self, entry: LedgerEntry, members: dict[str, Member]) -> str:
        payer = members.get(entry.payer_id) or Member(id=entry.payer_id)
        label = " [DEBT PAYMENT]" if entry.is_settlement else ""
        return (
            f"{entry.id}\n"
            f"  {format_amount(entry.amount_minor)} {entry.currency} | "
            f"{entry.category} | \"{entry.description}\"{label} | "
            f"paid by {payer.display_name} | {entry.occurred_at.date().isoformat()}"
        )

    # ========================================================================
    # Conversation
    # ========================================================================

    def _plain_text(self, message: ChatMessage) -> ChatReply:
        state = self.sessions.get(message.user_id)
        if state is SessionState.AWAITING_NAME:
            name = message.text.strip()
            if not name:
                return ChatReply(text="Please type the name you'd like me to use.")
            self.sessions.clear(message.user_id)
            member = self.service.register_member(
                message.user_id, message.username, name
            )
            return ChatReply(
                text=f"Nice to meet you, {member.display_name}!\n\n"
                f"Record your first expense with /g <amount> <description>, "
                f"or send /help to see everything."
            )
        return ChatReply(text="I only understand commands. Send /help for usage.")

    def _start(self, message: ChatMessage, args: str) -> ChatReply:
        existing = self.service.get_member(message.user_id)
        if existing is None:
            self.sessions.begin(message.user_id, SessionState.AWAITING_NAME)
            return ChatReply(
                text="Welcome! Looks like this is your first time here.\n"
                "What name would you like me to call you?"
            )
        return ChatReply(
            text=f"Hi {existing.display_name}, welcome back!\n\n" + self._help_text()
        )

    def _help_text(self) -> str:
        return HELP_TEXT.format(
            last_default=self.settings.last_entries_default,
            categories=", ".join(CATEGORIES),
        )

    def _help(self, message: ChatMessage, args: str) -> ChatReply:
        return ChatReply(text=self._help_text())

    # ========================================================================
    # Recording
    # ========================================================================

    def _expense(self, message: ChatMessage, args: str) -> ChatReply:
        parsed = parse_expense_command(args)
        member = self._member_for(message)
        entry = self.service.add_expense(
            member, parsed.amount, parsed.description, parsed.category
        )
        return ChatReply(
            text="Expense recorded:\n" + self._describe(entry, {member.id: member})
        )

    def _payment(self, message: ChatMessage, args: str) -> ChatReply:
        parsed = parse_expense_command(args, require_description=False)
        member = self._member_for(message)
        entry = self.service.add_debt_payment(member, parsed.amount, parsed.description)
        return ChatReply(
            text="Debt payment recorded:\n"
            + self._describe(entry, {member.id: member})
            + "\n\nThis payment counts toward /balance."
        )

    # ========================================================================
    # Queries
    # ========================================================================

    def _month(self, message: ChatMessage, args: str) -> ChatReply:
        total, period = self.service.get_month_total(args or None)
        return ChatReply(
            text=f"Total for {period.name}: {format_amount(total)} "
            f"{self.settings.currency}"
        )

    def _summary(self, message: ChatMessage, args: str) -> ChatReply:
        summary, period = self.service.get_month_summary(args or None)
        if not summary:
            return ChatReply(text=f"No expenses recorded in {period.name}.")

        lines = [f"Summary for {period.name}:"]
        for category, amount in summary.items():
            lines.append(f"  {category}: {format_amount(amount)} {self.settings.currency}")
        lines.append(
            f"Total: {format_amount(sum(summary.values()))} {self.settings.currency}"
        )
        return ChatReply(text="\n".join(lines))

    def _balance(self, message: ChatMessage, args: str) -> ChatReply:
        period = self.service.resolve_period(args or None)
        balance = self.service.get_balance(args or None)
        if balance is None:
            return ChatReply(
                text=f"No expenses recorded in {period.name}; nothing to settle."
            )
        return ChatReply(text=render_balance(balance, period.name, self.settings.currency))

    def _year(self, message: ChatMessage, args: str) -> ChatReply:
        months = self.service.get_year_summary(args or None)
        currency = self.settings.currency
        lines = [f"Year summary {months[0].year}:"]
        for month in months:
            lines.append(f"  {month.name}: {format_amount(month.total_minor)} {currency}")
        year_total = sum(month.total_minor for month in months)
        lines.append(f"Total: {format_amount(year_total)} {currency}")
        return ChatReply(text="\n".join(lines))

    def _find(self, message: ChatMessage, args: str) -> ChatReply:
        parts = args.split()
        if not parts:
            raise InvalidCommandError("Missing search term")

        month_input = None
        if len(parts) > 1 and _MONTH_ARG.match(parts[-1]):
            month_input = parts.pop()
        term = " ".join(parts)

        entries, period = self.service.find_entries(term, month_input)
        scope = f" in {period.name}" if period else ""
        if not entries:
            return ChatReply(text=f'No entries matching "{term}"{scope}.')

        members = self.service.members_by_id()
        lines = [f'{len(entries)} entries matching "{term}"{scope}:']
        lines.extend(self._describe(entry, members) for entry in entries)
        total = sum(entry.amount_minor for entry in entries)
        lines.append(f"Total: {format_amount(total)} {self.settings.currency}")
        return ChatReply(text="\n".join(lines))

    def _last(self, message: ChatMessage, args: str) -> ChatReply:
        count = None
        if args:
            try:
                count = int(args.split()[0])
            except ValueError as e:
                raise InvalidCommandError(f"Invalid count: {args}") from e
            if count < 1:
                raise InvalidCommandError("Count must be at least 1")

        entries = self.service.get_last_entries(count)
        if not entries:
            return ChatReply(text="No entries recorded yet.")

        members = self.service.members_by_id()
        lines = [f"Last {len(entries)} entries:"]
        lines.extend(self._describe(entry, members) for entry in entries)
        return ChatReply(text="\n".join(lines))

    # ========================================================================
    # Editing
    # ========================================================================

    def _edit(self, message: ChatMessage, args: str) -> ChatReply:
        parts = args.split()
        if len(parts) < 2:
            raise InvalidCommandError("Usage: /edit <id> <amount>")
        entry = self.service.update_entry_amount(parts[0], "".join(parts[1:]))
        return ChatReply(
            text=f"Entry {entry.id} updated to {format_amount(entry.amount_minor)} "
            f"{entry.currency}."
        )

    def _delete(self, message: ChatMessage, args: str) -> ChatReply:
        entry_id = args.strip()
        if not entry_id:
            raise InvalidCommandError("Usage: /del <id>")
        if not self.service.delete_entry(entry_id):
            raise EntryNotFoundError(entry_id)
        return ChatReply(text=f"Entry {entry_id} deleted.")

    def _csv(self, message: ChatMessage, args: str) -> ChatReply:
        content, period = self.service.export_month_csv(args or None)
        return ChatReply(
            text=f"Entries for {period.name}",
            filename=f"expenses-{period.key}.csv",
            document=content,
        )


def render_balance(balance: BalanceResult, period_name: str, currency: str) -> str:
    """Render a balance as a chat message."""
    name_a = balance.party_a.display_name
    name_b = balance.party_b.display_name

    lines = [f"Balance {period_name}", ""]
    if balance.overflow_warning:
        lines.extend([balance.overflow_warning, ""])

    lines.append("Expenses:")
    lines.append(f"  {name_a}: {format_amount(balance.paid_a)} {currency}")
    lines.append(f"  {name_b}: {format_amount(balance.paid_b)} {currency}")
    if balance.settlement_a_to_b or balance.settlement_b_to_a:
        lines.append("Debt payments:")
        lines.append(
            f"  {name_a}: {format_amount(balance.settlement_a_to_b)} {currency}"
        )
        lines.append(
            f"  {name_b}: {format_amount(balance.settlement_b_to_a)} {currency}"
        )
    lines.append("")
    lines.append(f"Total: {format_amount(balance.total)} {currency}")
    lines.append(f"Share per person: {format_amount(balance.share)} {currency}")
    lines.append("")

    if balance.is_even:
        lines.append("All square.")
    else:
        lines.append(
            f"{balance.debtor.display_name} owes "
            f"{format_amount(balance.amount_owed)} {currency} "
            f"to {balance.creditor.display_name}"
        )
    return "\n".join(lines)
