"""Parsing of expense and payment command arguments."""

import re

from .exceptions import InvalidCommandError
from .models import ExpenseCommand

DEFAULT_PAYMENT_DESCRIPTION = "Debt payment"

_COMMAND_WORD = re.compile(r"^/\w+(@\w+)?\s*")
_CATEGORY = re.compile(r"\[([^\]]+)\]\s*")


def split_command(text: str) -> tuple[str, str]:
    """
    Split "/cmd@bot args" into ("cmd", "args").

    Text that is not a command returns an empty command name.
    """
    stripped = text.strip()
    if not stripped.startswith("/"):
        return "", stripped

    head, *rest = stripped.split(maxsplit=1)
    name = head[1:].split("@", 1)[0].lower()
    return name, rest[0].strip() if rest else ""


def parse_expense_command(
    text: str, require_description: bool = True
) -> ExpenseCommand:
    """
    Parse "<amount> [category] <description>" arguments.

    Supports:
    - /g 12500 wine malbec
    - /g 8300 [groceries] weekly shop
    - /pago 5000            (require_description=False)

    Raises:
        InvalidCommandError: If the amount or description is missing
    """
    args = _COMMAND_WORD.sub("", text.strip()).strip()
    if not args:
        raise InvalidCommandError("Missing arguments")

    category = None
    match = _CATEGORY.search(args)
    if match:
        category = match.group(1).strip()
        args = _CATEGORY.sub("", args, count=1).strip()

    parts = args.split()
    if not parts:
        raise InvalidCommandError("Missing amount")

    description = " ".join(parts[1:]).strip()
    if not description:
        if require_description:
            raise InvalidCommandError("Missing amount or description")
        description = DEFAULT_PAYMENT_DESCRIPTION

    return ExpenseCommand(amount=parts[0], category=category, description=description)
