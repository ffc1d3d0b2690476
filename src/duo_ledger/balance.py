"""Core 50/50 balance computation between the first two ledger members."""

import logging
from collections.abc import Sequence
from decimal import Decimal
from typing import Literal

from .models import BalanceResult, EntryKind, LedgerEntry, Member

logger = logging.getLogger(__name__)

Party = Literal["a", "b"]


def classify_entry(entry: LedgerEntry) -> EntryKind:
    """Return whether an entry is an ordinary expense or a debt settlement."""
    if entry.kind is EntryKind.DEBT_SETTLEMENT:
        return EntryKind.DEBT_SETTLEMENT
    return EntryKind.ORDINARY_EXPENSE


def attribute_payer(
    entry: LedgerEntry, party_a: Member, party_b: Member
) -> Party | None:
    """
    Attribute an entry to one of the two parties by payer id.

    Party A is matched first, so when party_b is the same member as party_a
    (single-member ledger) an entry is counted once, for A.

    Returns:
        "a", "b", or None for payers that are neither party
    """
    if entry.payer_id == party_a.id:
        return "a"
    if entry.payer_id == party_b.id:
        return "b"
    return None


def overflow_warning(member_count: int) -> str | None:
    """Warning text for ledgers with more members than the balance considers."""
    if member_count <= 2:
        return None
    return (
        f"This ledger has {member_count} members. The 50/50 balance only "
        f"considers the first two; entries from other members are excluded."
    )


def compute_balance(
    entries: Sequence[LedgerEntry], members: Sequence[Member]
) -> BalanceResult | None:
    """
    Compute the 50/50 balance between the first two members.

    Steps:
    1. Pick party A (first member) and party B (second member, or A again)
    2. Sum ordinary expenses and settlements per party
    3. share = total / 2 (exact)
    4. net = (paid_a - share) - settlement_a_to_b + settlement_b_to_a

    A settlement paid by A is A paying B back, so it reduces what B owes A.
    A settlement paid by B increases it.

    Args:
        entries: Ledger entries for the period under consideration
        members: Members in registration order

    Returns:
        The balance, or None when there are no entries or no members
    """
    if not entries or not members:
        return None

    party_a = members[0]
    party_b = members[1] if len(members) > 1 else party_a

    paid = {"a": 0, "b": 0}
    settled = {"a": 0, "b": 0}
    excluded = 0

    for entry in entries:
        party = attribute_payer(entry, party_a, party_b)
        if party is None:
            excluded += 1
            continue

        if classify_entry(entry) is EntryKind.DEBT_SETTLEMENT:
            settled[party] += entry.amount_minor
        else:
            paid[party] += entry.amount_minor

    if excluded:
        logger.debug(f"Excluded {excluded} entries paid by neither party")

    total = paid["a"] + paid["b"]
    share = Decimal(total) / 2
    net_balance = (paid["a"] - share) - settled["a"] + settled["b"]

    return BalanceResult(
        party_a=party_a,
        party_b=party_b,
        paid_a=paid["a"],
        paid_b=paid["b"],
        settlement_a_to_b=settled["a"],
        settlement_b_to_a=settled["b"],
        total=total,
        share=share,
        net_balance=net_balance,
        overflow_warning=overflow_warning(len(members)),
    )
