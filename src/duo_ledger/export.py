"""CSV export of ledger entries."""

import csv
import io
from collections.abc import Mapping, Sequence

from .models import LedgerEntry, Member
from .money import to_plain_decimal

TYPE_LABELS = {
    True: "Debt payment",
    False: "Expense",
}


def csv_headers(currency: str) -> list[str]:
    return [
        "ID",
        "Date",
        f"Amount ({currency})",
        "Category",
        "Description",
        "Paid by",
        "Type",
    ]


def generate_csv(
    entries: Sequence[LedgerEntry],
    members: Mapping[str, Member],
    currency: str = "ARS",
) -> str:
    """
    Render entries as CSV text with a header row.

    Amounts use a plain dot decimal ("12500.50") so spreadsheets parse them.
    Payers missing from ``members`` are shown as "User".
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(csv_headers(currency))

    for entry in entries:
        member = members.get(entry.payer_id) or Member(id=entry.payer_id)
        writer.writerow(
            [
                entry.id,
                entry.occurred_at.date().isoformat(),
                to_plain_decimal(entry.amount_minor),
                entry.category,
                entry.description,
                member.display_name,
                TYPE_LABELS[entry.is_settlement],
            ]
        )

    return buffer.getvalue()
