"""Tests for the 50/50 balance engine and entry classification."""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from duo_ledger.balance import attribute_payer, classify_entry, compute_balance
from duo_ledger.models import EntryKind, LedgerEntry, Member

SETTLEMENT = EntryKind.DEBT_SETTLEMENT


# Helper function for tests
def make_entry(
    amount: int, payer: str, kind: EntryKind = EntryKind.ORDINARY_EXPENSE
) -> LedgerEntry:
    """Create a LedgerEntry for testing."""
    return LedgerEntry(amount_minor=amount, payer_id=payer, kind=kind)


class TestNoBalance:
    """Inputs with nothing to compute return None, not an error."""

    def test_no_entries(self, ana):
        assert compute_balance([], [ana]) is None

    def test_no_members(self):
        assert compute_balance([make_entry(1000, "1")], []) is None

    def test_neither(self):
        assert compute_balance([], []) is None


class TestTwoMembers:
    """Ordinary 50/50 splitting between two parties."""

    def test_balanced(self, ana, ben):
        entries = [make_entry(1000, ana.id), make_entry(1000, ben.id)]

        result = compute_balance(entries, [ana, ben])

        assert result.total == 2000
        assert result.share == Decimal("1000")
        assert result.net_balance == 0
        assert result.is_even
        assert result.debtor is None
        assert result.creditor is None

    def test_a_paid_more_b_owes(self, ana, ben):
        entries = [make_entry(3000, ana.id), make_entry(1000, ben.id)]

        result = compute_balance(entries, [ana, ben])

        assert result.paid_a == 3000
        assert result.paid_b == 1000
        assert result.net_balance == 1000
        assert result.debtor == ben
        assert result.creditor == ana
        assert result.amount_owed == 1000

    def test_b_paid_more_a_owes(self, ana, ben):
        entries = [make_entry(300, ana.id), make_entry(1000, ben.id)]

        result = compute_balance(entries, [ana, ben])

        assert result.share == Decimal("650")
        assert result.net_balance == -350
        assert result.debtor == ana
        assert result.creditor == ben
        assert result.amount_owed == 350

    def test_member_order_picks_parties(self, ana, ben):
        """Swapping member order flips the sign, not the magnitude."""
        entries = [make_entry(3000, ana.id), make_entry(1000, ben.id)]

        forward = compute_balance(entries, [ana, ben])
        backward = compute_balance(entries, [ben, ana])

        assert backward.party_a == ben
        assert forward.net_balance == -backward.net_balance

    def test_zero_balance_is_a_result(self, ana, ben):
        """Zero is a valid balance, distinct from None."""
        result = compute_balance([make_entry(0, ana.id)], [ana, ben])

        assert result is not None
        assert result.net_balance == 0


class TestSettlements:
    """Debt payments adjust the balance with a fixed sign convention."""

    def test_settlement_from_b_adds(self, ana, ben):
        """B's settlement adds to what B owes A."""
        entries = [make_entry(2000, ana.id), make_entry(500, ben.id, SETTLEMENT)]

        result = compute_balance(entries, [ana, ben])

        assert result.paid_a == 2000
        assert result.paid_b == 0
        assert result.settlement_a_to_b == 0
        assert result.settlement_b_to_a == 500
        assert result.total == 2000
        assert result.share == Decimal("1000")
        assert result.net_balance == 1500

    def test_settlement_from_a_subtracts(self, ana, ben):
        """A paying B back reduces what B owes A."""
        entries = [make_entry(2000, ana.id), make_entry(1000, ana.id, SETTLEMENT)]

        result = compute_balance(entries, [ana, ben])

        assert result.settlement_a_to_b == 1000
        assert result.net_balance == 0

    def test_settlements_are_not_spending(self, ana, ben):
        entries = [make_entry(700, ben.id, SETTLEMENT)]

        result = compute_balance(entries, [ana, ben])

        assert result.total == 0
        assert result.share == 0
        assert result.net_balance == 700

    def test_both_directions(self, ana, ben):
        entries = [
            make_entry(1000, ana.id),
            make_entry(3000, ben.id),
            make_entry(400, ana.id, SETTLEMENT),
            make_entry(100, ben.id, SETTLEMENT),
        ]

        result = compute_balance(entries, [ana, ben])

        # (1000 - 2000) - 400 + 100
        assert result.net_balance == -1300


class TestOddTotals:
    """share is exact; half a minor unit is never truncated."""

    def test_even_total_with_zero_entry(self, ana, ben):
        entries = [make_entry(1000, ana.id), make_entry(0, ben.id)]

        result = compute_balance(entries, [ana, ben])

        assert result.total == 1000
        assert result.share == Decimal("500")
        assert result.net_balance == 500

    def test_odd_total_keeps_half_unit(self, ana, ben):
        entries = [make_entry(1001, ana.id)]

        result = compute_balance(entries, [ana, ben])

        assert result.share == Decimal("500.5")
        assert result.net_balance == Decimal("500.5")
        assert isinstance(result.net_balance, Decimal)

    def test_half_unit_reconciles(self, ana, ben):
        """paid_a - share + paid_b - share is exactly zero."""
        entries = [make_entry(1001, ana.id), make_entry(2, ben.id)]

        result = compute_balance(entries, [ana, ben])

        assert (result.paid_a - result.share) + (result.paid_b - result.share) == 0
        assert result.net_balance == Decimal("499.5")


class TestSingleMember:
    """A single member is paired with itself; entries count once, for A."""

    def test_one_expense(self, ana):
        result = compute_balance([make_entry(1000, ana.id)], [ana])

        assert result.party_a == ana
        assert result.party_b == result.party_a
        assert result.paid_a == 1000
        assert result.paid_b == 0
        assert result.total == 1000
        assert result.share == Decimal("500")
        assert result.net_balance == 500
        assert result.overflow_warning is None

    def test_settlement_counts_for_a(self, ana):
        result = compute_balance([make_entry(300, ana.id, SETTLEMENT)], [ana])

        assert result.settlement_a_to_b == 300
        assert result.settlement_b_to_a == 0

    def test_other_payers_excluded(self, ana):
        entries = [make_entry(1000, ana.id), make_entry(9000, "stranger")]

        result = compute_balance(entries, [ana])

        assert result.total == 1000


class TestMoreThanTwoMembers:
    """Only the first two members are considered, with a warning."""

    def test_warning_present(self, ana, ben):
        carla = Member(id="3", first_name="Carla")
        entries = [make_entry(1000, ana.id), make_entry(1000, ben.id)]

        result = compute_balance(entries, [ana, ben, carla])

        assert result.overflow_warning
        assert "3 members" in result.overflow_warning

    def test_third_member_excluded(self, ana, ben):
        carla = Member(id="3", first_name="Carla")
        entries = [
            make_entry(1000, ana.id),
            make_entry(1000, ben.id),
            make_entry(5000, carla.id),
            make_entry(800, carla.id, SETTLEMENT),
        ]

        result = compute_balance(entries, [ana, ben, carla])

        assert result.party_a == ana
        assert result.party_b == ben
        assert result.total == 2000
        assert result.net_balance == 0

    def test_no_warning_for_two(self, ana, ben):
        result = compute_balance([make_entry(1, ana.id)], [ana, ben])

        assert result.overflow_warning is None


class TestUnknownPayers:
    """Entries from unknown payers are silently excluded."""

    def test_excluded_without_error(self, ana, ben):
        entries = [make_entry(1000, ana.id), make_entry(50000, "ghost")]

        result = compute_balance(entries, [ana, ben])

        assert result.paid_a == 1000
        assert result.paid_b == 0
        assert result.total == 1000

    def test_only_unknown_payers(self, ana, ben):
        """Entries exist, so a (zero) balance is still computed."""
        result = compute_balance([make_entry(1000, "ghost")], [ana, ben])

        assert result is not None
        assert result.total == 0
        assert result.net_balance == 0


class TestClassification:
    """Entry kind and payer attribution."""

    def test_classify(self):
        assert classify_entry(make_entry(1, "1")) is EntryKind.ORDINARY_EXPENSE
        assert classify_entry(make_entry(1, "1", SETTLEMENT)) is SETTLEMENT

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("debt_settlement", EntryKind.DEBT_SETTLEMENT),
            ("debt_payment", EntryKind.DEBT_SETTLEMENT),
            ("ordinary_expense", EntryKind.ORDINARY_EXPENSE),
            ("expense", EntryKind.ORDINARY_EXPENSE),
            ("mystery", EntryKind.ORDINARY_EXPENSE),
            (None, EntryKind.ORDINARY_EXPENSE),
        ],
    )
    def test_raw_kinds_are_coerced(self, raw, expected):
        """Anything not explicitly a settlement is an ordinary expense."""
        entry = LedgerEntry(amount_minor=100, payer_id="1", kind=raw)
        assert entry.kind is expected

    def test_attribute_payer(self, ana, ben):
        assert attribute_payer(make_entry(1, ana.id), ana, ben) == "a"
        assert attribute_payer(make_entry(1, ben.id), ana, ben) == "b"
        assert attribute_payer(make_entry(1, "9"), ana, ben) is None

    def test_attribute_payer_self_pair(self, ana):
        assert attribute_payer(make_entry(1, ana.id), ana, ana) == "a"


class TestEntryModel:
    """Ledger entries are immutable and non-negative."""

    def test_frozen(self):
        entry = make_entry(100, "1")
        with pytest.raises(ValidationError):
            entry.amount_minor = 200

    def test_negative_amount_rejected(self):
        with pytest.raises(ValidationError):
            make_entry(-1, "1")

    def test_inputs_not_mutated(self, ana, ben):
        entries = [make_entry(1000, ana.id), make_entry(500, ben.id, SETTLEMENT)]
        members = [ana, ben]

        first = compute_balance(entries, members)
        second = compute_balance(entries, members)

        assert first == second
        assert len(entries) == 2
        assert members == [ana, ben]
