"""Tests for split and ledger value types."""

from dataclasses import FrozenInstanceError
from decimal import Decimal

import pytest

from splitledger.models import (
    BalanceLedger,
    EqualSplit,
    ExactSplit,
    PercentSplit,
    SharesSplit,
    Settlement,
    SplitEntry,
    SplitInput,
    SplitMode,
    SplitRecord,
    split_from_weights,
)
from splitledger.services.errors import InvalidSettlement
from splitledger.services.split_service import compute_split


def make_entry(member, owed_amount, payer="A", paid=False):
    return SplitEntry(
        member=member,
        share_weight=1,
        percent_of_total=Decimal("0"),
        owed_amount=owed_amount,
        payer=payer,
        paid=paid,
    )


class TestSplitVariants:
    """Test split variant construction."""

    def test_split_from_weights_equal_ignores_weights(self):
        """Test EQUAL accepts members or (member, weight) pairs."""
        assert split_from_weights("equal", ["A", "B"]) == EqualSplit(("A", "B"))
        assert split_from_weights("equal", [("A", 5), ("B", 9)]) == EqualSplit(("A", "B"))

    def test_split_from_weights_mapping(self):
        """Test a member -> weight mapping keeps insertion order."""
        split = split_from_weights(SplitMode.SHARES, {"B": 2, "A": 1})

        assert isinstance(split, SharesSplit)
        assert split.weights == (("B", 2), ("A", 1))
        assert split.members == ("B", "A")

    def test_split_from_weights_builds_each_variant(self):
        """Test every mode maps to its variant."""
        assert isinstance(split_from_weights("percent", [("A", 100)]), PercentSplit)
        assert isinstance(split_from_weights("exact", [("A", 100)]), ExactSplit)

    def test_split_from_weights_unknown_mode(self):
        """Test unknown mode raises ValueError."""
        with pytest.raises(ValueError):
            split_from_weights("random", ["A"])

    def test_variant_carries_mode(self):
        """Test the mode tag on each variant and on the input."""
        assert EqualSplit(("A",)).mode is SplitMode.EQUAL
        assert SplitInput(100, "A", ExactSplit([("A", 100)])).mode is SplitMode.EXACT

    def test_lists_become_tuples(self):
        """Test variants store immutable weights."""
        split = SharesSplit([["A", 1], ["B", 2]])

        assert split.weights == (("A", 1), ("B", 2))
        with pytest.raises(FrozenInstanceError):
            split.weights = ()


class TestSplitRecord:
    """Test split record invariants and helpers."""

    def test_mismatched_total_rejected(self):
        """Test a record must reconcile to its total."""
        with pytest.raises(ValueError, match="must equal expense amount"):
            SplitRecord(
                total_amount=100,
                payer="A",
                mode=SplitMode.EXACT,
                entries=(make_entry("A", 50), make_entry("B", 49)),
            )

    def test_negative_owed_rejected(self):
        """Test owed amounts cannot be negative."""
        with pytest.raises(ValueError, match="negative"):
            SplitRecord(
                total_amount=100,
                payer="A",
                mode=SplitMode.EXACT,
                entries=(make_entry("A", 110), make_entry("B", -10)),
            )

    def test_owed_by_and_entry(self):
        """Test lookups by member."""
        record = compute_split(100, "A", "equal", ["A", "B"])

        assert record.owed_by("B") == 50
        assert record.owed_by("nobody") == 0
        assert record.entry("nobody") is None
        assert record.entry("A").member == "A"

    def test_mark_paid_returns_new_record(self):
        """Test marking paid never mutates the original."""
        record = compute_split(90, "A", "equal", ["A", "B", "C"])

        updated = record.mark_paid("B")

        assert updated is not record
        assert updated.entry("B").paid is True
        assert record.entry("B").paid is False
        assert updated.as_mapping() == record.as_mapping()

    def test_mark_paid_unknown_member(self):
        """Test marking a non-member raises KeyError."""
        record = compute_split(90, "A", "equal", ["A", "B"])

        with pytest.raises(KeyError):
            record.mark_paid("Z")

    def test_mark_all_paid(self):
        """Test every entry, the payer's included, is flagged paid on a copy."""
        record = compute_split(90, "A", "equal", ["A", "B", "C"])

        updated = record.mark_all_paid()

        assert all(entry.paid for entry in updated.entries)
        assert updated.is_fully_paid is True
        assert not any(entry.paid for entry in record.entries)

    def test_is_fully_paid(self):
        """Test payer's own entry does not count."""
        record = compute_split(90, "A", "equal", ["A", "B", "C"])

        assert record.is_fully_paid is False
        assert record.mark_paid("B").is_fully_paid is False
        assert record.mark_paid("B").mark_paid("C").is_fully_paid is True

    def test_record_is_frozen(self):
        """Test records cannot be edited in place."""
        record = compute_split(90, "A", "equal", ["A", "B"])

        with pytest.raises(FrozenInstanceError):
            record.total_amount = 10


class TestSettlement:
    """Test settlement validation."""

    @pytest.mark.parametrize("amount", [0, -5, 1.5, True])
    def test_invalid_amount(self, amount):
        """Test settlement amount must be a positive integer."""
        with pytest.raises(InvalidSettlement):
            Settlement(from_member="A", to_member="B", amount=amount)

    def test_same_member(self):
        """Test a member cannot pay themselves."""
        with pytest.raises(InvalidSettlement, match="themselves"):
            Settlement(from_member="A", to_member="A", amount=10)


class TestBalanceLedger:
    """Test the read-only balance mapping."""

    @pytest.fixture
    def ledger(self):
        return BalanceLedger({"A": 50, "B": -30, "C": -20, "D": 0})

    def test_mapping_behaviour(self, ledger):
        """Test lookups, length and equality with a dict."""
        assert ledger["A"] == 50
        assert len(ledger) == 4
        assert "D" in ledger
        assert ledger == {"A": 50, "B": -30, "C": -20, "D": 0}
        assert ledger.members == ("A", "B", "C", "D")

    def test_net_for_unknown_member(self, ledger):
        """Test unknown members have a zero balance."""
        assert ledger.net("Z") == 0

    def test_creditors_and_debtors(self, ledger):
        """Test split into who is owed and who owes."""
        assert ledger.creditors() == {"A": 50}
        assert ledger.debtors() == {"B": 30, "C": 20}

    def test_total_is_zero(self, ledger):
        assert ledger.total() == 0

    def test_read_only(self, ledger):
        """Test the ledger cannot be modified."""
        with pytest.raises(TypeError):
            ledger["A"] = 0

    def test_copy_is_detached(self):
        """Test later changes to the source dict do not leak in."""
        source = {"A": 5, "B": -5}
        ledger = BalanceLedger(source)
        source["A"] = 100

        assert ledger["A"] == 5

    def test_is_settled(self):
        """Test settled check with and without tolerance."""
        assert BalanceLedger({}).is_settled()
        assert BalanceLedger({"A": 0, "B": 0}).is_settled()
        assert not BalanceLedger({"A": 2, "B": -2}).is_settled()
        assert BalanceLedger({"A": 2, "B": -2}).is_settled(tolerance=2)
