"""Split models - split modes, per-mode split variants and the split record.

Amounts are integers in the currency's minor unit (cents for USD, whole yen
for JPY). Conversion from display decimals happens in
``splitledger.services.locale_service`` before values reach these models.
"""

from collections.abc import Mapping
from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum
from typing import ClassVar, Iterable, Union

Member = str


class SplitMode(str, Enum):
    """How an expense is divided among members."""

    EQUAL = "equal"
    SHARES = "shares"
    PERCENT = "percent"
    EXACT = "exact"


def _pairs(weights) -> tuple:
    if isinstance(weights, Mapping):
        weights = weights.items()
    return tuple((member, weight) for member, weight in weights)


@dataclass(frozen=True)
class EqualSplit:
    """Every member owes the same amount (give or take one minor unit)."""

    mode: ClassVar[SplitMode] = SplitMode.EQUAL

    members: tuple[Member, ...]

    def __post_init__(self):
        object.__setattr__(self, "members", tuple(self.members))

    @property
    def weights(self) -> tuple:
        return tuple((member, 1) for member in self.members)


@dataclass(frozen=True)
class SharesSplit:
    """Members owe in proportion to an integer share count.

    Attributes:
        weights: (member, share count) pairs in input order
    """

    mode: ClassVar[SplitMode] = SplitMode.SHARES

    weights: tuple[tuple[Member, int], ...]

    def __post_init__(self):
        object.__setattr__(self, "weights", _pairs(self.weights))

    @property
    def members(self) -> tuple[Member, ...]:
        return tuple(member for member, _ in self.weights)


@dataclass(frozen=True)
class PercentSplit:
    """Members owe a percentage of the total; percentages must add up to 100.

    Attributes:
        weights: (member, percent) pairs in input order
    """

    mode: ClassVar[SplitMode] = SplitMode.PERCENT

    weights: tuple[tuple[Member, Decimal], ...]

    def __post_init__(self):
        object.__setattr__(self, "weights", _pairs(self.weights))

    @property
    def members(self) -> tuple[Member, ...]:
        return tuple(member for member, _ in self.weights)


@dataclass(frozen=True)
class ExactSplit:
    """Members owe literal minor-unit amounts that add up to the total.

    Attributes:
        weights: (member, amount) pairs in input order
    """

    mode: ClassVar[SplitMode] = SplitMode.EXACT

    weights: tuple[tuple[Member, int], ...]

    def __post_init__(self):
        object.__setattr__(self, "weights", _pairs(self.weights))

    @property
    def members(self) -> tuple[Member, ...]:
        return tuple(member for member, _ in self.weights)


Split = Union[EqualSplit, SharesSplit, PercentSplit, ExactSplit]

_WEIGHTED_SPLITS = {
    SplitMode.SHARES: SharesSplit,
    SplitMode.PERCENT: PercentSplit,
    SplitMode.EXACT: ExactSplit,
}


def split_from_weights(mode: SplitMode | str, weights: Iterable) -> Split:
    """Build the split variant for a mode from a loose weights sequence.

    Args:
        mode: SplitMode or its string value ("equal", "shares", ...)
        weights: (member, weight) pairs or a member -> weight mapping. For
            EQUAL a plain sequence of members is accepted and any weights
            are ignored.

    Returns:
        EqualSplit, SharesSplit, PercentSplit or ExactSplit

    Raises:
        ValueError: If mode is not a known split mode
    """
    mode = SplitMode(mode)
    if mode is SplitMode.EQUAL:
        members = []
        for item in weights:
            members.append(item[0] if isinstance(item, (tuple, list)) else item)
        return EqualSplit(tuple(members))
    return _WEIGHTED_SPLITS[mode](weights)


@dataclass(frozen=True)
class SplitInput:
    """Request to the split calculator.

    Attributes:
        total_amount: Expense total in minor units (must be positive)
        payer: Member who advanced the money (need not be in the split)
        split: Mode-specific split variant
    """

    total_amount: int
    payer: Member
    split: Split

    @property
    def mode(self) -> SplitMode:
        return self.split.mode


@dataclass(frozen=True)
class SplitEntry:
    """One member's obligation for one expense.

    ``owed_amount`` is binding; ``share_weight`` and ``percent_of_total`` are
    informational and never used to recompute balances.
    """

    member: Member
    share_weight: int | Decimal
    percent_of_total: Decimal
    owed_amount: int
    payer: Member
    paid: bool = False


@dataclass(frozen=True)
class SplitRecord:
    """Immutable result of splitting one expense.

    Invariants (checked on construction):
        sum(entry.owed_amount) == total_amount
        every entry.owed_amount >= 0
    """

    total_amount: int
    payer: Member
    mode: SplitMode
    entries: tuple[SplitEntry, ...]

    def __post_init__(self):
        object.__setattr__(self, "entries", tuple(self.entries))
        if any(entry.owed_amount < 0 for entry in self.entries):
            raise ValueError("Split entries cannot owe a negative amount")
        owed_total = sum(entry.owed_amount for entry in self.entries)
        if owed_total != self.total_amount:
            raise ValueError(
                f"Split entries total ({owed_total}) must equal expense amount "
                f"({self.total_amount})"
            )

    @property
    def members(self) -> tuple[Member, ...]:
        return tuple(entry.member for entry in self.entries)

    @property
    def is_fully_paid(self) -> bool:
        """True once every member other than the payer has paid their part."""
        return all(entry.paid for entry in self.entries if entry.member != self.payer)

    def entry(self, member: Member) -> SplitEntry | None:
        for entry in self.entries:
            if entry.member == member:
                return entry
        return None

    def owed_by(self, member: Member) -> int:
        """Owed amount for a member, 0 if the member is not in the split."""
        entry = self.entry(member)
        return entry.owed_amount if entry else 0

    def as_mapping(self) -> dict[Member, int]:
        return {entry.member: entry.owed_amount for entry in self.entries}

    def mark_paid(self, member: Member) -> "SplitRecord":
        """Return a copy of this record with the member's entry flagged paid.

        Raises:
            KeyError: If the member is not part of the split
        """
        if self.entry(member) is None:
            raise KeyError(member)
        entries = tuple(
            replace(entry, paid=True) if entry.member == member else entry
            for entry in self.entries
        )
        return replace(self, entries=entries)

    def mark_all_paid(self) -> "SplitRecord":
        """Return a copy of this record with every entry flagged paid."""
        return replace(self, entries=tuple(replace(entry, paid=True) for entry in self.entries))
