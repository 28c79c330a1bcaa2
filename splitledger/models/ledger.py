"""Ledger models - expense history, settlement payments and derived balances."""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Iterator

from splitledger.models.split import Member, SplitRecord
from splitledger.services.errors import InvalidSettlement


class ExpenseKind(str, Enum):
    """Whether an expense is shared with the group or kept to its payer."""

    SHARED = "shared"
    PERSONAL = "personal"


@dataclass(frozen=True)
class ExpenseRecord:
    """Persisted split of one expense as handed to the balance aggregator.

    Attributes:
        split: Split record created when the expense was recorded
        settled: Whole expense settled (excluded from running balances)
        expense_id: Identifier of the expense in the caller's storage
        title: Expense title for display
        kind: Shared expenses move balances; personal ones only count
            towards the payer's own spending
    """

    split: SplitRecord
    settled: bool = False
    expense_id: str | None = None
    title: str = ""
    kind: ExpenseKind = ExpenseKind.SHARED

    @property
    def is_shared(self) -> bool:
        return self.kind is ExpenseKind.SHARED

    @property
    def payer(self) -> Member:
        return self.split.payer

    @property
    def total_amount(self) -> int:
        return self.split.total_amount


@dataclass(frozen=True)
class Settlement:
    """Money actually transferred from one member to another.

    A payment of ``amount`` from X to Y raises X's net balance by ``amount``
    and lowers Y's by the same.
    """

    from_member: Member
    to_member: Member
    amount: int
    settlement_id: str | None = None

    def __post_init__(self):
        if isinstance(self.amount, bool) or not isinstance(self.amount, int) or self.amount <= 0:
            raise InvalidSettlement(f"Settlement amount must be a positive integer: {self.amount!r}")
        if self.from_member == self.to_member:
            raise InvalidSettlement(f"Member cannot settle with themselves: {self.from_member}")


@dataclass(frozen=True)
class Debt:
    """Amount one member owes another."""

    from_member: Member
    to_member: Member
    amount: int
    expense_id: str | None = None
    title: str = ""


@dataclass(frozen=True)
class BalanceDetail:
    """Position against one counterparty (positive = they owe you)."""

    counterparty: Member
    amount: int


@dataclass(frozen=True)
class MemberSummary:
    """Historical totals for one member (profile stats)."""

    member: Member
    total_paid: int
    total_share: int
    expense_count: int

    @property
    def net(self) -> int:
        return self.total_paid - self.total_share


@dataclass(frozen=True)
class ExpenseBreakdown:
    """One member's view of one expense."""

    paid_by: Member
    user_paid: int
    user_owes: int
    user_is_owed: int


class BalanceLedger(Mapping):
    """Read-only net balance per member in minor units.

    Positive values mean the member is owed money, negative values mean the
    member owes money. Values always sum to zero.
    """

    def __init__(self, balances: Mapping[Member, int]):
        self._balances = MappingProxyType(dict(balances))

    def __getitem__(self, member: Member) -> int:
        return self._balances[member]

    def __iter__(self) -> Iterator[Member]:
        return iter(self._balances)

    def __len__(self) -> int:
        return len(self._balances)

    def __repr__(self) -> str:
        return f"<BalanceLedger({dict(self._balances)})>"

    @property
    def members(self) -> tuple[Member, ...]:
        return tuple(self._balances)

    def net(self, member: Member) -> int:
        """Net balance for a member, 0 for members with no history."""
        return self._balances.get(member, 0)

    def creditors(self) -> dict[Member, int]:
        """Members who are owed money, with the amount they are owed."""
        return {member: amount for member, amount in self._balances.items() if amount > 0}

    def debtors(self) -> dict[Member, int]:
        """Members who owe money, with the (positive) amount they owe."""
        return {member: -amount for member, amount in self._balances.items() if amount < 0}

    def total(self) -> int:
        return sum(self._balances.values())

    def is_settled(self, tolerance: int = 0) -> bool:
        """True when every member's balance is within ``tolerance`` of zero."""
        return all(abs(amount) <= tolerance for amount in self._balances.values())
