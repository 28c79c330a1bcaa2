"""Balance aggregation over a group's expense history.

Net balance formula per member:
    credits as payer (what others owe on unsettled, unpaid entries)
  - debits as split member (own unpaid entries on expenses others paid)
  + settlements sent
  - settlements received

Positive = member is owed money, negative = member owes money. Every debit
has a matching credit, so balances across the group always sum to zero.
Only shared expenses count; personal ones feed spending totals alone.
"""

import logging
from typing import Iterable, Iterator

from splitledger.models.ledger import (
    BalanceDetail,
    BalanceLedger,
    Debt,
    ExpenseBreakdown,
    ExpenseRecord,
    MemberSummary,
    Settlement,
)
from splitledger.models.split import Member, SplitEntry, SplitRecord
from splitledger.services.config import settings

logger = logging.getLogger(__name__)


def as_expense_record(record: ExpenseRecord | SplitRecord | tuple) -> ExpenseRecord:
    """Normalize one history item to an ExpenseRecord.

    Accepts an ExpenseRecord, a bare SplitRecord (unsettled) or a
    ``(split_record, payer, settled)`` tuple.

    Raises:
        ValueError: If a tuple's payer differs from its split record's payer
        TypeError: For any other item
    """
    if isinstance(record, ExpenseRecord):
        return record
    if isinstance(record, SplitRecord):
        return ExpenseRecord(split=record)
    if isinstance(record, tuple) and len(record) == 3 and isinstance(record[0], SplitRecord):
        split, payer, settled = record
        if payer != split.payer:
            raise ValueError(f"Payer {payer} does not match split record payer {split.payer}")
        return ExpenseRecord(split=split, settled=bool(settled))
    raise TypeError(
        "Expense history items must be ExpenseRecord, SplitRecord or "
        f"(SplitRecord, payer, settled) tuples, got {type(record).__name__}"
    )


class BalanceService:
    """Compute balances and debt views from split records and settlements."""

    def open_entries(
        self, records: Iterable[ExpenseRecord | SplitRecord]
    ) -> Iterator[tuple[ExpenseRecord, SplitEntry]]:
        """Yield entries that still move money between two members.

        Skips personal and settled expenses, entries already marked paid,
        the payer's own entry and zero-amount entries.
        """
        for record in records:
            record = as_expense_record(record)
            if record.settled or not record.is_shared:
                continue
            for entry in record.split.entries:
                if entry.paid or entry.member == record.payer or entry.owed_amount == 0:
                    continue
                yield record, entry

    def compute_balances(
        self,
        records: Iterable[ExpenseRecord | SplitRecord],
        settlements: Iterable[Settlement] = (),
        members: Iterable[Member] = (),
    ) -> BalanceLedger:
        """Fold expense records and settlements into net balances.

        Args:
            records: Expense history (SplitRecord alone counts as unsettled);
                personal expenses are ignored
            settlements: Payments between members
            members: Current group members, listed with 0 when untouched

        Returns:
            BalanceLedger whose values sum to zero

        Members referenced by history but no longer in ``members`` are kept,
        since dropping them would break the zero-sum property.
        """
        records = [as_expense_record(record) for record in records]
        settlements = list(settlements)

        balances: dict[Member, int] = {member: 0 for member in members}
        for record in records:
            if not record.is_shared:
                continue
            balances.setdefault(record.payer, 0)
            for member in record.split.members:
                balances.setdefault(member, 0)

        for record, entry in self.open_entries(records):
            balances[record.payer] += entry.owed_amount
            balances[entry.member] -= entry.owed_amount

        for settlement in settlements:
            balances[settlement.from_member] = balances.get(settlement.from_member, 0) + settlement.amount
            balances[settlement.to_member] = balances.get(settlement.to_member, 0) - settlement.amount

        logger.debug(
            f"Computed balances for {len(balances)} members from "
            f"{len(records)} expenses and {len(settlements)} settlements"
        )
        return BalanceLedger(balances)

    def pairwise_debts(
        self,
        records: Iterable[ExpenseRecord | SplitRecord],
        settlements: Iterable[Settlement] = (),
    ) -> list[Debt]:
        """Net debts between each pair of members.

        Debts in both directions between two members cancel out, and a
        settlement from X to Y reduces what X owes Y. Pairs come out in the
        order they first appear in the history.
        """
        pair_totals: dict[tuple[Member, Member], int] = {}

        def add(debtor: Member, creditor: Member, amount: int) -> None:
            if (creditor, debtor) in pair_totals:
                pair_totals[(creditor, debtor)] -= amount
            else:
                pair_totals[(debtor, creditor)] = pair_totals.get((debtor, creditor), 0) + amount

        for record, entry in self.open_entries(records):
            add(entry.member, record.payer, entry.owed_amount)

        for settlement in settlements:
            add(settlement.to_member, settlement.from_member, settlement.amount)

        debts = []
        for (debtor, creditor), amount in pair_totals.items():
            if amount > 0:
                debts.append(Debt(from_member=debtor, to_member=creditor, amount=amount))
            elif amount < 0:
                debts.append(Debt(from_member=creditor, to_member=debtor, amount=-amount))
        return debts

    def detailed_debts(self, records: Iterable[ExpenseRecord | SplitRecord]) -> list[Debt]:
        """Outstanding debts per expense (member owes the expense payer)."""
        return [
            Debt(
                from_member=entry.member,
                to_member=record.payer,
                amount=entry.owed_amount,
                expense_id=record.expense_id,
                title=record.title,
            )
            for record, entry in self.open_entries(records)
        ]

    def balance_details(
        self,
        records: Iterable[ExpenseRecord | SplitRecord],
        member: Member,
        settlements: Iterable[Settlement] = (),
    ) -> list[BalanceDetail]:
        """Member's position against each counterparty.

        Returns:
            BalanceDetail list (positive = they owe you), largest amount
            owed to the member first
        """
        details = []
        for debt in self.pairwise_debts(records, settlements):
            if debt.to_member == member:
                details.append(BalanceDetail(counterparty=debt.from_member, amount=debt.amount))
            elif debt.from_member == member:
                details.append(BalanceDetail(counterparty=debt.to_member, amount=-debt.amount))
        details.sort(key=lambda detail: (-detail.amount, detail.counterparty))
        return details

    def member_summary(
        self, records: Iterable[ExpenseRecord | SplitRecord], member: Member
    ) -> MemberSummary:
        """Historical paid/share totals over shared expenses, settled ones included."""
        total_paid = 0
        total_share = 0
        expense_count = 0
        for record in records:
            record = as_expense_record(record)
            if not record.is_shared:
                continue
            split = record.split
            involved = False
            if split.payer == member:
                total_paid += split.total_amount
                involved = True
            entry = split.entry(member)
            if entry is not None:
                total_share += entry.owed_amount
                involved = True
            if involved:
                expense_count += 1

        return MemberSummary(
            member=member,
            total_paid=total_paid,
            total_share=total_share,
            expense_count=expense_count,
        )

    def shared_total(self, records: Iterable[ExpenseRecord | SplitRecord]) -> int:
        """Sum of all shared expense totals, settled ones included."""
        return sum(
            record.total_amount
            for record in map(as_expense_record, records)
            if record.is_shared
        )

    def user_total_spending(self, records: Iterable[ExpenseRecord | SplitRecord], member: Member) -> int:
        """What a member spent on themselves.

        Full amount of the member's personal expenses plus their own share of
        every shared expense, whoever paid it.
        """
        total = 0
        for record in map(as_expense_record, records):
            if record.is_shared:
                total += record.split.owed_by(member)
            elif record.payer == member:
                total += record.total_amount
        return total

    def expense_breakdown(self, record: ExpenseRecord | SplitRecord, member: Member) -> ExpenseBreakdown:
        """What a member paid, owes and is owed on one expense."""
        split = as_expense_record(record).split
        user_owes = split.owed_by(member)
        if split.payer == member:
            return ExpenseBreakdown(
                paid_by=split.payer,
                user_paid=split.total_amount,
                user_owes=user_owes,
                user_is_owed=split.total_amount - user_owes,
            )
        return ExpenseBreakdown(
            paid_by=split.payer,
            user_paid=0,
            user_owes=user_owes,
            user_is_owed=0,
        )

    def is_group_settled(self, ledger: BalanceLedger, tolerance: int | None = None) -> bool:
        """A group is settled when every balance is within tolerance of zero.

        Args:
            ledger: Group balances
            tolerance: Minor units (default: settings.settle_tolerance)
        """
        if tolerance is None:
            tolerance = settings.settle_tolerance
        return ledger.is_settled(tolerance)


def compute_balances(
    records: Iterable[ExpenseRecord | SplitRecord],
    settlements: Iterable[Settlement] = (),
    members: Iterable[Member] = (),
) -> BalanceLedger:
    """Net balances for a group. See BalanceService.compute_balances."""
    return BalanceService().compute_balances(records, settlements, members)
