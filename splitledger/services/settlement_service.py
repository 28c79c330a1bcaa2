"""Settle-up planning and bulk settling of a group's expense history.

Planning turns net balances into a short list of payments. Settling marks
split entries paid on the expense records themselves and returns new
records for the caller to store.
"""

import logging
from collections import deque
from dataclasses import replace
from typing import Iterable

from splitledger.models.ledger import BalanceLedger, Debt, ExpenseRecord, Settlement
from splitledger.models.split import Member, SplitRecord
from splitledger.services.balance_service import BalanceService, as_expense_record
from splitledger.services.config import settings

logger = logging.getLogger(__name__)


class SettlementService:
    """Plan payments that bring every balance back to zero."""

    def __init__(self, balance_service: BalanceService | None = None):
        self.balance_service = balance_service or BalanceService()

    def simplify_debts(self, ledger: BalanceLedger, tolerance: int | None = None) -> list[Debt]:
        """
        Greedy algorithm to minimize number of transactions.

        Largest debtor pays largest creditor until one of them is square,
        then moves on. Ties are broken by member id so the plan is stable.
        Amounts are whole minor units, so with zero tolerance applying every
        transfer settles the ledger exactly.

        Args:
            ledger: Group balances
            tolerance: Members whose balance is within this many minor units
                of zero are left out of the plan (default: settings.settle_tolerance)
        """
        if tolerance is None:
            tolerance = settings.settle_tolerance

        creditors = deque(
            [member, amount]
            for member, amount in sorted(ledger.creditors().items(), key=lambda x: (-x[1], x[0]))
            if amount > tolerance
        )
        debtors = deque(
            [member, amount]
            for member, amount in sorted(ledger.debtors().items(), key=lambda x: (-x[1], x[0]))
            if amount > tolerance
        )

        transfers: list[Debt] = []

        while creditors and debtors:
            cred_id, cred_amt = creditors[0]
            debt_id, debt_amt = debtors[0]

            pay_amt = min(cred_amt, debt_amt)
            transfers.append(Debt(from_member=debt_id, to_member=cred_id, amount=pay_amt))

            creditors.popleft()
            debtors.popleft()

            if cred_amt > pay_amt:
                creditors.appendleft([cred_id, cred_amt - pay_amt])
            if debt_amt > pay_amt:
                debtors.appendleft([debt_id, debt_amt - pay_amt])

        logger.debug(f"Planned {len(transfers)} transfers for {len(ledger)} members")
        return transfers

    def settle_up_plan(
        self,
        records: Iterable[ExpenseRecord | SplitRecord],
        settlements: Iterable[Settlement] = (),
        tolerance: int | None = None,
    ) -> list[Debt]:
        """Simplified transfers for a group's current outstanding balances."""
        ledger = self.balance_service.compute_balances(records, settlements)
        return self.simplify_debts(ledger, tolerance)

    @staticmethod
    def to_settlements(transfers: Iterable[Debt]) -> list[Settlement]:
        """Settlement events recording that the planned transfers were paid."""
        return [
            Settlement(from_member=debt.from_member, to_member=debt.to_member, amount=debt.amount)
            for debt in transfers
        ]

    def settle_between(
        self,
        records: Iterable[ExpenseRecord | SplitRecord],
        from_member: Member,
        to_member: Member,
    ) -> tuple[list[ExpenseRecord], list[str | None]]:
        """Mark every open split between two members as paid, in both directions.

        On each unsettled shared expense paid by one of the two, the other
        member's unpaid entry is flagged paid. An expense becomes settled
        once every member other than its payer has paid.

        Args:
            records: Expense history
            from_member: Member settling up
            to_member: Member being settled with

        Returns:
            (records, expense_ids): the full history with changed records
            replaced by new ones, and the ids of the expenses that changed
        """
        updated: list[ExpenseRecord] = []
        touched: list[str | None] = []

        for record in map(as_expense_record, records):
            if record.is_shared and not record.settled and record.payer in (from_member, to_member):
                other = to_member if record.payer == from_member else from_member
                entry = record.split.entry(other)
                if entry is not None and not entry.paid:
                    split = record.split.mark_paid(other)
                    record = replace(record, split=split, settled=split.is_fully_paid)
                    touched.append(record.expense_id)
            updated.append(record)

        logger.debug(f"Settled {len(touched)} expenses between {from_member} and {to_member}")
        return updated, touched

    def settle_all(
        self, records: Iterable[ExpenseRecord | SplitRecord]
    ) -> tuple[list[ExpenseRecord], list[str | None]]:
        """Mark every entry of every open shared expense paid and settle it.

        Returns:
            (records, expense_ids): the full history with settled copies in
            place of open expenses, and the ids of the expenses settled
        """
        updated: list[ExpenseRecord] = []
        touched: list[str | None] = []

        for record in map(as_expense_record, records):
            if record.is_shared and not record.settled:
                record = replace(record, split=record.split.mark_all_paid(), settled=True)
                touched.append(record.expense_id)
            updated.append(record)

        logger.debug(f"Settled all {len(touched)} open expenses")
        return updated, touched


def simplify_debts(ledger: BalanceLedger, tolerance: int | None = None) -> list[Debt]:
    """Greedy settle-up transfers for a ledger. See SettlementService.simplify_debts."""
    return SettlementService().simplify_debts(ledger, tolerance)
