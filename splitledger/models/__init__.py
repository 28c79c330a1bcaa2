"""Split and ledger value types.

Exports:
  - SplitMode, EqualSplit, SharesSplit, PercentSplit, ExactSplit: split variants
  - SplitInput, SplitEntry, SplitRecord: calculator input and output
  - ExpenseKind, ExpenseRecord, Settlement: balance aggregator input
  - BalanceLedger, Debt, BalanceDetail, MemberSummary, ExpenseBreakdown: derived views
"""

from .ledger import (
    BalanceDetail,
    BalanceLedger,
    Debt,
    ExpenseBreakdown,
    ExpenseKind,
    ExpenseRecord,
    MemberSummary,
    Settlement,
)
from .split import (
    EqualSplit,
    ExactSplit,
    Member,
    PercentSplit,
    SharesSplit,
    Split,
    SplitEntry,
    SplitInput,
    SplitMode,
    SplitRecord,
    split_from_weights,
)

__all__ = [
    "Member",
    "SplitMode",
    "Split",
    "EqualSplit",
    "SharesSplit",
    "PercentSplit",
    "ExactSplit",
    "split_from_weights",
    "SplitInput",
    "SplitEntry",
    "SplitRecord",
    "ExpenseKind",
    "ExpenseRecord",
    "Settlement",
    "BalanceLedger",
    "Debt",
    "BalanceDetail",
    "MemberSummary",
    "ExpenseBreakdown",
]
