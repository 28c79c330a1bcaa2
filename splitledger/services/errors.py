"""Exception classes for split calculation and balance aggregation.

All failures are local validation errors raised before any result is built.
Callers show ``str(error)`` to the user as a form-validation message.
"""


class LedgerError(Exception):
    """Base exception for ledger engine errors."""

    pass


class SplitValidationError(LedgerError):
    """Split input rejected by the calculator."""

    pass


class InvalidAmount(SplitValidationError):
    """Expense total is not a positive amount of minor units."""

    pass


class EmptyMemberSet(SplitValidationError):
    """No members to split among."""

    pass


class DuplicateMember(SplitValidationError):
    """Same member listed more than once."""

    def __init__(self, member: str):
        super().__init__(f"Member listed more than once: {member}")
        self.member = member


class InvalidWeight(SplitValidationError):
    """Share, percent or exact weight out of range."""

    pass


class InvalidPercentTotal(SplitValidationError):
    """Percentages do not add up to 100 within tolerance."""

    pass


class ExactSumMismatch(SplitValidationError):
    """Exact amounts do not add up to the expense total."""

    def __init__(self, expected: int, actual: int):
        super().__init__(
            f"Exact amounts total ({actual}) must equal expense amount ({expected})"
        )
        self.expected = expected
        self.actual = actual


class InvalidSettlement(LedgerError):
    """Settlement payment with non-positive amount or same sender and receiver."""

    pass


class GroupFileError(LedgerError):
    """Group snapshot file missing, unreadable or invalid."""

    pass
