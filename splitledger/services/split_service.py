"""Split calculator for distributing one expense across group members.

Supports split modes:
- EQUAL: Same amount for every member
- SHARES: Distribute by integer share count
- PERCENT: Distribute by percentage (must add up to 100)
- EXACT: Literal per-member amounts (must add up to the total)

All arithmetic is done on integer minor units (and exact fractions for
percentages), so owed amounts always add up to the expense total.
"""

import logging
import math
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from fractions import Fraction
from typing import Iterable, Sequence

from splitledger.models.split import (
    EqualSplit,
    ExactSplit,
    Member,
    PercentSplit,
    SharesSplit,
    SplitEntry,
    SplitInput,
    SplitMode,
    SplitRecord,
    split_from_weights,
)
from splitledger.services.config import settings
from splitledger.services.errors import (
    DuplicateMember,
    EmptyMemberSet,
    ExactSumMismatch,
    InvalidAmount,
    InvalidPercentTotal,
    InvalidWeight,
)

logger = logging.getLogger(__name__)

PERCENT_QUANTUM = Decimal("0.0001")
HUNDRED = Decimal(100)


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _percent(fraction: Fraction) -> Decimal:
    """Convert an exact fraction of 100 to a display percentage."""
    value = Decimal(fraction.numerator) / Decimal(fraction.denominator)
    return value.quantize(PERCENT_QUANTUM, rounding=ROUND_HALF_UP)


class SplitService:
    """Split calculator for the four split modes."""

    def __init__(self, percent_tolerance: Decimal | None = None):
        """Initialize split calculator.

        Args:
            percent_tolerance: Allowed distance of a percent split total from
                100 (default: settings.percent_tolerance)
        """
        if percent_tolerance is None:
            percent_tolerance = settings.percent_tolerance
        self.percent_tolerance = Decimal(str(percent_tolerance))

    def distribute_with_remainder(
        self,
        total_amount: int,
        weights: Sequence[Fraction | int],
    ) -> list[int]:
        """Distribute minor units by weight, handing out the remainder in input order.

        Ensures: sum(result) == total_amount (zero money loss/creation)

        Algorithm:
        1. Raw amount per member: total * weight / sum(weights) (exact fraction)
        2. Floor every raw amount to whole minor units
        3. Remainder = total - sum(floors), always smaller than the number of
           members with a positive weight
        4. Give 1 minor unit each to the first members in input order,
           skipping members with zero weight

        Input order decides who absorbs the rounding remainder, so callers
        get the same result for the same member order.

        Args:
            total_amount: Amount to distribute in minor units
            weights: Non-negative weights in member order, not all zero

        Returns:
            Amounts in the same order as weights
        """
        total_weight = sum(weights)
        amounts = [math.floor(Fraction(total_amount) * weight / total_weight) for weight in weights]

        remainder = total_amount - sum(amounts)
        for i, weight in enumerate(weights):
            if remainder == 0:
                break
            if weight > 0:
                amounts[i] += 1
                remainder -= 1

        return amounts

    def split_equal(self, total_amount: int, payer: Member, split: EqualSplit) -> list[SplitEntry]:
        """Split equally; the first members in input order absorb the remainder."""
        count = len(split.members)
        amounts = self.distribute_with_remainder(total_amount, [1] * count)
        percent = _percent(Fraction(100, count))
        return [
            SplitEntry(
                member=member,
                share_weight=1,
                percent_of_total=percent,
                owed_amount=amount,
                payer=payer,
            )
            for member, amount in zip(split.members, amounts)
        ]

    def split_shares(self, total_amount: int, payer: Member, split: SharesSplit) -> list[SplitEntry]:
        """Split by positive integer share counts.

        Raises:
            InvalidWeight: If any share count is not a positive integer
        """
        for member, shares in split.weights:
            if not _is_int(shares) or shares <= 0:
                raise InvalidWeight(f"Share count for {member} must be a positive integer: {shares!r}")

        shares = [weight for _, weight in split.weights]
        total_shares = sum(shares)
        amounts = self.distribute_with_remainder(total_amount, shares)
        return [
            SplitEntry(
                member=member,
                share_weight=weight,
                percent_of_total=_percent(Fraction(100 * weight, total_shares)),
                owed_amount=amount,
                payer=payer,
            )
            for (member, weight), amount in zip(split.weights, amounts)
        ]

    def split_percent(self, total_amount: int, payer: Member, split: PercentSplit) -> list[SplitEntry]:
        """Split by percentages that add up to 100 within tolerance.

        Amounts are taken against the actual percent total, which is exactly
        ``total * percent / 100`` when percentages add up to 100.

        Raises:
            InvalidWeight: If a percentage is negative or not a number
            InvalidPercentTotal: If percentages do not add up to 100
        """
        percents = []
        for member, value in split.weights:
            percents.append(self._to_percent(member, value))

        percent_total = sum(percents)
        if percent_total == 0 or abs(percent_total - HUNDRED) > self.percent_tolerance:
            raise InvalidPercentTotal(f"Percentages must sum to 100% (current: {percent_total}%)")

        fractions = [Fraction(percent) for percent in percents]
        amounts = self.distribute_with_remainder(total_amount, fractions)
        return [
            SplitEntry(
                member=member,
                share_weight=percent,
                percent_of_total=percent.quantize(PERCENT_QUANTUM, rounding=ROUND_HALF_UP),
                owed_amount=amount,
                payer=payer,
            )
            for (member, _), percent, amount in zip(split.weights, percents, amounts)
        ]

    def split_exact(self, total_amount: int, payer: Member, split: ExactSplit) -> list[SplitEntry]:
        """Use literal per-member amounts.

        Raises:
            InvalidWeight: If an amount is negative or not an integer
            ExactSumMismatch: If amounts do not add up to the total
        """
        for member, amount in split.weights:
            if not _is_int(amount) or amount < 0:
                raise InvalidWeight(f"Exact amount for {member} must be a non-negative integer: {amount!r}")

        exact_total = sum(amount for _, amount in split.weights)
        if exact_total != total_amount:
            raise ExactSumMismatch(expected=total_amount, actual=exact_total)

        return [
            SplitEntry(
                member=member,
                share_weight=amount,
                percent_of_total=_percent(Fraction(100 * amount, total_amount)),
                owed_amount=amount,
                payer=payer,
            )
            for member, amount in split.weights
        ]

    def compute_split(self, split_input: SplitInput) -> SplitRecord:
        """Split one expense according to its split mode.

        Validation happens before any entry is built; a failed split never
        yields a partial record.

        Args:
            split_input: Total, payer and split variant

        Returns:
            SplitRecord whose owed amounts sum exactly to the total

        Raises:
            InvalidAmount: If total is not a positive integer
            EmptyMemberSet: If there is nobody to split among
            DuplicateMember: If a member appears twice
            InvalidWeight, InvalidPercentTotal, ExactSumMismatch: Mode-specific
        """
        total_amount = split_input.total_amount
        split = split_input.split

        if not _is_int(total_amount) or total_amount <= 0:
            raise InvalidAmount(f"Expense amount must be a positive number of minor units: {total_amount!r}")

        members = split.members
        if not members:
            raise EmptyMemberSet("At least one member is required")

        seen = set()
        for member in members:
            if member in seen:
                raise DuplicateMember(member)
            seen.add(member)

        if isinstance(split, EqualSplit):
            entries = self.split_equal(total_amount, split_input.payer, split)
        elif isinstance(split, SharesSplit):
            entries = self.split_shares(total_amount, split_input.payer, split)
        elif isinstance(split, PercentSplit):
            entries = self.split_percent(total_amount, split_input.payer, split)
        elif isinstance(split, ExactSplit):
            entries = self.split_exact(total_amount, split_input.payer, split)
        else:
            raise TypeError(f"Unknown split variant: {type(split).__name__}")

        logger.debug(
            f"Split {total_amount} paid by {split_input.payer} "
            f"({split.mode.value}) among {len(members)} members"
        )

        return SplitRecord(
            total_amount=total_amount,
            payer=split_input.payer,
            mode=split.mode,
            entries=tuple(entries),
        )

    @staticmethod
    def _to_percent(member: Member, value) -> Decimal:
        if isinstance(value, bool):
            raise InvalidWeight(f"Percent for {member} must be a number: {value!r}")
        try:
            percent = value if isinstance(value, Decimal) else Decimal(str(value))
        except InvalidOperation as e:
            raise InvalidWeight(f"Percent for {member} must be a number: {value!r}") from e
        if not percent.is_finite() or percent < 0:
            raise InvalidWeight(f"Percent for {member} must be a non-negative number: {value!r}")
        return percent


def compute_split(
    total_amount: int,
    payer: Member,
    mode: SplitMode | str,
    weights: Iterable,
    percent_tolerance: Decimal | None = None,
) -> SplitRecord:
    """Split an expense given as loose mode and weights.

    Args:
        total_amount: Expense total in minor units
        payer: Member who paid
        mode: Split mode or its string value
        weights: (member, weight) pairs or mapping; members only for EQUAL
        percent_tolerance: Override for the percent total tolerance

    Returns:
        SplitRecord

    Raises:
        SplitValidationError: Subclass describing the rejected input
        ValueError: If mode is unknown
    """
    split = split_from_weights(mode, weights)
    service = SplitService(percent_tolerance)
    return service.compute_split(SplitInput(total_amount=total_amount, payer=payer, split=split))
