"""Pydantic schemas for a group snapshot file read by the CLI.

Amounts in the file are display decimals in the group currency ("12.50");
they are converted to minor units before reaching the engine.
"""

from decimal import Decimal
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from splitledger.models.ledger import ExpenseKind, ExpenseRecord, Settlement
from splitledger.models.split import SplitInput, SplitMode, split_from_weights
from splitledger.services.errors import GroupFileError
from splitledger.services.locale_service import to_minor_units
from splitledger.services.split_service import SplitService


class ExpenseIn(BaseModel):
    """One expense in a group file."""

    id: str | None = Field(None, description="Expense identifier")
    title: str = Field("", description="Expense title")
    amount: Decimal = Field(..., description="Expense total in display units")
    payer: str = Field(..., description="Member who paid")
    mode: SplitMode = Field(SplitMode.EQUAL, description="Split mode")
    members: list[str] = Field(default_factory=list, description="Members for an equal split")
    weights: dict[str, Decimal] = Field(
        default_factory=dict,
        description="Member -> share count, percent or exact display amount",
    )
    kind: ExpenseKind = Field(ExpenseKind.SHARED, description="shared or personal")
    settled: bool = Field(False, description="Whole expense already settled")
    paid: list[str] = Field(default_factory=list, description="Members who paid their part")

    @field_validator("mode", "kind", mode="before")
    @classmethod
    def _lower_enum(cls, value):
        return value.lower() if isinstance(value, str) else value

    def split_members(self, default_members: list[str]) -> list[str]:
        if self.members:
            return list(self.members)
        if self.weights:
            return list(self.weights)
        if self.kind is ExpenseKind.PERSONAL:
            return [self.payer]
        return list(default_members)

    def to_split_input(self, currency: str, default_members: list[str] = ()) -> SplitInput:
        """Engine input with amounts converted to minor units.

        Raises:
            InvalidAmount: If an amount does not fit the currency
        """
        total_amount = to_minor_units(self.amount, currency)

        if self.mode is SplitMode.EQUAL:
            weights = self.split_members(list(default_members))
        elif self.mode is SplitMode.SHARES:
            weights = [
                (member, int(value) if value == value.to_integral_value() else value)
                for member, value in self.weights.items()
            ]
        elif self.mode is SplitMode.EXACT:
            weights = [(member, to_minor_units(value, currency)) for member, value in self.weights.items()]
        else:
            weights = list(self.weights.items())

        return SplitInput(
            total_amount=total_amount,
            payer=self.payer,
            split=split_from_weights(self.mode, weights),
        )

    def to_expense_record(
        self,
        currency: str,
        default_members: list[str] = (),
        split_service: SplitService | None = None,
    ) -> ExpenseRecord:
        """Split the expense and wrap it for the balance aggregator.

        Raises:
            SplitValidationError: If the expense cannot be split
            GroupFileError: If a member marked paid is not in the split
        """
        split_service = split_service or SplitService()
        record = split_service.compute_split(self.to_split_input(currency, default_members))
        for member in self.paid:
            try:
                record = record.mark_paid(member)
            except KeyError as e:
                raise GroupFileError(
                    f"Member {member} marked paid is not part of expense {self.id or self.title!r}"
                ) from e
        return ExpenseRecord(
            split=record,
            settled=self.settled,
            expense_id=self.id,
            title=self.title,
            kind=self.kind,
        )


class SettlementIn(BaseModel):
    """Payment from one member to another."""

    id: str | None = Field(None, description="Settlement identifier")
    from_member: str = Field(..., alias="from", description="Member who paid")
    to_member: str = Field(..., alias="to", description="Member who received")
    amount: Decimal = Field(..., description="Amount in display units")

    model_config = ConfigDict(populate_by_name=True)

    def to_settlement(self, currency: str) -> Settlement:
        """Raises InvalidSettlement or InvalidAmount for bad payments."""
        return Settlement(
            from_member=self.from_member,
            to_member=self.to_member,
            amount=to_minor_units(self.amount, currency),
            settlement_id=self.id,
        )


class GroupFile(BaseModel):
    """Group snapshot: members, expense history and settlements."""

    name: str = Field("", description="Group name")
    currency: str | None = Field(None, description="ISO 4217 currency code")
    members: list[str] = Field(default_factory=list, description="Current group members")
    expenses: list[ExpenseIn] = Field(default_factory=list)
    settlements: list[SettlementIn] = Field(default_factory=list)

    @field_validator("currency")
    @classmethod
    def _upper_currency(cls, value: str | None) -> str | None:
        return value.strip().upper() if value else value

    @classmethod
    def from_path(cls, path: str | Path) -> "GroupFile":
        """Load and validate a group file.

        Raises:
            GroupFileError: If file is missing, unreadable or invalid
        """
        path = Path(path)
        try:
            content = path.read_text(encoding="utf-8")
        except OSError as e:
            raise GroupFileError(f"Cannot read group file: {path}. Error: {e}") from e

        try:
            return cls.model_validate_json(content)
        except ValidationError as e:
            raise GroupFileError(f"Group file is not valid: {path}. Error: {e}") from e

    def to_expense_records(self, currency: str, split_service: SplitService | None = None) -> list[ExpenseRecord]:
        split_service = split_service or SplitService()
        return [
            expense.to_expense_record(currency, self.members, split_service)
            for expense in self.expenses
        ]

    def to_settlements(self, currency: str) -> list[Settlement]:
        return [settlement.to_settlement(currency) for settlement in self.settlements]
