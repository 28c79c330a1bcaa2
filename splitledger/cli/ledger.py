"""CLI entry point for splitting expenses and showing group balances.

Usage:
    splitledger split --amount 100.00 --payer alice --member alice --member bob
    splitledger split --amount 90 --payer alice --mode shares --weight alice=1 --weight bob=2
    splitledger balances group.json [--json]

Exit Codes:
    0 - Success
    1 - Failure: invalid input or unreadable group file (details logged)

Logging:
    Level from --log-level, SPLITLEDGER_LOG_LEVEL or LOG_LEVEL (default INFO), written
    to stderr so command output stays clean
"""

import argparse
import json
import logging
import sys

from splitledger.models.ledger import BalanceLedger, Debt
from splitledger.models.split import SplitInput, SplitMode, SplitRecord, split_from_weights
from splitledger.schemas.group import GroupFile
from splitledger.services.balance_service import BalanceService
from splitledger.services.config import Settings, get_settings
from splitledger.services.errors import InvalidAmount, InvalidWeight, LedgerError
from splitledger.services.locale_service import (
    format_amount,
    from_minor_units,
    parse_amount,
    parse_decimal,
)
from splitledger.services.logging import setup_logging
from splitledger.services.settlement_service import SettlementService
from splitledger.services.split_service import SplitService

logger = logging.getLogger(__name__)


def parse_weight(value: str) -> tuple[str, str]:
    """Parse a MEMBER=VALUE command line weight."""
    member, sep, weight = value.partition("=")
    if not sep or not member.strip() or not weight.strip():
        raise argparse.ArgumentTypeError(f"Weight must look like MEMBER=VALUE: {value!r}")
    return member.strip(), weight.strip()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="splitledger", description="Split expenses and settle group balances")
    parser.add_argument("--currency", default=None, help="ISO 4217 currency code (default: from settings)")
    parser.add_argument("--locale", default=None, help="Locale for amounts (default: from settings)")
    parser.add_argument("--log-level", default=None, help="Logging level")
    parser.add_argument("--log-file", default=None, help="Also write logs to this file")

    subparsers = parser.add_subparsers(dest="command", required=True)

    split_parser = subparsers.add_parser("split", help="Split one expense")
    split_parser.add_argument("--amount", required=True, help="Expense total, e.g. 12.50")
    split_parser.add_argument("--payer", required=True, help="Member who paid")
    split_parser.add_argument(
        "--mode",
        choices=[mode.value for mode in SplitMode],
        default=SplitMode.EQUAL.value,
        help="Split mode (default: equal)",
    )
    split_parser.add_argument(
        "--member", action="append", default=[], help="Member in an equal split (repeatable)"
    )
    split_parser.add_argument(
        "--weight",
        action="append",
        type=parse_weight,
        default=[],
        help="MEMBER=VALUE share count, percent or exact amount (repeatable)",
    )

    balances_parser = subparsers.add_parser("balances", help="Show balances for a group file")
    balances_parser.add_argument("group_file", help="Path to group JSON file")

    for subparser in (split_parser, balances_parser):
        subparser.add_argument("--json", action="store_true", help="Print machine-readable JSON")

    return parser


def build_split_input(args: argparse.Namespace, currency: str, locale: str) -> SplitInput:
    """Convert command line split arguments to engine input.

    Raises:
        InvalidAmount: If the total or an exact amount is not a valid amount
        InvalidWeight: If a share count or percent is not a number
    """
    mode = SplitMode(args.mode)
    total_amount = parse_amount(args.amount, currency, locale)

    if mode is SplitMode.EQUAL:
        weights = args.member or [member for member, _ in args.weight]
    elif mode is SplitMode.SHARES:
        weights = []
        for member, value in args.weight:
            try:
                weights.append((member, int(value)))
            except ValueError as e:
                raise InvalidWeight(f"Share count for {member} must be a positive integer: {value!r}") from e
    elif mode is SplitMode.PERCENT:
        weights = []
        for member, value in args.weight:
            try:
                weights.append((member, parse_decimal(value, locale)))
            except InvalidAmount as e:
                raise InvalidWeight(f"Percent for {member} must be a number: {value!r}") from e
    else:
        weights = [(member, parse_amount(value, currency, locale)) for member, value in args.weight]

    return SplitInput(total_amount=total_amount, payer=args.payer, split=split_from_weights(mode, weights))


def _debt_to_dict(debt: Debt, currency: str) -> dict:
    return {
        "from": debt.from_member,
        "to": debt.to_member,
        "amount": str(from_minor_units(debt.amount, currency)),
    }


def print_split(record: SplitRecord, currency: str, locale: str, as_json: bool) -> None:
    if as_json:
        payload = {
            "currency": currency,
            "total": str(from_minor_units(record.total_amount, currency)),
            "payer": record.payer,
            "mode": record.mode.value,
            "entries": [
                {
                    "member": entry.member,
                    "owed": str(from_minor_units(entry.owed_amount, currency)),
                    "percent": str(entry.percent_of_total),
                }
                for entry in record.entries
            ],
        }
        print(json.dumps(payload, indent=2))
        return

    print(f"{format_amount(record.total_amount, currency, locale)} paid by {record.payer} ({record.mode.value})")
    for entry in record.entries:
        owed = format_amount(entry.owed_amount, currency, locale)
        print(f"  {entry.member:<16} {owed:>14}  {entry.percent_of_total}%")


def print_balances(
    ledger: BalanceLedger,
    transfers: list[Debt],
    settled: bool,
    shared_total: int,
    currency: str,
    locale: str,
    as_json: bool,
) -> None:
    if as_json:
        payload = {
            "currency": currency,
            "shared_total": str(from_minor_units(shared_total, currency)),
            "balances": {member: str(from_minor_units(amount, currency)) for member, amount in ledger.items()},
            "transfers": [_debt_to_dict(debt, currency) for debt in transfers],
            "settled": settled,
        }
        print(json.dumps(payload, indent=2))
        return

    print(f"Shared expenses: {format_amount(shared_total, currency, locale)}")
    print(f"Balances ({currency}):")
    for member, amount in ledger.items():
        sign = "+" if amount > 0 else "-" if amount < 0 else " "
        print(f"  {member:<16} {sign}{format_amount(abs(amount), currency, locale)}")

    if settled:
        print("All settled up")
        return

    print("Settle up:")
    for debt in transfers:
        print(f"  {debt.from_member} -> {debt.to_member}: {format_amount(debt.amount, currency, locale)}")


def run_split(args: argparse.Namespace, config: Settings, currency: str, locale: str) -> int:
    split_input = build_split_input(args, currency, locale)
    record = SplitService(config.percent_tolerance).compute_split(split_input)
    print_split(record, currency, locale, args.json)
    return 0


def run_balances(args: argparse.Namespace, config: Settings, currency: str | None, locale: str) -> int:
    group = GroupFile.from_path(args.group_file)
    currency = currency or group.currency or config.currency

    records = group.to_expense_records(currency, SplitService(config.percent_tolerance))
    settlements = group.to_settlements(currency)

    balance_service = BalanceService()
    ledger = balance_service.compute_balances(records, settlements, group.members)
    transfers = SettlementService(balance_service).simplify_debts(ledger, config.settle_tolerance)
    settled = balance_service.is_group_settled(ledger, config.settle_tolerance)

    logger.info(
        f"Group {group.name or args.group_file}: {len(records)} expenses, "
        f"{len(settlements)} settlements, {len(transfers)} transfers to settle"
    )
    print_balances(
        ledger,
        transfers,
        settled,
        balance_service.shared_total(records),
        currency,
        locale,
        args.json,
    )
    return 0


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point for the splitledger CLI.

    Returns:
        Exit code: 0 for success, 1 for failure
    """
    args = build_parser().parse_args(argv)
    config = get_settings()

    setup_logging(
        args.log_file or config.log_file,
        args.log_level or config.log_level,
        stream=sys.stderr,
    )
    locale = args.locale or config.locale
    currency = args.currency.upper() if args.currency else None

    try:
        if args.command == "split":
            return run_split(args, config, currency or config.currency, locale)
        return run_balances(args, config, currency, locale)
    except LedgerError as e:
        logger.error(f"{args.command} failed: {e}")
        return 1
    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return 1


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
