"""Split calculation and balance ledger engine for shared group expenses."""

from splitledger.services.balance_service import compute_balances
from splitledger.services.settlement_service import simplify_debts
from splitledger.services.split_service import compute_split

__version__ = "0.1.0"

__all__ = ["compute_split", "compute_balances", "simplify_debts", "__version__"]
