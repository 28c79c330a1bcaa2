"""Pytest configuration - pins engine settings before any splitledger import."""

import os

# Set engine settings BEFORE any imports from splitledger
# so the module-level settings instance is predictable
os.environ["SPLITLEDGER_LOCALE"] = "en_US"
os.environ["SPLITLEDGER_CURRENCY"] = "USD"
os.environ["SPLITLEDGER_PERCENT_TOLERANCE"] = "0.001"
os.environ["SPLITLEDGER_SETTLE_TOLERANCE"] = "0"

import pytest  # noqa: E402

from splitledger.models import ExpenseRecord, Settlement  # noqa: E402
from splitledger.services.split_service import compute_split  # noqa: E402


@pytest.fixture
def lunch_record():
    """A pays 100 split equally between A and B."""
    return ExpenseRecord(
        split=compute_split(100, "A", "equal", ["A", "B"]),
        expense_id="e1",
        title="Lunch",
    )


@pytest.fixture
def taxi_record():
    """B pays 40 split equally between A and B."""
    return ExpenseRecord(
        split=compute_split(40, "B", "equal", ["A", "B"]),
        expense_id="e2",
        title="Taxi",
    )


@pytest.fixture
def b_pays_a_ten():
    """Settlement of 10 from B to A."""
    return Settlement(from_member="B", to_member="A", amount=10, settlement_id="s1")
