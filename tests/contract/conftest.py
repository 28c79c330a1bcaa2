"""Fixtures for CLI contract tests."""

import json
import logging

import pytest


@pytest.fixture(autouse=True)
def restore_root_logger():
    """The CLI reconfigures the root logger; put it back after each test."""
    root_logger = logging.getLogger()
    original_handlers = root_logger.handlers.copy()
    original_level = root_logger.level
    yield
    for handler in root_logger.handlers[:]:
        handler.close()
        root_logger.removeHandler(handler)
    for handler in original_handlers:
        root_logger.addHandler(handler)
    root_logger.setLevel(original_level)


@pytest.fixture
def write_group(tmp_path):
    """Write a group dict to a JSON file and return its path."""

    def _write(group: dict, name: str = "group.json") -> str:
        path = tmp_path / name
        path.write_text(json.dumps(group), encoding="utf-8")
        return str(path)

    return _write


@pytest.fixture
def trip_group():
    """A pays 100.00, B pays 40.00 (both split A/B), then B pays A 10.00."""
    return {
        "name": "Trip",
        "currency": "USD",
        "members": ["A", "B"],
        "expenses": [
            {"id": "e1", "title": "Lunch", "amount": "100.00", "payer": "A", "members": ["A", "B"]},
            {"id": "e2", "title": "Taxi", "amount": "40.00", "payer": "B", "members": ["A", "B"]},
        ],
        "settlements": [{"id": "s1", "from": "B", "to": "A", "amount": "10.00"}],
    }
