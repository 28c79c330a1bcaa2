"""Pydantic schemas for group snapshot files."""

from .group import ExpenseIn, GroupFile, SettlementIn

__all__ = ["ExpenseIn", "SettlementIn", "GroupFile"]
