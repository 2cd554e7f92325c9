"""Validation package."""

from smart_finance.validation.validator import TransactionValidator, to_decimal

__all__ = ["TransactionValidator", "to_decimal"]
