"""Query execution package."""

from smart_finance.queries.engine import TransactionQueryEngine

__all__ = ["TransactionQueryEngine"]
