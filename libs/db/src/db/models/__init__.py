"""Shared SQLAlchemy table registry for the workspace database.

Currently includes the ledger transactions table used by ``financial_import``.
"""

from .ledger import DEFAULT_TABLE_NAME, metadata, transactions_table

__all__ = [
    "DEFAULT_TABLE_NAME",
    "metadata",
    "transactions_table",
]
