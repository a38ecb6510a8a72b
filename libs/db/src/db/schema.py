"""Schema initialization for the ledger transactions table.

Only ``CREATE ... IF NOT EXISTS`` semantics are provided: the table and its
indexes are created when absent and left untouched otherwise. There is no
versioning or migration of an existing table.
"""

from __future__ import annotations

from sqlalchemy import Table
from sqlalchemy.engine import Engine

from .models.ledger import DEFAULT_TABLE_NAME, transactions_table


def init_schema(engine: Engine, table_name: str = DEFAULT_TABLE_NAME) -> Table:
    """Create ``table_name`` and its indexes in a single transaction if missing."""

    table = transactions_table(table_name)
    with engine.begin() as conn:
        # checkfirst also covers the table's indexes
        table.create(bind=conn, checkfirst=True)
    return table


__all__ = ["init_schema"]
