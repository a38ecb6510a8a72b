"""Core table definition for imported ledger transactions.

The table name is chosen at runtime (``DB_TABLE``), so the table is described
with SQLAlchemy Core and built per name by :func:`transactions_table` instead
of a fixed declarative class. Every table built here shares :data:`metadata`.

Columns mirror one parsed CSV row. Currency values are stored as exact
``NUMERIC(13,4)``; ``(account, tx_id)`` is the natural key used by both the
conflict-safe insert and the resume-point query.
"""

from __future__ import annotations

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    Index,
    Integer,
    MetaData,
    Numeric,
    PrimaryKeyConstraint,
    Table,
    Text,
)

DEFAULT_TABLE_NAME = "transactions"

metadata = MetaData()


def transactions_table(name: str = DEFAULT_TABLE_NAME) -> Table:
    """Return the transactions ``Table`` named ``name``, creating it on first use."""

    existing = metadata.tables.get(name)
    if existing is not None:
        return existing

    return Table(
        name,
        metadata,
        Column("account", Text, nullable=False),
        Column("tx_id", Integer, nullable=False),
        Column("tx_date", Date, nullable=False),
        Column("amount", Numeric(13, 4), nullable=False),
        Column("balance", Numeric(13, 4), nullable=False),
        Column("vendor", Text, nullable=False),
        Column("digits", Text, nullable=True),
        Column("transaction_type", Text, nullable=False),
        Column("category", Text, nullable=True),
        Column("subcategory", Text, nullable=True),
        Column("notes", Text, nullable=True),
        Column("income", Boolean, nullable=False),
        Column("fixed", Boolean, nullable=False),
        Column("spend", Boolean, nullable=False),
        PrimaryKeyConstraint("account", "tx_id", name=f"pk_{name}"),
        # Index names are schema-wide in Postgres; scope them by table name.
        Index(f"idx_{name}_tx_date", "tx_date"),
        Index(f"idx_{name}_vendor", "vendor"),
        Index(f"idx_{name}_category", "category"),
        Index(f"idx_{name}_tx_type", "transaction_type"),
    )


__all__ = [
    "DEFAULT_TABLE_NAME",
    "metadata",
    "transactions_table",
]
