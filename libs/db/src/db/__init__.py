"""db: shared database library (SQLAlchemy).

Public exports
--------------
- ``metadata`` and ``transactions_table`` from ``db.models.ledger``
- Engine/session helpers in ``db.client``
- ``init_schema`` in ``db.schema``
"""

from __future__ import annotations

from .models.ledger import DEFAULT_TABLE_NAME, metadata, transactions_table
from .schema import init_schema

__all__ = [
    "DEFAULT_TABLE_NAME",
    "metadata",
    "transactions_table",
    "init_schema",
]
