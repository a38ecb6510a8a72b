# ruff: noqa: I001
"""Chunked, conflict-safe persistence of transaction records.

Records are written in fixed-size chunks, one transaction per chunk, with
chunks processed strictly in order. Within a chunk every row is inserted under
its own SAVEPOINT so a single bad row is rolled back alone:

- a row whose ``(account, tx_id)`` already exists is a silent no-op
  (``ON CONFLICT DO NOTHING``) and is counted as a duplicate;
- a row rejected by the database (constraint violation, bad value) is
  recorded as a :class:`RowPersistError` and the chunk carries on;
- a failure to begin or commit the chunk's transaction raises
  :class:`ChunkTransactionError`; earlier chunks stay committed.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from sqlalchemy import Table
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import DataError, IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.sql.dml import Insert

from db.models.ledger import DEFAULT_TABLE_NAME, transactions_table
from .errors import ChunkTransactionError, RowPersistError
from .logging_setup import get_logger
from .models import ChunkOutcome, PersistResult, TransactionRecord

DEFAULT_CHUNK_SIZE = 50

# Errors confined to the row that caused them; anything else aborts the chunk.
_ROW_ERRORS = (IntegrityError, DataError)

logger = get_logger("financial_import.persistence")


def row_values(record: TransactionRecord) -> dict[str, Any]:
    """Column values for ``record``; currency goes in as exact ``Decimal``."""

    return {
        "account": record.account,
        "tx_id": record.id,
        "tx_date": record.date.date(),
        "amount": record.amount.to_decimal(),
        "balance": record.balance.to_decimal(),
        "vendor": record.vendor,
        "digits": record.digits,
        "transaction_type": record.transaction_type,
        "category": record.category,
        "subcategory": record.subcategory,
        "notes": record.notes,
        "income": record.income,
        "fixed": record.fixed,
        "spend": record.spend,
    }


def conflict_safe_insert(session: Session, table: Table) -> Insert:
    """Build ``INSERT ... ON CONFLICT (account, tx_id) DO NOTHING`` for the session's dialect."""

    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        stmt = pg_insert(table)
    elif dialect == "sqlite":
        stmt = sqlite_insert(table)
    else:
        raise NotImplementedError(f"conflict-safe insert is not supported on {dialect!r}")
    return stmt.on_conflict_do_nothing(index_elements=[table.c.account, table.c.tx_id])


def chunked(
    records: Sequence[TransactionRecord], size: int
) -> list[Sequence[TransactionRecord]]:
    if size <= 0:
        raise ValueError("chunk size must be a positive integer")
    return [records[i : i + size] for i in range(0, len(records), size)]


class BatchImporter:
    """Persist records into one table, chunk by chunk."""

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        *,
        table_name: str = DEFAULT_TABLE_NAME,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        if chunk_size <= 0:
            raise ValueError("chunk size must be a positive integer")
        self._session_factory = session_factory
        self.table = transactions_table(table_name)
        self.chunk_size = chunk_size

    def persist(self, records: Sequence[TransactionRecord]) -> PersistResult:
        """Insert ``records``; returns per-chunk outcomes.

        Raises :class:`ChunkTransactionError` on the first chunk whose
        transaction cannot begin or commit. Its ``partial`` attribute holds the
        outcomes of the chunks committed before it.
        """

        outcomes: list[ChunkOutcome] = []
        for index, chunk in enumerate(chunked(records, self.chunk_size)):
            logger.debug("Attempting to insert chunk of %d records.", len(chunk))
            try:
                outcome = self._persist_chunk(index, chunk)
            except SQLAlchemyError as e:
                logger.error("Chunk %d of %d records aborted: %s", index, len(chunk), e)
                raise ChunkTransactionError(index, e, PersistResult(tuple(outcomes))) from e
            outcomes.append(outcome)
            logger.debug(
                "Chunk of %d records committed (%d inserted, %d already present, %d failed).",
                len(chunk),
                outcome.inserted,
                outcome.duplicates,
                len(outcome.failures),
            )
        return PersistResult(tuple(outcomes))

    def _persist_chunk(self, index: int, chunk: Sequence[TransactionRecord]) -> ChunkOutcome:
        inserted = 0
        duplicates = 0
        failures: list[RowPersistError] = []

        with self._session_factory.begin() as session:
            # Acquire the connection now so a failed BEGIN is chunk-scoped.
            session.connection()
            stmt = conflict_safe_insert(session, self.table)
            for record in chunk:
                savepoint = session.begin_nested()
                try:
                    result = session.execute(stmt.values(**row_values(record)))
                except _ROW_ERRORS as e:
                    savepoint.rollback()
                    failure = RowPersistError(record.account, record.id, e.orig or e)
                    logger.error("Could not insert row %s/%s: %s", record.account, record.id, e)
                    failures.append(failure)
                    continue
                savepoint.commit()
                if result.rowcount:
                    inserted += 1
                else:
                    duplicates += 1

        return ChunkOutcome(
            index=index,
            attempted=len(chunk),
            inserted=inserted,
            duplicates=duplicates,
            failures=tuple(failures),
        )


def persist_records(
    session_factory: sessionmaker[Session],
    records: Sequence[TransactionRecord],
    *,
    table_name: str = DEFAULT_TABLE_NAME,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> PersistResult:
    """Functional shorthand for ``BatchImporter(...).persist(records)``."""

    return BatchImporter(session_factory, table_name=table_name, chunk_size=chunk_size).persist(
        records
    )


__all__ = [
    "DEFAULT_CHUNK_SIZE",
    "BatchImporter",
    "chunked",
    "conflict_safe_insert",
    "persist_records",
    "row_values",
]
