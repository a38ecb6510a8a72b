# ruff: noqa: I001
"""Workflow orchestrator for end-to-end CSV imports.

Composes the pieces behind one importable API:

    file → decode (bad rows tallied) → [new rows only] resume filter → chunked persist

A directory run imports each ``*.csv`` file independently and keeps going when
one file fails; only an unreachable database stops the whole invocation, and
that is detected before the pipeline starts (see ``financial_import.database``).
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from os import PathLike
from pathlib import Path

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from db.client import session_scope
from db.models.ledger import DEFAULT_TABLE_NAME
from ..config import ImportSettings
from ..errors import ChunkTransactionError, FileReadError
from ..ingest.utils import read_transactions_csv
from ..logging_setup import get_logger
from ..models import (
    ChunkOutcome,
    FileOutcome,
    ImportJob,
    LoadMode,
    PersistResult,
    RunSummary,
    TransactionRecord,
)
from ..persistence import DEFAULT_CHUNK_SIZE, BatchImporter
from ..resume import group_by_account, select_new_in_group

logger = get_logger("financial_import.workflows")


def csv_files_in(directory: Path) -> list[Path]:
    """Regular ``*.csv`` files directly under ``directory``, sorted by name."""

    return sorted(p for p in directory.iterdir() if p.is_file() and p.suffix.lower() == ".csv")


class ImportPipeline:
    """Run import jobs against one table through a shared session factory."""

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        *,
        table_name: str = DEFAULT_TABLE_NAME,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        self._session_factory = session_factory
        self._importer = BatchImporter(
            session_factory, table_name=table_name, chunk_size=chunk_size
        )

    @classmethod
    def from_settings(
        cls, session_factory: sessionmaker[Session], settings: ImportSettings
    ) -> ImportPipeline:
        return cls(session_factory, table_name=settings.table_name, chunk_size=settings.chunk_size)

    def run(self, job: ImportJob) -> RunSummary:
        if job.is_directory:
            return self.import_directory(job.source, job.mode)
        return RunSummary(files=[self.import_file(job.source, job.mode)])

    def import_directory(self, directory: str | PathLike[str], mode: LoadMode) -> RunSummary:
        d = Path(directory)
        try:
            paths = csv_files_in(d)
        except OSError as e:
            error = FileReadError(d, e.strerror or str(e))
            logger.error("%s", error)
            return RunSummary(files=[FileOutcome(path=d, error=error)])

        outcomes = [self.import_file(p, mode) for p in paths]
        summary = RunSummary(files=outcomes)
        logger.info(
            "Imported %d of %d files from %s (%d rows inserted, %d rows skipped).",
            len(outcomes) - len(summary.failed_files),
            len(outcomes),
            d,
            summary.inserted,
            summary.skipped_rows,
        )
        for failed in summary.failed_files:
            logger.error("Import failed for %s: %s", failed.path, failed.error)
        return summary

    def import_file(self, path: str | PathLike[str], mode: LoadMode) -> FileOutcome:
        """Import one file; failures are reported on the outcome, not raised."""

        p = Path(path)
        try:
            tally = read_transactions_csv(p)
        except FileReadError as e:
            logger.error("Could not read csv file. Aborting: %s", e)
            return FileOutcome(path=p, error=e)

        selected = 0
        chunks: list[ChunkOutcome] = []
        error: Exception | None = None
        try:
            for batch in self._batches(tally.records, mode):
                selected += len(batch)
                chunks.extend(self._importer.persist(batch).chunks)
        except SQLAlchemyError as e:
            logger.error("Could not resolve resume points for %s: %s", p, e)
            error = e
        except ChunkTransactionError as e:
            chunks.extend(e.partial.chunks)
            error = e

        result = PersistResult(tuple(chunks))
        if error is None:
            logger.info(
                "Finished %s: %d decoded, %d skipped, %d inserted, %d already present, %d failed.",
                p.name,
                tally.decoded,
                tally.skipped,
                result.inserted,
                result.duplicates,
                len(result.failures),
            )
        return FileOutcome(
            path=p,
            decoded=tally.decoded,
            skipped=tally.skipped,
            selected=selected,
            persist=result,
            error=error,
        )

    def _batches(
        self, records: Sequence[TransactionRecord], mode: LoadMode
    ) -> Iterator[Sequence[TransactionRecord]]:
        if mode is LoadMode.FULL:
            yield records
            return
        # Each run is resolved only after the previous one has been persisted.
        for account, group in group_by_account(records):
            with session_scope(self._session_factory) as session:
                fresh = select_new_in_group(session, account, group, self._importer.table)
            if fresh:
                yield fresh


def run_import(
    session_factory: sessionmaker[Session],
    source: str | PathLike[str],
    mode: LoadMode = LoadMode.FULL,
    *,
    table_name: str = DEFAULT_TABLE_NAME,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> RunSummary:
    """Import ``source`` (a file or a directory of CSV files) into ``table_name``."""

    pipeline = ImportPipeline(session_factory, table_name=table_name, chunk_size=chunk_size)
    return pipeline.run(ImportJob(source=Path(source), mode=mode))


__all__ = ["ImportPipeline", "csv_files_in", "run_import"]
