"""Typed exceptions for ``financial_import``.

Each class maps to the scope at which the failure is handled:

- ``ParseError`` (and subclasses): one CSV row; the row is skipped and counted.
- ``RowPersistError``: one insert inside a chunk; recorded on the chunk outcome,
  never raised by the importer.
- ``ChunkTransactionError``: one chunk's transaction could not begin or commit;
  raised to the file-level caller with the partial result attached.
- ``FileReadError``: one file could not be opened or its header is unusable.
- ``DatabaseConnectionError`` / ``ConfigurationError``: fatal to the invocation.
"""

from __future__ import annotations

from os import PathLike
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from .models import PersistResult


class FinancialImportError(Exception):
    """Base class for every error raised by this package."""


class ParseError(FinancialImportError, ValueError):
    """Malformed currency, date, boolean or row content."""


class CurrencyParseError(ParseError):
    def __init__(self, text: str) -> None:
        super().__init__(f"Could not parse {text!r} into a currency.")
        self.text = text


class RowDecodeError(ParseError):
    """A CSV row that could not be mapped to a transaction record."""


class RowPersistError(FinancialImportError):
    """A single row's insert failed for a reason other than a key conflict."""

    def __init__(self, account: str, tx_id: int, cause: BaseException) -> None:
        super().__init__(f"Could not insert row {account}/{tx_id}: {cause}")
        self.account = account
        self.tx_id = tx_id
        self.cause = cause


class ChunkTransactionError(FinancialImportError):
    """A chunk's transaction failed to begin or commit.

    ``partial`` holds the outcomes of the chunks committed before this one;
    those rows remain persisted.
    """

    def __init__(
        self, chunk_index: int, cause: BaseException, partial: PersistResult
    ) -> None:
        super().__init__(f"Chunk {chunk_index} could not be committed: {cause}")
        self.chunk_index = chunk_index
        self.cause = cause
        self.partial = partial


class FileReadError(FinancialImportError):
    def __init__(self, path: str | PathLike[str], reason: str) -> None:
        super().__init__(f"Could not read csv file {path}: {reason}")
        self.path = Path(path)
        self.reason = reason


class DatabaseConnectionError(FinancialImportError):
    """The database could not be reached."""


class ConfigurationError(FinancialImportError):
    """Invalid or missing request configuration."""


__all__ = [
    "FinancialImportError",
    "ParseError",
    "CurrencyParseError",
    "RowDecodeError",
    "RowPersistError",
    "ChunkTransactionError",
    "FileReadError",
    "DatabaseConnectionError",
    "ConfigurationError",
]
