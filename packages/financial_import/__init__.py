"""Public interface for the ``financial_import`` package.

Imports ledger CSV exports into a relational table, either in full or only
the rows newer than what each account already has stored. This module only
re-exports the stable import surface; there is no runtime logic here.
"""

from .currency import Currency
from .errors import (
    ChunkTransactionError,
    ConfigurationError,
    CurrencyParseError,
    DatabaseConnectionError,
    FileReadError,
    FinancialImportError,
    ParseError,
    RowDecodeError,
    RowPersistError,
)
from .ingest.adapters.ledger_csv import decode_row, decode_rows
from .ingest.utils import read_transactions_csv
from .models import (
    ChunkOutcome,
    DecodeTally,
    FileOutcome,
    ImportJob,
    LoadMode,
    PersistResult,
    RowDecodeFailure,
    RunSummary,
    TransactionRecord,
)
from .persistence import BatchImporter, persist_records
from .resume import (
    group_by_account,
    highest_imported_id,
    select_new_in_group,
    select_new_records,
)
from .workflows.import_flow import ImportPipeline, run_import

__all__ = [
    # Pipeline
    "ImportPipeline",
    "run_import",
    "BatchImporter",
    "persist_records",
    "read_transactions_csv",
    "decode_row",
    "decode_rows",
    "group_by_account",
    "highest_imported_id",
    "select_new_in_group",
    "select_new_records",
    # Models / types
    "Currency",
    "TransactionRecord",
    "LoadMode",
    "ImportJob",
    "RowDecodeFailure",
    "DecodeTally",
    "ChunkOutcome",
    "PersistResult",
    "FileOutcome",
    "RunSummary",
    # Errors
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
