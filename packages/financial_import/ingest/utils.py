"""Ingest utilities shared by the CLI and the import workflow.

Exposes a single helper that reads a ledger CSV file into decoded records,
validating the header up front so a structurally unusable file fails as a
whole instead of producing one skipped row per line.
"""

from __future__ import annotations

import csv
from os import PathLike
from pathlib import Path

from ..errors import FileReadError
from ..logging_setup import get_logger
from ..models import DecodeTally
from .adapters.ledger_csv import REQUIRED_HEADERS, decode_rows

logger = get_logger("financial_import.ingest")


def read_transactions_csv(csv_path: str | PathLike[str]) -> DecodeTally:
    """Read a ledger CSV and return the decoded records and skipped rows.

    Raises :class:`FileReadError` when the file cannot be opened or decoded as
    UTF-8, has no header row, lacks required columns, or is not valid CSV.
    Individual bad rows are skipped and reported on the returned tally.
    """

    p = Path(csv_path)
    try:
        logger.info("Reading csv records from file %s", p.resolve())
        # utf-8-sig strips a leading BOM from spreadsheet exports
        with p.open(encoding="utf-8-sig", newline="") as f:
            reader = csv.DictReader(f)
            if not reader.fieldnames:
                raise FileReadError(p, "no header row")
            reader.fieldnames = [h.strip() for h in reader.fieldnames]
            missing = [h for h in REQUIRED_HEADERS if h not in reader.fieldnames]
            if missing:
                raise FileReadError(p, "missing columns: " + ", ".join(missing))
            tally = decode_rows(reader)
    except OSError as e:
        raise FileReadError(p, e.strerror or str(e)) from e
    except UnicodeDecodeError as e:
        raise FileReadError(p, f"not valid UTF-8 ({e.reason})") from e
    except csv.Error as e:
        raise FileReadError(p, f"malformed csv: {e}") from e

    for failure in tally.failures:
        logger.error("Skipping row %d: %s", failure.row_number, failure.message)
    logger.info(
        "Read %d records from file. %d rows ignored because they could not be loaded.",
        tally.decoded,
        tally.skipped,
    )
    return tally


__all__ = ["read_transactions_csv"]
