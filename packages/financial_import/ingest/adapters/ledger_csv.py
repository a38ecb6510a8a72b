"""Adapter for mapping ledger CSV rows to :class:`TransactionRecord`.

CSV header (exact keys expected after whitespace trimming):
ACCOUNT, ID, Date, Amount, Balance, Vendor, Type, Income, Fixed, Spend

Optional columns: Digits, Category, Subcategory, Notes. Any other column is
ignored.

Decoding is pure: :func:`decode_rows` never logs or raises for a bad row; it
returns the decoded records alongside one failure entry per skipped row.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from pydantic import ValidationError

from ...errors import RowDecodeError
from ...models import DecodeTally, RowDecodeFailure, TransactionRecord

REQUIRED_HEADERS: tuple[str, ...] = (
    "ACCOUNT",
    "ID",
    "Date",
    "Amount",
    "Balance",
    "Vendor",
    "Type",
    "Income",
    "Fixed",
    "Spend",
)


def _describe(err: ValidationError) -> str:
    parts = []
    for e in err.errors():
        loc = ".".join(str(p) for p in e["loc"]) or "row"
        parts.append(f"{loc}: {e['msg']} (got {e.get('input')!r})")
    return "; ".join(parts)


def decode_row(row: Mapping[str | None, str | None]) -> TransactionRecord:
    """Map one ``csv.DictReader`` row to a record or raise :class:`RowDecodeError`."""

    # DictReader files surplus cells under the ``None`` restkey.
    if None in row:
        raise RowDecodeError("Row has more fields than the header")
    try:
        return TransactionRecord.model_validate(row)
    except ValidationError as err:
        raise RowDecodeError(_describe(err)) from err


def decode_rows(rows: Iterable[Mapping[str | None, str | None]]) -> DecodeTally:
    """Decode every row, collecting failures instead of stopping at the first."""

    records: list[TransactionRecord] = []
    failures: list[RowDecodeFailure] = []
    for row_number, row in enumerate(rows, start=1):
        try:
            records.append(decode_row(row))
        except RowDecodeError as e:
            failures.append(RowDecodeFailure(row_number=row_number, message=str(e)))
    return DecodeTally(records=records, failures=failures)


__all__ = ["REQUIRED_HEADERS", "decode_row", "decode_rows"]
