"""Data models for ``financial_import``.

``TransactionRecord`` is the typed view of one CSV row. Field aliases are the
exact CSV header names, so a ``csv.DictReader`` row validates directly via
:meth:`TransactionRecord.model_validate`; tests and callers may also construct
records by field name.

The remaining dataclasses are plain result types returned by the decoder, the
batch importer and the pipeline. They carry counts and per-row failures so
callers can assert on partial-success behavior without reading logs.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .currency import Currency
from .errors import RowPersistError

DATE_FORMAT = "%m/%d/%Y %H:%M:%S %z"
_ORDINAL_RE = re.compile(r"\+?[0-9]+")


def parse_record_date(text: str) -> datetime:
    """Parse a ``MM/DD/YYYY`` cell as midnight UTC."""

    try:
        return datetime.strptime(f"{text} 00:00:00 +00:00", DATE_FORMAT)
    except ValueError as exc:
        raise ValueError(f"Could not parse {text!r} into a date.") from exc


def parse_flag(text: str) -> bool:
    lowered = text.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    raise ValueError(f"Could not parse {text!r} into a boolean.")


def parse_ordinal(text: str) -> int:
    """Parse an unsigned ``ID`` cell: ASCII digits with an optional leading ``+``."""

    if not _ORDINAL_RE.fullmatch(text):
        raise ValueError(f"Could not parse {text!r} into an unsigned integer.")
    return int(text)


# ---------------------------------------------------------------------------
# Core record
# ---------------------------------------------------------------------------


class TransactionRecord(BaseModel):
    """One parsed financial transaction.

    ``(account, id)`` is the natural key: ``id`` is the ordinal within the
    account, not a global identifier.
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        arbitrary_types_allowed=True,
        extra="ignore",
    )

    account: str = Field(alias="ACCOUNT")
    id: int = Field(alias="ID", ge=0)
    date: datetime = Field(alias="Date")
    amount: Currency = Field(alias="Amount")
    balance: Currency = Field(alias="Balance")
    vendor: str = Field(alias="Vendor")
    transaction_type: str = Field(alias="Type")
    digits: str | None = Field(default=None, alias="Digits")
    category: str | None = Field(default=None, alias="Category")
    subcategory: str | None = Field(default=None, alias="Subcategory")
    notes: str | None = Field(default=None, alias="Notes")
    income: bool = Field(alias="Income")
    fixed: bool = Field(alias="Fixed")
    spend: bool = Field(alias="Spend")

    @field_validator("id", mode="before")
    @classmethod
    def _parse_id(cls, v: Any) -> Any:
        return parse_ordinal(v) if isinstance(v, str) else v

    @field_validator("date", mode="before")
    @classmethod
    def _parse_date(cls, v: Any) -> Any:
        return parse_record_date(v) if isinstance(v, str) else v

    @field_validator("amount", "balance", mode="before")
    @classmethod
    def _parse_currency(cls, v: Any) -> Any:
        return Currency.parse(v) if isinstance(v, str) else v

    @field_validator("income", "fixed", "spend", mode="before")
    @classmethod
    def _parse_flag(cls, v: Any) -> Any:
        return parse_flag(v) if isinstance(v, str) else v

    @field_validator("digits", "category", "subcategory", "notes", mode="before")
    @classmethod
    def _blank_to_none(cls, v: Any) -> Any:
        return None if v == "" else v

    @property
    def key(self) -> tuple[str, int]:
        return self.account, self.id


class LoadMode(str, Enum):
    """Whole-file reload versus new-rows-only import."""

    FULL = "all"
    INCREMENTAL_NEW = "new"


@dataclass(frozen=True, slots=True)
class ImportJob:
    """A single invocation's source (file or directory) and load mode."""

    source: Path
    mode: LoadMode = LoadMode.FULL

    @property
    def is_directory(self) -> bool:
        return self.source.is_dir()


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class RowDecodeFailure:
    """A skipped CSV row. ``row_number`` is 1-based over data rows."""

    row_number: int
    message: str


@dataclass(frozen=True, slots=True)
class DecodeTally:
    records: list[TransactionRecord]
    failures: list[RowDecodeFailure] = field(default_factory=list)

    @property
    def decoded(self) -> int:
        return len(self.records)

    @property
    def skipped(self) -> int:
        return len(self.failures)


@dataclass(frozen=True, slots=True)
class ChunkOutcome:
    """A committed chunk. Failed rows were skipped; the rest of the chunk stands."""

    index: int
    attempted: int
    inserted: int
    duplicates: int
    failures: tuple[RowPersistError, ...] = ()


@dataclass(frozen=True, slots=True)
class PersistResult:
    chunks: tuple[ChunkOutcome, ...] = ()

    @property
    def inserted(self) -> int:
        return sum(c.inserted for c in self.chunks)

    @property
    def duplicates(self) -> int:
        return sum(c.duplicates for c in self.chunks)

    @property
    def failures(self) -> list[RowPersistError]:
        return [f for c in self.chunks for f in c.failures]


@dataclass(frozen=True, slots=True)
class FileOutcome:
    """Per-file summary. ``error`` is set when the file's import was aborted."""

    path: Path
    decoded: int = 0
    skipped: int = 0
    selected: int = 0
    persist: PersistResult = field(default_factory=PersistResult)
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True, slots=True)
class RunSummary:
    files: Sequence[FileOutcome] = ()

    @property
    def failed_files(self) -> list[FileOutcome]:
        return [f for f in self.files if not f.ok]

    @property
    def inserted(self) -> int:
        return sum(f.persist.inserted for f in self.files)

    @property
    def skipped_rows(self) -> int:
        return sum(f.skipped for f in self.files)


__all__ = [
    "DATE_FORMAT",
    "parse_record_date",
    "parse_flag",
    "parse_ordinal",
    "TransactionRecord",
    "LoadMode",
    "ImportJob",
    "RowDecodeFailure",
    "DecodeTally",
    "ChunkOutcome",
    "PersistResult",
    "FileOutcome",
    "RunSummary",
]
