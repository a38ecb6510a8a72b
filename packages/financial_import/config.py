"""Explicit configuration for an import invocation.

Settings are read from the environment once, by the entrypoint, and passed
down as an :class:`ImportSettings` value. No module reads environment
variables at import time. ``.env`` loading (``python-dotenv``) is likewise
the CLI's job, so library callers see exactly the environment they pass in.

Environment variables
---------------------
``DB_HOST``, ``DB_PORT``, ``DB_UID``, ``DB_PASSWORD``, ``DB_NAME``, ``DB_TLS``,
``DB_TABLE``, ``DATABASE_URL`` (overrides the individual DB_* connection
fields when set) and ``IMPORT_CHUNK_SIZE``.
"""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from sqlalchemy.engine import URL, make_url
from sqlalchemy.exc import ArgumentError

from db.models.ledger import DEFAULT_TABLE_NAME
from .errors import ConfigurationError
from .models import ImportJob, LoadMode
from .persistence import DEFAULT_CHUNK_SIZE

# Table names are interpolated into DDL/DML; keep them plain identifiers.
_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _parse_int(name: str, raw: str | None, default: int) -> int:
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw.strip())
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None


def _parse_bool(name: str, raw: str | None, default: bool) -> bool:
    if raw is None or raw.strip() == "":
        return default
    v = raw.strip().lower()
    if v in _TRUE:
        return True
    if v in _FALSE:
        return False
    raise ConfigurationError(f"{name} must be a boolean, got {raw!r}")


@dataclass(frozen=True, slots=True)
class ImportSettings:
    host: str = "localhost"
    port: int = 5432
    username: str = "postgres"
    password: str = "postgres"
    database: str = "postgres"
    tls: bool = False
    table_name: str = DEFAULT_TABLE_NAME
    chunk_size: int = DEFAULT_CHUNK_SIZE
    url_override: str | None = None

    def __post_init__(self) -> None:
        if not _IDENTIFIER_RE.match(self.table_name):
            raise ConfigurationError(f"Invalid table name: {self.table_name!r}")
        if not 0 < self.port < 65536:
            raise ConfigurationError(f"Invalid database port: {self.port}")
        if self.chunk_size <= 0:
            raise ConfigurationError(f"Chunk size must be positive, got {self.chunk_size}")

    @classmethod
    def from_env(
        cls, environ: Mapping[str, str] | None = None, **overrides: Any
    ) -> ImportSettings:
        """Build settings from ``environ`` (default ``os.environ``).

        Keyword ``overrides`` (e.g., CLI options) win over the environment;
        ``None`` values are treated as "not given".
        """

        env = os.environ if environ is None else environ
        values: dict[str, Any] = {
            "host": env.get("DB_HOST") or "localhost",
            "port": _parse_int("DB_PORT", env.get("DB_PORT"), 5432),
            "username": env.get("DB_UID") or "postgres",
            "password": env.get("DB_PASSWORD") or "postgres",
            "database": env.get("DB_NAME") or "postgres",
            "tls": _parse_bool("DB_TLS", env.get("DB_TLS"), False),
            "table_name": env.get("DB_TABLE") or DEFAULT_TABLE_NAME,
            "chunk_size": _parse_int(
                "IMPORT_CHUNK_SIZE", env.get("IMPORT_CHUNK_SIZE"), DEFAULT_CHUNK_SIZE
            ),
            "url_override": env.get("DATABASE_URL") or None,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def database_url(self) -> URL:
        if self.url_override:
            try:
                return make_url(self.url_override)
            except ArgumentError as e:
                raise ConfigurationError(f"Invalid DATABASE_URL: {e}") from e
        return URL.create(
            "postgresql+psycopg",
            username=self.username,
            password=self.password,
            host=self.host,
            port=self.port,
            database=self.database,
        )


def resolve_job(
    *,
    file: str | os.PathLike[str] | None,
    directory: str | os.PathLike[str] | None,
    load_all: bool = False,
    load_new: bool = False,
) -> ImportJob:
    """Validate the requested source and mode and return the job.

    Exactly one of ``file`` / ``directory`` must be given; a directory must
    contain at least one ``*.csv`` file. ``load_new`` selects the incremental
    mode; neither flag means a full load.
    """

    if load_all and load_new:
        raise ConfigurationError("--all and --new are mutually exclusive")
    mode = LoadMode.INCREMENTAL_NEW if load_new else LoadMode.FULL

    if file is not None and directory is not None:
        raise ConfigurationError("--file and --directory are mutually exclusive")
    if file is not None:
        p = Path(file)
        if not p.is_file():
            raise ConfigurationError(f"File not found: {file}")
        return ImportJob(source=p, mode=mode)
    if directory is not None:
        d = Path(directory)
        if not d.is_dir():
            raise ConfigurationError(f"Directory not found: {directory}")
        if not any(p.is_file() and p.suffix.lower() == ".csv" for p in d.iterdir()):
            raise ConfigurationError(f"Directory {directory} does not contain any CSV files.")
        return ImportJob(source=d, mode=mode)
    raise ConfigurationError("Required configuration argument missing: file or directory")


__all__ = ["ImportSettings", "resolve_job"]
