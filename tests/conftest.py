"""Pytest configuration for test isolation.

Settings are built from ``DB_*`` / ``DATABASE_URL`` environment variables, and
the CLI additionally loads a ``.env`` from the working directory. A developer
shell with those set would leak into tests, so every test starts with them
cleared and runs from its own temporary directory.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from financial_import import logging_setup
from tests.helpers.db import bootstrap_sqlite_db

_ENV_VARS = (
    "DATABASE_URL",
    "DB_HOST",
    "DB_PORT",
    "DB_UID",
    "DB_PASSWORD",
    "DB_NAME",
    "DB_TLS",
    "DB_TABLE",
    "IMPORT_CHUNK_SIZE",
    "FINANCIAL_IMPORT_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _isolate_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    workdir = tmp_path / "cwd"
    workdir.mkdir()
    monkeypatch.chdir(workdir)


@pytest.fixture(autouse=True)
def _reset_package_logging() -> Iterator[None]:
    """Drop the handler a CLI test attached so later tests start unconfigured."""

    yield
    pkg_logger = logging.getLogger("financial_import")
    if logging_setup._handler is not None:
        pkg_logger.removeHandler(logging_setup._handler)
        logging_setup._handler = None
    pkg_logger.setLevel(logging.NOTSET)
    pkg_logger.propagate = True


@pytest.fixture
def ledger_db(tmp_path: Path) -> Iterator[tuple[Engine, sessionmaker[Session]]]:
    """A fresh file-backed SQLite database with the default ledger table."""

    engine, factory = bootstrap_sqlite_db(tmp_path / "ledger.db")
    try:
        yield engine, factory
    finally:
        engine.dispose()


@pytest.fixture
def session_factory(ledger_db: tuple[Engine, sessionmaker[Session]]) -> sessionmaker[Session]:
    return ledger_db[1]
