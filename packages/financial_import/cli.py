# ruff: noqa: I001
"""CLI for the ``financial_import`` package.

This module exposes callable command handlers (``cmd_import``,
``cmd_init_db``) and a Typer-based console interface. Environment variables
(``DB_*``, ``DATABASE_URL``) are loaded from a local ``.env`` using
``python-dotenv`` before settings are built. Business logic lives in
``financial_import.workflows`` and related modules.

Exit codes: ``0`` when the run completes, even if some rows or files were
skipped; ``1`` for configuration errors and when the database cannot be
reached.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv

from db.client import build_session_factory
from db.schema import init_schema
from sqlalchemy.exc import SQLAlchemyError

from .config import ImportSettings, resolve_job
from .database import connect
from .errors import ConfigurationError, DatabaseConnectionError
from .logging_setup import configure_logging, get_logger
from .models import ImportJob, RunSummary
from .workflows.import_flow import ImportPipeline

logger = get_logger("financial_import.cli")


def _summary_line(summary: RunSummary) -> str:
    files = len(summary.files)
    failed = len(summary.failed_files)
    return (
        f"Imported {files - failed}/{files} file(s): "
        f"{summary.inserted} row(s) inserted, {summary.skipped_rows} row(s) skipped."
    )


def cmd_init_db(settings: ImportSettings) -> int:
    try:
        engine = connect(settings)
    except (ConfigurationError, DatabaseConnectionError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    try:
        logger.info("Initializing database.")
        init_schema(engine, settings.table_name)
        logger.info("Database schema and indexes successfully created.")
    except SQLAlchemyError as e:
        print(f"Error: schema initialization failed: {e}", file=sys.stderr)
        return 1
    finally:
        engine.dispose()
    return 0


def cmd_import(job: ImportJob, settings: ImportSettings, *, init: bool = False) -> int:
    """Connect, optionally create the schema, and run ``job``."""

    try:
        engine = connect(settings)
    except (ConfigurationError, DatabaseConnectionError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        if init:
            logger.info("Initializing database.")
            try:
                init_schema(engine, settings.table_name)
            except SQLAlchemyError as e:
                print(f"Error: schema initialization failed: {e}", file=sys.stderr)
                return 1
        pipeline = ImportPipeline.from_settings(build_session_factory(engine), settings)
        summary = pipeline.run(job)
    finally:
        engine.dispose()

    typer.echo(_summary_line(summary))
    for failed in summary.failed_files:
        typer.echo(f"Failed: {failed.path}: {failed.error}", err=True)
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Import formatted ledger CSV files into a financial database. "
        "Loads DB_* settings from a local .env before running."
    ),
)


def _settings_or_exit(**overrides: object) -> ImportSettings:
    try:
        return ImportSettings.from_env(**overrides)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise typer.Exit(1) from e


@app.command("import")
def import_cmd(
    file: Annotated[
        Path | None, typer.Option("--file", "-f", help="CSV file to import.", dir_okay=False)
    ] = None,
    directory: Annotated[
        Path | None,
        typer.Option("--directory", "-d", help="Directory of CSV files.", file_okay=False),
    ] = None,
    load_all: Annotated[bool, typer.Option("--all", help="Import every row (default).")] = False,
    load_new: Annotated[
        bool, typer.Option("--new", help="Import only rows newer than what is stored.")
    ] = False,
    init: Annotated[bool, typer.Option("--init", help="Create the table first.")] = False,
    host: Annotated[str | None, typer.Option(help="Database host (DB_HOST).")] = None,
    port: Annotated[int | None, typer.Option(help="Database port (DB_PORT).")] = None,
    uid: Annotated[str | None, typer.Option(help="Database user (DB_UID).")] = None,
    password: Annotated[str | None, typer.Option(help="Database password (DB_PASSWORD).")] = None,
    name: Annotated[str | None, typer.Option(help="Database name (DB_NAME).")] = None,
    tls: Annotated[
        bool | None, typer.Option("--tls/--no-tls", help="Require TLS (DB_TLS).")
    ] = None,
    table: Annotated[str | None, typer.Option(help="Target table (DB_TABLE).")] = None,
    database_url: Annotated[
        str | None, typer.Option(help="Override DATABASE_URL (takes precedence over DB_*).")
    ] = None,
    chunk_size: Annotated[
        int | None, typer.Option(help="Rows per transaction (IMPORT_CHUNK_SIZE).")
    ] = None,
) -> None:
    """Import a CSV file or every CSV file in a directory."""

    settings = _settings_or_exit(
        host=host,
        port=port,
        username=uid,
        password=password,
        database=name,
        tls=tls,
        table_name=table,
        url_override=database_url,
        chunk_size=chunk_size,
    )
    try:
        job = resolve_job(file=file, directory=directory, load_all=load_all, load_new=load_new)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise typer.Exit(1) from e

    raise typer.Exit(cmd_import(job, settings, init=init))


@app.command("init-db")
def init_db_cmd(
    table: Annotated[str | None, typer.Option(help="Target table (DB_TABLE).")] = None,
    database_url: Annotated[
        str | None, typer.Option(help="Override DATABASE_URL (takes precedence over DB_*).")
    ] = None,
) -> None:
    """Create the transactions table and its indexes if they do not exist."""

    settings = _settings_or_exit(table_name=table, url_override=database_url)
    raise typer.Exit(cmd_init_db(settings))


@app.callback()
def _root(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
) -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures package logging.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging("DEBUG" if verbose else None)


if __name__ == "__main__":  # pragma: no cover - exercised via the console script
    # Running as a module: `python -m financial_import.cli`
    app()
