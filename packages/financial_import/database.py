"""Connection bootstrap: settings in, verified engine out."""

from __future__ import annotations

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from db.client import build_engine, check_connection
from .config import ImportSettings
from .errors import DatabaseConnectionError
from .logging_setup import get_logger

logger = get_logger("financial_import.database")


def connect(settings: ImportSettings) -> Engine:
    """Build the pooled engine and verify it with one round-trip.

    Raises :class:`DatabaseConnectionError` (no retry) when the database is
    unreachable or rejects the credentials.
    """

    url = settings.database_url()
    logger.info("Attempting to connect to database.")
    engine = build_engine(url, tls=settings.tls)
    try:
        check_connection(engine)
    except SQLAlchemyError as e:
        engine.dispose()
        raise DatabaseConnectionError(
            f"Could not connect to database at {url.render_as_string(hide_password=True)}: {e}"
        ) from e
    logger.info("Successfully connected to database.")
    return engine


__all__ = ["connect"]
