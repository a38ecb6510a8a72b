"""SQLAlchemy engine/session helpers for the workspace.

Usage
-----
from db.client import build_engine, build_session_factory, session_scope

engine = build_engine(url, tls=False)
factory = build_session_factory(engine)
with session_scope(factory) as s:
    s.execute(...)

Engines are created explicitly and handed to callers; nothing here reads the
environment or caches a process-wide engine.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL, Engine, make_url
from sqlalchemy.orm import Session, sessionmaker

# Pooled connections per engine on Postgres.
DEFAULT_POOL_SIZE = 5


def build_engine(
    database_url: str | URL,
    *,
    tls: bool | None = None,
    pool_size: int = DEFAULT_POOL_SIZE,
) -> Engine:
    """Create an engine for ``database_url``.

    For Postgres URLs, ``tls=True`` requires an encrypted connection and
    ``tls=False`` tries one first, falling back to plaintext
    (``sslmode=prefer``). ``tls=None`` leaves the URL's own settings alone.
    Other backends ignore ``tls`` and ``pool_size``.
    """

    url = make_url(database_url)
    kwargs: dict[str, Any] = {"pool_pre_ping": True}
    if url.get_backend_name() == "postgresql":
        kwargs["pool_size"] = pool_size
        kwargs["max_overflow"] = 0
        if tls is not None:
            kwargs["connect_args"] = {"sslmode": "require" if tls else "prefer"}
    return create_engine(url, **kwargs)


def build_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Return a session factory bound to ``engine``."""

    return sessionmaker(bind=engine, expire_on_commit=False, class_=Session)


def check_connection(engine: Engine) -> None:
    """Round-trip a trivial query; raises the driver error when unreachable."""

    with engine.connect() as conn:
        conn.execute(text("SELECT 1")).scalar_one()


@contextmanager
def session_scope(factory: sessionmaker[Session]) -> Iterator[Session]:
    """Provide a transactional scope around a series of operations."""

    session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


__all__ = [
    "DEFAULT_POOL_SIZE",
    "build_engine",
    "build_session_factory",
    "check_connection",
    "session_scope",
]
