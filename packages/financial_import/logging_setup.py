"""Centralized logging configuration for the ``financial_import`` package.

Public helpers:

- ``configure_logging(...)``: attach one ``StreamHandler`` to the package root
  logger (``"financial_import"``). Called by the CLI at startup; calling it
  again only adjusts the level (e.g., ``--verbose`` after an earlier setup).
- ``get_logger(name)``: acquire a logger by name. Until logging is
  configured, the package root carries a ``NullHandler`` so library use stays
  silent.

Library modules never attach handlers themselves. They call
``get_logger("financial_import.<module>")`` and log row counts, skip counts
and per-row failures through it; destinations and format belong to the host.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

_PKG_LOGGER_NAME = "financial_import"
_LEVEL_ENV = "FINANCIAL_IMPORT_LOG_LEVEL"
_DEFAULT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_handler: logging.Handler | None = None


class _CurrentStderrHandler(logging.StreamHandler):
    """A ``StreamHandler`` that writes to whatever ``sys.stderr`` is at emit time."""

    def __init__(self) -> None:
        logging.Handler.__init__(self)

    @property
    def stream(self) -> IO[str]:  # type: ignore[override]
        return sys.stderr


def _parse_level(level: int | str | None) -> int:
    if isinstance(level, int):
        return level
    if level is None:
        level = os.getenv(_LEVEL_ENV)
    if isinstance(level, str) and level.strip():
        name = level.strip().upper()
        if name.isdigit():
            return int(name)
        numeric = logging.getLevelName(name)
        if isinstance(numeric, int):
            return numeric
    return logging.INFO


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] | None = None,
) -> None:
    """Configure the package root logger.

    Parameters
    ----------
    level:
        ``int`` or level name. When ``None``, ``FINANCIAL_IMPORT_LOG_LEVEL`` is
        consulted, then ``INFO``.
    fmt:
        Format string for the handler (first call only).
    stream:
        Output stream. When omitted, records go to ``sys.stderr`` as it is at
        emit time rather than when the handler was created.
    """

    global _handler
    logger = logging.getLogger(_PKG_LOGGER_NAME)
    numeric = _parse_level(level)

    if _handler is None:
        for h in list(logger.handlers):
            if isinstance(h, logging.NullHandler):
                logger.removeHandler(h)
        _handler = logging.StreamHandler(stream) if stream is not None else _CurrentStderrHandler()
        _handler.setFormatter(logging.Formatter(fmt or _DEFAULT_FORMAT))
        logger.addHandler(_handler)
        # Avoid double emission via the root logger.
        logger.propagate = False

    _handler.setLevel(numeric)
    logger.setLevel(numeric)


def get_logger(name: str) -> logging.Logger:
    """Return a logger by name with library-safe defaults."""

    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if _handler is None and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger"]
