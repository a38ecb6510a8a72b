"""Resume-point resolution for incremental ("new rows only") imports.

For each account in an incoming batch, the highest ordinal already stored is
looked up and only records above it are kept.

Grouping caveat
---------------
Records are grouped by **adjacent** runs of the same account, exactly like
``itertools.groupby``: ``A, A, B, A`` yields three groups and the trailing
``A`` triggers a second resume query. The import pipeline resolves and
persists one group before resolving the next, so the trailing ``A`` run is
compared against the table *after* the first ``A`` run was written. Given
``A:7, B:1, A:6`` over a table holding ``A:1..5``, tx 7 is imported and tx 6
is then dropped because it is not above 7. Sort input by account first if
that is not what you want.

``select_new_records`` resolves every group against the table as it stands,
without writing anything in between.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from itertools import groupby

from sqlalchemy import Table, func, select
from sqlalchemy.orm import Session

from .logging_setup import get_logger
from .models import TransactionRecord

logger = get_logger("financial_import.resume")


def highest_imported_id(session: Session, account: str, table: Table) -> int | None:
    """Return the maximum stored ``tx_id`` for ``account``, or ``None`` if it has no rows."""

    stmt = select(func.max(table.c.tx_id)).where(table.c.account == account)
    return session.execute(stmt).scalar_one()


def group_by_account(
    records: Iterable[TransactionRecord],
) -> list[tuple[str, list[TransactionRecord]]]:
    """Split ``records`` into contiguous same-account runs, preserving order."""

    return [(account, list(run)) for account, run in groupby(records, key=lambda r: r.account)]


def select_new_in_group(
    session: Session,
    account: str,
    group: Sequence[TransactionRecord],
    table: Table,
) -> list[TransactionRecord]:
    """Keep the records of one same-account run whose ordinal exceeds the stored maximum."""

    highest = highest_imported_id(session, account, table)
    if highest is None:
        fresh = list(group)
    else:
        fresh = [r for r in group if r.id > highest]

    if not fresh:
        logger.debug("Account %s has no rows after tx %s; nothing to import.", account, highest)
    elif highest is None:
        logger.info(
            "No prior rows for account %s. Attempting to import %d new rows.",
            account,
            len(fresh),
        )
    else:
        logger.info(
            "Resuming import for account %s after tx %d. Attempting to import %d new rows.",
            account,
            highest,
            len(fresh),
        )
    return fresh


def select_new_records(
    session: Session,
    records: Sequence[TransactionRecord],
    table: Table,
) -> list[TransactionRecord]:
    """Keep only records whose ordinal exceeds their account's resume point."""

    selected: list[TransactionRecord] = []
    for account, group in group_by_account(records):
        selected.extend(select_new_in_group(session, account, group, table))
    return selected


__all__ = [
    "group_by_account",
    "highest_imported_id",
    "select_new_in_group",
    "select_new_records",
]
