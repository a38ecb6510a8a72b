from pathlib import Path

from financial_import import (
    FileReadError,
    ImportJob,
    ImportPipeline,
    LoadMode,
    run_import,
)
from tests.helpers.db import count_rows, stored_ids
from tests.helpers.ledger_csv import make_row, write_ledger_csv

SAMPLE = Path(__file__).resolve().parents[1] / "data/ledger_sample.csv"


def test_full_import_of_sample_file(session_factory):
    summary = run_import(session_factory, SAMPLE, LoadMode.FULL)

    (outcome,) = summary.files
    assert outcome.ok
    # Row 6 has an unparseable amount and row 10 a non-boolean Spend flag.
    assert outcome.decoded == 8
    assert outcome.skipped == 2
    assert outcome.persist.inserted == 8
    assert stored_ids(session_factory, "CHK-01") == [1, 2, 3, 4, 5, 7]
    assert stored_ids(session_factory, "SAV-02") == [1, 2]


def test_full_import_twice_leaves_row_count_unchanged(session_factory):
    run_import(session_factory, SAMPLE, LoadMode.FULL)
    before = count_rows(session_factory)

    second = run_import(session_factory, SAMPLE, LoadMode.FULL)

    assert count_rows(session_factory) == before
    assert second.inserted == 0
    assert second.files[0].persist.duplicates == 8


def test_incremental_import_only_passes_rows_beyond_resume_point(session_factory, tmp_path):
    first = write_ledger_csv(
        tmp_path / "jan.csv", [make_row(ACCOUNT="A1", ID=str(i)) for i in range(1, 6)]
    )
    run_import(session_factory, first, LoadMode.FULL)

    second = write_ledger_csv(
        tmp_path / "feb.csv",
        [make_row(ACCOUNT="A1", ID=str(i)) for i in range(1, 9)]
        + [make_row(ACCOUNT="B2", ID=str(i)) for i in (1, 2)],
    )
    summary = run_import(session_factory, second, LoadMode.INCREMENTAL_NEW)

    (outcome,) = summary.files
    assert outcome.decoded == 10
    assert outcome.selected == 5
    assert outcome.persist.inserted == 5
    assert outcome.persist.duplicates == 0
    assert stored_ids(session_factory, "A1") == list(range(1, 9))
    assert stored_ids(session_factory, "B2") == [1, 2]


def test_incremental_import_does_not_backfill_gaps(session_factory, tmp_path):
    seeded = write_ledger_csv(
        tmp_path / "seed.csv", [make_row(ACCOUNT="A1", ID=str(i)) for i in (1, 5)]
    )
    run_import(session_factory, seeded, LoadMode.FULL)

    later = write_ledger_csv(
        tmp_path / "later.csv", [make_row(ACCOUNT="A1", ID=str(i)) for i in range(1, 7)]
    )
    run_import(session_factory, later, LoadMode.INCREMENTAL_NEW)

    assert stored_ids(session_factory, "A1") == [1, 5, 6]


def test_directory_run_continues_past_corrupt_file(session_factory, tmp_path):
    src = tmp_path / "exports"
    write_ledger_csv(src / "a_valid.csv", [make_row(ID=str(i)) for i in range(1, 4)])
    (src / "b_corrupt.csv").write_text("not,a,ledger\n1,2,3\n", encoding="utf-8")
    (src / "readme.txt").write_text("ignored", encoding="utf-8")

    pipeline = ImportPipeline(session_factory, chunk_size=2)
    summary = pipeline.run(ImportJob(source=src, mode=LoadMode.FULL))

    assert [f.path.name for f in summary.files] == ["a_valid.csv", "b_corrupt.csv"]
    valid, corrupt = summary.files
    assert valid.ok and valid.persist.inserted == 3
    assert not corrupt.ok
    assert isinstance(corrupt.error, FileReadError)
    assert summary.failed_files == [corrupt]
    assert count_rows(session_factory) == 3


def test_unreadable_file_is_reported_not_raised(session_factory, tmp_path):
    summary = run_import(session_factory, tmp_path / "missing.csv", LoadMode.FULL)

    (outcome,) = summary.files
    assert isinstance(outcome.error, FileReadError)
    assert count_rows(session_factory) == 0


def test_later_run_of_an_account_is_checked_after_earlier_run_is_stored(
    session_factory, tmp_path
):
    seeded = write_ledger_csv(
        tmp_path / "seed.csv", [make_row(ACCOUNT="A1", ID=str(i)) for i in range(1, 6)]
    )
    run_import(session_factory, seeded, LoadMode.FULL)

    interleaved = write_ledger_csv(
        tmp_path / "interleaved.csv",
        [
            make_row(ACCOUNT="A1", ID="7"),
            make_row(ACCOUNT="B2", ID="1"),
            make_row(ACCOUNT="A1", ID="6"),
        ],
    )
    summary = run_import(session_factory, interleaved, LoadMode.INCREMENTAL_NEW)

    (outcome,) = summary.files
    assert outcome.ok
    assert outcome.selected == 2
    assert outcome.persist.inserted == 2
    # The trailing A1 run is resolved against max 7, so tx 6 is never written.
    assert stored_ids(session_factory, "A1") == [1, 2, 3, 4, 5, 7]
    assert stored_ids(session_factory, "B2") == [1]


def test_incremental_batches_are_chunked_per_account_run(session_factory, tmp_path):
    path = write_ledger_csv(
        tmp_path / "runs.csv",
        [make_row(ACCOUNT="A1", ID=str(i)) for i in (1, 2, 3)]
        + [make_row(ACCOUNT="B2", ID=str(i)) for i in (1, 2)],
    )

    summary = run_import(session_factory, path, LoadMode.INCREMENTAL_NEW, chunk_size=2)

    (outcome,) = summary.files
    assert [c.attempted for c in outcome.persist.chunks] == [2, 1, 2]
    assert outcome.persist.inserted == 5
