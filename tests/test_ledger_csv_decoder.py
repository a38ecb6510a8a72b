from datetime import UTC, datetime

import pytest

from financial_import import Currency, RowDecodeError, TransactionRecord, decode_row, decode_rows
from tests.helpers.ledger_csv import make_row


def test_decode_row_maps_every_field():
    rec = decode_row(make_row(ACCOUNT="A1", ID="3", Amount="$(12.50)", Notes="weekly shop"))

    assert isinstance(rec, TransactionRecord)
    assert rec.key == ("A1", 3)
    assert rec.date == datetime(2021, 1, 15, tzinfo=UTC)
    assert rec.date.utcoffset().total_seconds() == 0
    assert rec.amount == Currency(-12, 50)
    assert str(rec.amount) == "-12.50"
    assert rec.balance == Currency(1234, 56)
    assert rec.vendor == "Corner Grocery"
    assert rec.transaction_type == "Debit"
    assert rec.digits == "4321"
    assert rec.notes == "weekly shop"
    assert (rec.income, rec.fixed, rec.spend) == (False, False, True)


def test_blank_and_missing_optional_cells_are_none():
    row = make_row(Digits="", Category="", Notes="")
    del row["Subcategory"]

    rec = decode_row(row)

    assert rec.digits is None
    assert rec.category is None
    assert rec.subcategory is None
    assert rec.notes is None


def test_records_are_immutable():
    rec = decode_row(make_row())
    with pytest.raises(Exception):
        rec.vendor = "Other"  # type: ignore[misc]


@pytest.mark.parametrize("flag", ["yes", "1", "", "t", "truee"])
def test_boolean_cells_must_be_true_or_false(flag: str):
    with pytest.raises(RowDecodeError) as ei:
        decode_row(make_row(Fixed=flag))
    assert "Fixed" in str(ei.value)
    assert "boolean" in str(ei.value)


@pytest.mark.parametrize("text", ["2021-01-15", "13/01/2021", "01/32/2021", ""])
def test_malformed_dates_fail_the_row(text: str):
    with pytest.raises(RowDecodeError) as ei:
        decode_row(make_row(Date=text))
    assert "Date" in str(ei.value)


def test_bad_currency_is_cited():
    with pytest.raises(RowDecodeError) as ei:
        decode_row(make_row(Balance="lots"))
    assert "'lots'" in str(ei.value)


@pytest.mark.parametrize("raw_id", ["-1", "abc", "", "3.0", " 3", "3 ", "1_0", "٣"])
def test_id_must_be_an_unsigned_integer(raw_id: str):
    with pytest.raises(RowDecodeError):
        decode_row(make_row(ID=raw_id))


def test_id_accepts_leading_plus_sign():
    assert decode_row(make_row(ID="+42")).id == 42


def test_missing_required_column_fails_the_row():
    row = make_row()
    del row["Vendor"]
    with pytest.raises(RowDecodeError) as ei:
        decode_row(row)
    assert "Vendor" in str(ei.value)


def test_surplus_cells_fail_the_row():
    row: dict = make_row()
    row[None] = ["extra"]
    with pytest.raises(RowDecodeError):
        decode_row(row)


def test_decode_rows_tallies_failures_without_stopping():
    rows = [
        make_row(ID="1"),
        make_row(ID="2", Amount="twelve"),
        make_row(ID="3"),
        make_row(ID="4", Income="maybe"),
        make_row(ID="5"),
    ]

    tally = decode_rows(rows)

    assert [r.id for r in tally.records] == [1, 3, 5]
    assert tally.decoded == 3
    assert tally.skipped == 2
    assert [f.row_number for f in tally.failures] == [2, 4]
    assert "Amount" in tally.failures[0].message
    assert "Income" in tally.failures[1].message


def test_record_can_be_built_by_field_name():
    rec = TransactionRecord(
        account="B2",
        id=7,
        date="02/28/2022",
        amount="1.00",
        balance=Currency(10, 0),
        vendor="Utility Co",
        transaction_type="Debit",
        income="false",
        fixed=True,
        spend="TRUE",
    )
    assert rec.key == ("B2", 7)
    assert rec.amount == Currency(1, 0)
    assert rec.spend is True
