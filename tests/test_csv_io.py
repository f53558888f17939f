"""Tests for the CSV source and sink."""

import io

import pytest
from decimal import Decimal

from payments_engine.models import Account
from payments_engine.services.csv_io import (
    CsvAccountSink,
    CsvTransactionSource,
    SourceFormatError,
)


class TestCsvTransactionSource:
    """Splitting input rows into raw records."""

    def test_reads_rows_with_whitespace(self):
        data = "type, client, tx, amount\ndeposit, 1, 1, 1.0\nwithdrawal,  2, 5,  3\n"
        records = list(CsvTransactionSource(io.StringIO(data)))
        assert len(records) == 2
        assert records[0].fields == {
            "type": "deposit", "client": "1", "tx": "1", "amount": "1.0",
        }
        assert records[1].fields["client"] == "2"
        assert records[1].fields["amount"] == "3"

    def test_line_numbers(self):
        data = "type,client,tx,amount\ndeposit,1,1,1\n\ndeposit,1,2,1\n"
        records = list(CsvTransactionSource(io.StringIO(data)))
        assert [r.line_number for r in records] == [2, 4]

    def test_short_and_empty_amount(self):
        data = "type,client,tx,amount\ndispute,1,1,\nresolve,1,1\n"
        records = list(CsvTransactionSource(io.StringIO(data)))
        assert records[0].fields["amount"] is None
        assert records[1].fields["amount"] is None

    def test_header_case_and_column_order(self):
        data = "TX, Amount, Client, Type\n7, 2.5, 3, deposit\n"
        record = next(iter(CsvTransactionSource(io.StringIO(data))))
        assert record.fields == {
            "tx": "7", "amount": "2.5", "client": "3", "type": "deposit",
        }

    def test_amount_column_optional(self):
        data = "type,client,tx\ndispute,1,1\n"
        record = next(iter(CsvTransactionSource(io.StringIO(data))))
        assert "amount" not in record.fields

    def test_unknown_columns_ignored(self):
        data = "type,client,tx,amount,memo\ndeposit,1,1,1,hello\n"
        record = next(iter(CsvTransactionSource(io.StringIO(data))))
        assert "memo" not in record.fields

    def test_missing_required_column(self):
        data = "type,client,amount\ndeposit,1,1\n"
        with pytest.raises(SourceFormatError, match="tx"):
            list(CsvTransactionSource(io.StringIO(data)))

    def test_empty_input(self):
        with pytest.raises(SourceFormatError, match="empty"):
            list(CsvTransactionSource(io.StringIO("")))

    def test_reads_from_path(self, tmp_path):
        path = tmp_path / "tx.csv"
        path.write_text("type,client,tx,amount\ndeposit,1,1,1\n", encoding="utf-8")
        source = CsvTransactionSource(path)
        assert source.name == str(path)
        assert len(list(source)) == 1

    def test_invalid_utf8(self, tmp_path):
        path = tmp_path / "tx.csv"
        path.write_bytes(b"type,client,tx,amount\ndeposit,1,1,\xff\xfe\n")
        with pytest.raises(SourceFormatError, match="unreadable input"):
            list(CsvTransactionSource(path))

    def test_oversized_field(self):
        data = "type,client,tx,amount\ndeposit,1,1," + "9" * 200_000 + "\n"
        with pytest.raises(SourceFormatError, match="unreadable input"):
            list(CsvTransactionSource(io.StringIO(data)))


class TestCsvAccountSink:
    """Writing the final snapshot."""

    def test_writes_header_and_rows(self):
        out = io.StringIO()
        accounts = [
            Account(client=1, available=Decimal("1.5"), held=Decimal("0")),
            Account(client=2, available=Decimal("2"), held=Decimal("0"), locked=True),
        ]
        count = CsvAccountSink(out).write(accounts)
        assert count == 2
        assert out.getvalue() == (
            "client,available,held,total,locked\n"
            "1,1.5000,0.0000,1.5000,false\n"
            "2,2.0000,0.0000,2.0000,true\n"
        )

    def test_empty_snapshot_writes_header_only(self):
        out = io.StringIO()
        assert CsvAccountSink(out).write([]) == 0
        assert out.getvalue() == "client,available,held,total,locked\n"

    def test_precision(self):
        out = io.StringIO()
        CsvAccountSink(out, precision=5).write(
            [Account(client=1, available=Decimal("0.123456"))]
        )
        assert out.getvalue().splitlines()[1] == "1,0.12346,0.00000,0.12346,false"

    def test_negative_precision_rejected(self):
        with pytest.raises(ValueError):
            CsvAccountSink(io.StringIO(), precision=-1)
