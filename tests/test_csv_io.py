import sys
import os
import io
from decimal import Decimal

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from csv_io import MalformedRecordError, format_decimal, parse_row, read_transactions, write_accounts
from models import ClientAccount, Transaction, TransactionType


class TestParseRow:
    def test_deposit(self):
        transaction = parse_row({"type": "deposit", "client": "1", "tx": "7", "amount": "1.2345"})
        assert transaction == Transaction(TransactionType.DEPOSIT, 1, 7, Decimal("1.2345"))

    def test_whitespace_and_case(self):
        transaction = parse_row({" type": "  Withdrawal ", " client": " 2", " tx": " 5 ", " amount": " 3.0"})
        assert transaction == Transaction(TransactionType.WITHDRAWAL, 2, 5, Decimal("3.0"))

    def test_dispute_ignores_amount(self):
        transaction = parse_row({"type": "dispute", "client": "2", "tx": "2", "amount": "9.99"})
        assert transaction == Transaction(TransactionType.DISPUTE, 2, 2)

    def test_dispute_without_amount_column(self):
        transaction = parse_row({"type": "chargeback", "client": "1", "tx": "1", "amount": None})
        assert transaction.amount is None

    @pytest.mark.parametrize("row", [
        {"type": "reslve", "client": "2", "tx": "2", "amount": ""},
        {"type": "deposit", "client": "1.1", "tx": "1", "amount": "1.0"},
        {"type": "deposit", "client": "2", "tx": "2.x", "amount": "2.0"},
        {"type": "deposit", "client": "-1", "tx": "1", "amount": "1.0"},
        {"type": "deposit", "client": "65536", "tx": "1", "amount": "1.0"},
        {"type": "deposit", "client": "1", "tx": "4294967296", "amount": "1.0"},
        {"type": "deposit", "client": "1", "tx": "3", "amount": "2.x"},
        {"type": "deposit", "client": "1", "tx": "3", "amount": ""},
        {"type": "withdrawal", "client": "1", "tx": "3", "amount": "NaN"},
        {"type": "withdrawal", "client": "1", "tx": "3", "amount": "-1"},
        {"type": "deposit", "client": "1", "tx": "3", "amount": "0"},
        {"type": "deposit", "client": "1", "tx": "3", "amount": "1_000"},
        {"type": "deposit", "client": "1", "tx": "3", "amount": "1E+1000000"},
        {"type": "deposit", "client": "1", "tx": "3", "amount": "1E-101"},
        {"type": "dispute", "client": "2", "tx": None, "amount": None},
        {"type": "withdrawal", "client": "2", "tx": "5", "amount": "3.0", None: ["5"]},
        {"client": "1", "tx": "1", "amount": "1.0"},
    ])
    def test_malformed(self, row):
        with pytest.raises(MalformedRecordError):
            parse_row(row)

    @pytest.mark.parametrize("amount", ["1E+100", "1E-100", "0.0001"])
    def test_amount_range_limits(self, amount):
        transaction = parse_row({"type": "deposit", "client": "1", "tx": "1", "amount": amount})
        assert transaction.amount == Decimal(amount)

    def test_malformed_record_error_is_value_error(self):
        assert issubclass(MalformedRecordError, ValueError)


class TestReadTransactions:
    def test_reads_all_transaction_types(self):
        stream = io.StringIO(
            "type,client,tx,amount\n"
            "deposit,1,1,1.0\n"
            "withdrawal,1,4,1.5\n"
            "dispute,2,2\n"
            "resolve,2,2,\n"
            "chargeback,1,1\n"
        )

        transactions = list(read_transactions(stream))

        assert [t.transaction_type for t in transactions] == [
            TransactionType.DEPOSIT,
            TransactionType.WITHDRAWAL,
            TransactionType.DISPUTE,
            TransactionType.RESOLVE,
            TransactionType.CHARGEBACK,
        ]
        assert transactions[1].amount == Decimal("1.5")

    def test_skips_malformed_rows(self, caplog):
        stream = io.StringIO(
            "type,    client, tx, amount\n"
            "deposit, 1,      1,  1.0\n"
            "deposit,1.1,1,1.0\n"
            "deposit,2,2,2.0\n"
            "deposit,2,2.x,2.0\n"
            "deposit,1,3,2.0\n"
            "1,3,2.0\n"
            "withdrawal  ,1,4,1.5\n"
            "withdrawal,2,5,3.0,5\n"
            "dispute,2\n"
            "reslve,2,2\n"
            "dispute,1,,\n"
            "1,1,chargeback\n"
            "chargeback,1,1\n"
        )

        transactions = list(read_transactions(stream))

        assert transactions == [
            Transaction(TransactionType.DEPOSIT, 1, 1, Decimal("1.0")),
            Transaction(TransactionType.DEPOSIT, 2, 2, Decimal("2.0")),
            Transaction(TransactionType.DEPOSIT, 1, 3, Decimal("2.0")),
            Transaction(TransactionType.WITHDRAWAL, 1, 4, Decimal("1.5")),
            Transaction(TransactionType.CHARGEBACK, 1, 1),
        ]
        assert len([r for r in caplog.records if r.levelname == "WARNING"]) == 8

    def test_empty_input(self):
        assert list(read_transactions(io.StringIO(""))) == []


class TestWriteAccounts:
    def test_all_amount_and_locked_combinations(self):
        accounts = [
            ClientAccount(1, Decimal("0.0"), Decimal("0.0"), False),
            ClientAccount(2, Decimal("10.0"), Decimal("0.0"), False),
            ClientAccount(3, Decimal("0.0"), Decimal("20.0"), False),
            ClientAccount(4, Decimal("10.0"), Decimal("20.0"), False),
            ClientAccount(5, Decimal("5.0"), Decimal("0.0"), True),
        ]
        output = io.StringIO()

        write_accounts(output, accounts)

        assert output.getvalue() == (
            "client,available,held,total,locked\n"
            "1,0.0,0.0,0.0,false\n"
            "2,10.0,0.0,10.0,false\n"
            "3,0.0,20.0,20.0,false\n"
            "4,10.0,20.0,30.0,false\n"
            "5,5.0,0.0,5.0,true\n"
        )

    def test_header_only_when_no_accounts(self):
        output = io.StringIO()
        write_accounts(output, [])
        assert output.getvalue() == "client,available,held,total,locked\n"


class TestFormatDecimal:
    @pytest.mark.parametrize("value, expected", [
        (Decimal("6899.80"), "6899.80"),
        (Decimal("0"), "0"),
        (Decimal("-72.6052"), "-72.6052"),
        (Decimal("1E+3"), "1000"),
        (Decimal("1E-5"), "0.00001"),
    ])
    def test_fixed_point(self, value, expected):
        assert format_decimal(value) == expected
