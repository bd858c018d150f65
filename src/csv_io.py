import csv
import logging
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterable, Iterator, Optional, TextIO

from models import Transaction, TransactionType, ClientAccount

logger = logging.getLogger(__name__)

MAX_CLIENT_ID = 2**16 - 1
MAX_TRANSACTION_ID = 2**32 - 1
# Amounts must lie within 10**-MAX_AMOUNT_EXPONENT .. 10**MAX_AMOUNT_EXPONENT in magnitude and precision.
MAX_AMOUNT_EXPONENT = 100

ACCOUNT_HEADER = ["client", "available", "held", "total", "locked"]

AMOUNT_TYPES = (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL)


class MalformedRecordError(ValueError):
    """A CSV row that cannot be turned into a Transaction."""


def read_transactions(stream: TextIO) -> Iterator[Transaction]:
    """
    Read `type,client,tx,amount` rows and yield Transactions in file order.
    Malformed rows are logged and skipped; they never stop the stream.
    """
    reader = csv.DictReader(stream)
    for row in reader:
        try:
            yield parse_row(row)
        except MalformedRecordError as e:
            logger.warning(f"Skipping line {reader.line_num}: {e}")


def parse_row(row: Dict[Optional[str], Optional[str]]) -> Transaction:
    """Parse a CSV row into a Transaction, raising MalformedRecordError if it is not valid."""
    if None in row:
        raise MalformedRecordError(f"unexpected extra fields {row[None]}")

    normalized = {k.strip(): v.strip() for k, v in row.items() if v is not None}

    transaction_type_str = _required_field(normalized, "type").lower()
    try:
        transaction_type = TransactionType(transaction_type_str)
    except ValueError:
        raise MalformedRecordError(f"unknown transaction type '{transaction_type_str}'") from None

    client_id = _parse_id(normalized, "client", MAX_CLIENT_ID)
    transaction_id = _parse_id(normalized, "tx", MAX_TRANSACTION_ID)

    amount = None
    if transaction_type in AMOUNT_TYPES:
        amount = _parse_amount(_required_field(normalized, "amount"))

    return Transaction(
        transaction_type=transaction_type,
        client_id=client_id,
        transaction_id=transaction_id,
        amount=amount,
    )


def _required_field(normalized: Dict[str, str], name: str) -> str:
    value = normalized.get(name, "")
    if not value:
        raise MalformedRecordError(f"missing '{name}' field")
    return value


def _parse_id(normalized: Dict[str, str], name: str, maximum: int) -> int:
    value = _required_field(normalized, name)
    if not (value.isascii() and value.isdigit()):
        raise MalformedRecordError(f"'{name}' must be an unsigned integer, got '{value}'")
    parsed = int(value)
    if parsed > maximum:
        raise MalformedRecordError(f"'{name}' {parsed} out of range (max {maximum})")
    return parsed


def _parse_amount(value: str) -> Decimal:
    if "_" in value:
        raise MalformedRecordError(f"invalid amount '{value}'")
    try:
        amount = Decimal(value)
    except InvalidOperation:
        raise MalformedRecordError(f"invalid amount '{value}'") from None
    if not amount.is_finite() or amount <= 0:
        raise MalformedRecordError(f"amount must be a positive number, got '{value}'")
    if amount.adjusted() > MAX_AMOUNT_EXPONENT or amount.as_tuple().exponent < -MAX_AMOUNT_EXPONENT:
        raise MalformedRecordError(f"amount '{value}' out of range")
    return amount


def format_decimal(value: Decimal) -> str:
    """Fixed-point rendering that keeps the value's own scale (6899.80 stays 6899.80)."""
    return f"{value:f}"


def write_accounts(stream: TextIO, accounts: Iterable[ClientAccount]) -> None:
    """Write `client,available,held,total,locked` rows in the order given."""
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(ACCOUNT_HEADER)
    for account in accounts:
        writer.writerow([
            account.client_id,
            format_decimal(account.available),
            format_decimal(account.held),
            format_decimal(account.total),
            str(account.locked).lower(),
        ])
