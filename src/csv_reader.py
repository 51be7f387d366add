import csv
import logging
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterator, List, Optional, TextIO

from models import (
    Chargeback,
    Deposit,
    Dispute,
    Resolve,
    Transaction,
    TransactionType,
    Withdrawal,
)

logger = logging.getLogger(__name__)

MAX_CLIENT_ID = 2**16 - 1
MAX_TRANSACTION_ID = 2**32 - 1

REQUIRED_COLUMNS = ("type", "client", "tx")


class TransactionParseError(ValueError):
    """Raised for a malformed input record. The whole run must abort."""

    def __init__(self, message: str, line_number: Optional[int] = None):
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)


def read_transactions(filepath: str) -> List[Transaction]:
    """Read a CSV file into transactions. Raises OSError if the file cannot be opened."""
    with open(filepath, "r", newline="") as f:
        return list(iter_transactions(f))


def iter_transactions(lines: TextIO) -> Iterator[Transaction]:
    """Parse CSV rows lazily, in file order."""
    reader = csv.DictReader(lines)
    if reader.fieldnames is None:
        return

    reader.fieldnames = [name.strip().lower() for name in reader.fieldnames]
    missing = [column for column in REQUIRED_COLUMNS if column not in reader.fieldnames]
    if missing:
        raise TransactionParseError(f"missing column(s) in header: {', '.join(missing)}", 1)

    for row in reader:
        try:
            yield parse_row(row)
        except TransactionParseError as e:
            raise TransactionParseError(str(e), reader.line_num) from e


def parse_row(row: Dict[str, Optional[str]]) -> Transaction:
    """Parse a CSV row (header name -> raw value) into a Transaction."""
    # Surplus fields are collected under the None key by csv.DictReader.
    normalized = {k.strip().lower(): (v or "").strip() for k, v in row.items() if k is not None}

    transaction_type_str = normalized.get("type", "").lower()
    try:
        transaction_type = TransactionType(transaction_type_str)
    except ValueError:
        raise TransactionParseError(f"unknown transaction type {transaction_type_str!r}") from None

    client_id = _parse_id(normalized.get("client", ""), "client", MAX_CLIENT_ID)
    transaction_id = _parse_id(normalized.get("tx", ""), "tx", MAX_TRANSACTION_ID)

    match transaction_type:
        case TransactionType.DEPOSIT:
            return Deposit(client_id, transaction_id, _parse_amount(normalized.get("amount", "")))
        case TransactionType.WITHDRAWAL:
            return Withdrawal(client_id, transaction_id, _parse_amount(normalized.get("amount", "")))
        case TransactionType.DISPUTE:
            return Dispute(client_id, transaction_id)
        case TransactionType.RESOLVE:
            return Resolve(client_id, transaction_id)
        case TransactionType.CHARGEBACK:
            return Chargeback(client_id, transaction_id)


def _parse_id(value: str, column: str, maximum: int) -> int:
    try:
        parsed = int(value)
    except ValueError:
        raise TransactionParseError(f"invalid {column} {value!r}") from None
    if not 0 <= parsed <= maximum:
        raise TransactionParseError(f"{column} {parsed} out of range 0..{maximum}")
    return parsed


def _parse_amount(value: str) -> Decimal:
    if not value:
        raise TransactionParseError("amount is required for deposits and withdrawals")
    try:
        amount = Decimal(value)
    except InvalidOperation:
        raise TransactionParseError(f"invalid amount {value!r}") from None
    if not amount.is_finite() or amount < 0:
        raise TransactionParseError(f"amount must be a non-negative number, got {value!r}")
    return amount
