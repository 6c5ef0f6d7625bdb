import csv
import logging
from typing import Dict, Iterable, Iterator, Optional, TextIO

from amount import Amount
from exceptions import ParseError
from models import AccountSnapshot, Transaction, TransactionType

logger = logging.getLogger(__name__)

MAX_CLIENT_ID = 2 ** 16 - 1
MAX_TRANSACTION_ID = 2 ** 32 - 1

OUTPUT_FIELDS = ["client", "available", "held", "total", "locked"]

_AMOUNT_TYPES = {TransactionType.DEPOSIT, TransactionType.WITHDRAWAL}


class TransactionReader:
    """
    Lazily reads transactions from CSV.
    Malformed rows are logged and skipped, never raised; `skipped` counts them.
    """

    def __init__(self, source: TextIO):
        self._source = source
        self.skipped = 0

    def __iter__(self) -> Iterator[Transaction]:
        reader = csv.DictReader(self._source, skipinitialspace=True)
        while True:
            row = None
            try:
                row = next(reader)
                transaction = parse_row(row)
            except StopIteration:
                return
            except (csv.Error, KeyError, ValueError) as e:
                self.skipped += 1
                logger.warning(f"Skipping row {reader.line_num} {row or ''}: {e}")
                continue
            yield transaction


def read_transactions(source: TextIO) -> Iterator[Transaction]:
    return iter(TransactionReader(source))


def parse_row(row: Dict[Optional[str], Optional[str]]) -> Transaction:
    """Parse a CSV row into a Transaction. Raises ParseError (a ValueError) or KeyError."""
    normalized = {
        (k or "").strip(): (v or "").strip()
        for k, v in row.items()
        if isinstance(v, str) or v is None
    }

    try:
        transaction_type = TransactionType(normalized["type"].lower())
    except ValueError:
        raise ParseError(f"unknown transaction type {normalized['type']!r}") from None

    client_id = _parse_id(normalized["client"], "client", MAX_CLIENT_ID)
    transaction_id = _parse_id(normalized["tx"], "tx", MAX_TRANSACTION_ID)

    amount = None
    if transaction_type in _AMOUNT_TYPES:
        amount_str = normalized.get("amount", "")
        if not amount_str:
            raise ParseError(f"missing amount for {transaction_type.value}")
        amount = Amount.parse(amount_str)
        if amount.is_negative():
            raise ParseError(f"negative amount {amount_str!r}")

    return Transaction(
        transaction_type=transaction_type,
        client_id=client_id,
        transaction_id=transaction_id,
        amount=amount,
    )


def _parse_id(value: str, name: str, maximum: int) -> int:
    try:
        parsed = int(value)
    except ValueError:
        raise ParseError(f"invalid {name} {value!r}") from None
    if not 0 <= parsed <= maximum:
        raise ParseError(f"{name} {parsed} out of range")
    return parsed


def format_snapshot(snapshot: AccountSnapshot) -> Dict[str, str]:
    return {
        "client": str(snapshot.client_id),
        "available": str(snapshot.available),
        "held": str(snapshot.held),
        "total": str(snapshot.total),
        "locked": str(snapshot.locked).lower(),
    }


def write_snapshots(snapshots: Iterable[AccountSnapshot], out: TextIO) -> None:
    writer = csv.DictWriter(out, fieldnames=OUTPUT_FIELDS, lineterminator="\n")
    writer.writeheader()
    for snapshot in snapshots:
        writer.writerow(format_snapshot(snapshot))
