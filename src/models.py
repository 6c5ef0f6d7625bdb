import threading
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from amount import Amount
from exceptions import ErrorKind


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"


@dataclass(frozen=True)
class Transaction:
    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    amount: Optional[Amount] = None

    def __repr__(self) -> str:
        return f"Transaction({self.transaction_type.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


@dataclass
class StoredTransaction:
    """A deposit or withdrawal kept by its account so it can be disputed later."""

    transaction_id: int
    client_id: int
    transaction_type: TransactionType
    amount: Amount
    disputed: bool = False
    charged_back: bool = False


@dataclass(frozen=True)
class AccountSnapshot:
    client_id: int
    available: Amount
    held: Amount
    total: Amount
    locked: bool


@dataclass(frozen=True)
class ProcessingError:
    client_id: int
    transaction_id: int
    kind: ErrorKind
    message: str

    def __str__(self) -> str:
        return f"client={self.client_id} tx={self.transaction_id} {self.kind.value}: {self.message}"


class ProcessingStats:
    """Thread-safe counters for tracking processing statistics."""

    def __init__(self):
        self._lock = threading.Lock()
        self.processed = 0
        self.failed = 0
        self.skipped = 0

    def record_success(self):
        with self._lock:
            self.processed += 1

    def record_failure(self):
        with self._lock:
            self.failed += 1

    def record_skipped(self, count: int = 1):
        with self._lock:
            self.skipped += count
