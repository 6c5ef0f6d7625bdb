from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    DUPLICATE_TRANSACTION = "duplicate_transaction"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    ACCOUNT_LOCKED = "account_locked"
    UNKNOWN_TRANSACTION = "unknown_transaction"
    ALREADY_DISPUTED = "already_disputed"
    NOT_DISPUTED = "not_disputed"
    MISSING_AMOUNT = "missing_amount"


class ParseError(ValueError):
    """Raised by the input side for a malformed amount or record."""


class TransactionError(Exception):
    """
    Base for every per-record rejection raised by an account.
    These are never fatal: the ledger turns them into ProcessingError values.
    """

    kind: ErrorKind

    def __init__(self, client_id: int, transaction_id: int, message: Optional[str] = None):
        self.client_id = client_id
        self.transaction_id = transaction_id
        super().__init__(message or self.kind.value.replace("_", " "))


class DuplicateTransaction(TransactionError):
    kind = ErrorKind.DUPLICATE_TRANSACTION


class InsufficientFunds(TransactionError):
    kind = ErrorKind.INSUFFICIENT_FUNDS


class AccountLocked(TransactionError):
    kind = ErrorKind.ACCOUNT_LOCKED


class UnknownTransaction(TransactionError):
    kind = ErrorKind.UNKNOWN_TRANSACTION


class AlreadyDisputed(TransactionError):
    kind = ErrorKind.ALREADY_DISPUTED


class NotDisputed(TransactionError):
    kind = ErrorKind.NOT_DISPUTED


class MissingAmount(TransactionError):
    kind = ErrorKind.MISSING_AMOUNT


class ChannelClosed(Exception):
    """Raised when sending on, or receiving from a drained, closed channel."""


class NoAnswer(Exception):
    """A reply channel was closed before a value was sent on it."""
