import logging
from typing import Callable, Dict, List, Optional

from account import Account
from amount import Amount
from exceptions import MissingAmount, TransactionError
from models import AccountSnapshot, ProcessingError, ProcessingStats, Transaction, TransactionType

logger = logging.getLogger(__name__)

ErrorSink = Callable[[ProcessingError], None]


def log_processing_error(error: ProcessingError) -> None:
    logger.warning(f"Rejected {error}")


class Ledger:
    """
    Applies transactions to per-client accounts.
    Holds no balance logic of its own: each record is dispatched to the owning
    Account and any rejection is handed to the error sink as a ProcessingError.
    Not thread-safe; callers feed it from a single thread.
    """

    def __init__(self, error_sink: Optional[ErrorSink] = None):
        self._accounts: Dict[int, Account] = {}
        self._error_sink = error_sink or log_processing_error
        self.stats = ProcessingStats()

    def apply(self, transaction: Transaction) -> bool:
        """
        Apply a single transaction.
        Returns True if it was applied, False if it was rejected and reported.
        """
        account = self._get_or_create_account(transaction.client_id)

        try:
            self._dispatch(account, transaction)
        except TransactionError as e:
            self.stats.record_failure()
            self._error_sink(ProcessingError(
                client_id=e.client_id,
                transaction_id=e.transaction_id,
                kind=e.kind,
                message=str(e),
            ))
            return False

        self.stats.record_success()
        return True

    def _dispatch(self, account: Account, transaction: Transaction) -> None:
        transaction_id = transaction.transaction_id

        match transaction.transaction_type:
            case TransactionType.DEPOSIT:
                account.deposit(transaction_id, self._require_amount(transaction))
            case TransactionType.WITHDRAWAL:
                account.withdraw(transaction_id, self._require_amount(transaction))
            case TransactionType.DISPUTE:
                account.dispute(transaction_id)
            case TransactionType.RESOLVE:
                account.resolve(transaction_id)
            case TransactionType.CHARGEBACK:
                account.chargeback(transaction_id)

    @staticmethod
    def _require_amount(transaction: Transaction) -> Amount:
        if transaction.amount is None:
            raise MissingAmount(
                transaction.client_id, transaction.transaction_id,
                f"{transaction.transaction_type.value} without an amount",
            )
        return transaction.amount

    def _get_or_create_account(self, client_id: int) -> Account:
        account = self._accounts.get(client_id)
        if account is None:
            account = self._accounts[client_id] = Account(client_id)
        return account

    def snapshot(self, client_id: int) -> Optional[AccountSnapshot]:
        account = self._accounts.get(client_id)
        return account.snapshot() if account is not None else None

    def snapshot_all(self) -> List[AccountSnapshot]:
        """Snapshots of every account, ordered by client id."""
        return [self._accounts[client_id].snapshot() for client_id in sorted(self._accounts)]

    def __len__(self) -> int:
        return len(self._accounts)

    def __contains__(self, client_id: int) -> bool:
        return client_id in self._accounts
