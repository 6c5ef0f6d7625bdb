import logging
from typing import Dict

from amount import Amount, ZERO
from exceptions import (
    AccountLocked,
    AlreadyDisputed,
    DuplicateTransaction,
    InsufficientFunds,
    NotDisputed,
    UnknownTransaction,
)
from models import AccountSnapshot, StoredTransaction, TransactionType

logger = logging.getLogger(__name__)


class Account:
    """
    Balance state machine for a single client.

    Every operation either applies completely or raises a TransactionError
    with the account left untouched. Once locked, nothing mutates it again.
    """

    def __init__(self, client_id: int):
        self.client_id = client_id
        self._available = ZERO
        self._held = ZERO
        self._locked = False
        self._transactions: Dict[int, StoredTransaction] = {}

    @property
    def available(self) -> Amount:
        return self._available

    @property
    def held(self) -> Amount:
        return self._held

    @property
    def total(self) -> Amount:
        return self._available + self._held

    @property
    def locked(self) -> bool:
        return self._locked

    def has_transaction(self, transaction_id: int) -> bool:
        return transaction_id in self._transactions

    def deposit(self, transaction_id: int, amount: Amount) -> None:
        self._check_unlocked(transaction_id)
        self._check_new(transaction_id)

        self._available += amount
        self._record(transaction_id, TransactionType.DEPOSIT, amount)

    def withdraw(self, transaction_id: int, amount: Amount) -> None:
        self._check_unlocked(transaction_id)
        self._check_new(transaction_id)

        if self._available < amount:
            raise InsufficientFunds(
                self.client_id, transaction_id,
                f"available {self._available} is less than {amount}",
            )

        self._available -= amount
        self._record(transaction_id, TransactionType.WITHDRAWAL, amount)

    def dispute(self, transaction_id: int) -> None:
        # Deposits and withdrawals are held the same way, so disputing a
        # withdrawal can take available below zero.
        self._check_unlocked(transaction_id)
        stored = self._lookup(transaction_id)

        if stored.disputed:
            raise AlreadyDisputed(self.client_id, transaction_id)

        self._available -= stored.amount
        self._held += stored.amount
        stored.disputed = True

    def resolve(self, transaction_id: int) -> None:
        self._check_unlocked(transaction_id)
        stored = self._lookup_disputed(transaction_id)

        self._held -= stored.amount
        self._available += stored.amount
        stored.disputed = False

    def chargeback(self, transaction_id: int) -> None:
        self._check_unlocked(transaction_id)
        stored = self._lookup_disputed(transaction_id)

        self._held -= stored.amount
        self._locked = True
        stored.disputed = False
        stored.charged_back = True
        logger.info(f"Client {self.client_id} locked by chargeback of tx {transaction_id}")

    def snapshot(self) -> AccountSnapshot:
        return AccountSnapshot(
            client_id=self.client_id,
            available=self._available,
            held=self._held,
            total=self.total,
            locked=self._locked,
        )

    def _check_unlocked(self, transaction_id: int) -> None:
        if self._locked:
            raise AccountLocked(self.client_id, transaction_id)

    def _check_new(self, transaction_id: int) -> None:
        if transaction_id in self._transactions:
            raise DuplicateTransaction(self.client_id, transaction_id)

    def _lookup(self, transaction_id: int) -> StoredTransaction:
        stored = self._transactions.get(transaction_id)
        if stored is None:
            raise UnknownTransaction(self.client_id, transaction_id)
        return stored

    def _lookup_disputed(self, transaction_id: int) -> StoredTransaction:
        stored = self._lookup(transaction_id)
        if not stored.disputed:
            raise NotDisputed(self.client_id, transaction_id)
        return stored

    def _record(self, transaction_id: int, transaction_type: TransactionType, amount: Amount) -> None:
        self._transactions[transaction_id] = StoredTransaction(
            transaction_id=transaction_id,
            client_id=self.client_id,
            transaction_type=transaction_type,
            amount=amount,
        )

    def __repr__(self) -> str:
        return (
            f"Account(client={self.client_id}, available={self._available}, "
            f"held={self._held}, locked={self._locked})"
        )
