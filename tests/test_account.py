import sys
import os

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from account import Account
from amount import Amount, ZERO
from exceptions import (
    AccountLocked,
    AlreadyDisputed,
    DuplicateTransaction,
    ErrorKind,
    InsufficientFunds,
    NotDisputed,
    UnknownTransaction,
)
from models import AccountSnapshot


def amt(value: str) -> Amount:
    return Amount.parse(value)


class TestAccount:
    def setup_method(self):
        self.account = Account(client_id=1)

    def test_new_account_is_empty(self):
        assert self.account.snapshot() == AccountSnapshot(1, ZERO, ZERO, ZERO, False)

    def test_deposit(self):
        self.account.deposit(1, amt("10"))
        assert self.account.available == amt("10")
        assert self.account.total == amt("10")
        assert self.account.has_transaction(1)

    def test_duplicate_deposit_rejected(self):
        self.account.deposit(1, amt("10"))
        with pytest.raises(DuplicateTransaction) as excinfo:
            self.account.deposit(1, amt("10"))
        assert excinfo.value.kind == ErrorKind.DUPLICATE_TRANSACTION
        assert self.account.available == amt("10")

    def test_withdrawal_reusing_deposit_tx_rejected(self):
        self.account.deposit(1, amt("10"))
        with pytest.raises(DuplicateTransaction):
            self.account.withdraw(1, amt("5"))
        assert self.account.available == amt("10")

    def test_withdraw(self):
        self.account.deposit(1, amt("10"))
        self.account.withdraw(2, amt("3"))
        assert self.account.available == amt("7")

    def test_withdraw_whole_balance(self):
        self.account.deposit(1, amt("10"))
        self.account.withdraw(2, amt("10"))
        assert self.account.available == ZERO

    def test_insufficient_funds(self):
        self.account.deposit(1, amt("5"))
        with pytest.raises(InsufficientFunds) as excinfo:
            self.account.withdraw(2, amt("6"))
        assert excinfo.value.client_id == 1
        assert excinfo.value.transaction_id == 2
        assert self.account.available == amt("5")
        # A rejected withdrawal is not recorded, so its tx can be used later.
        assert not self.account.has_transaction(2)

    def test_dispute_moves_funds_to_held(self):
        self.account.deposit(1, amt("10"))
        self.account.dispute(1)
        assert self.account.snapshot() == AccountSnapshot(1, ZERO, amt("10"), amt("10"), False)

    def test_dispute_unknown_transaction(self):
        self.account.deposit(1, amt("10"))
        before = self.account.snapshot()
        with pytest.raises(UnknownTransaction):
            self.account.dispute(99)
        assert self.account.snapshot() == before

    def test_dispute_twice(self):
        self.account.deposit(1, amt("10"))
        self.account.dispute(1)
        with pytest.raises(AlreadyDisputed):
            self.account.dispute(1)
        assert self.account.held == amt("10")

    def test_dispute_then_resolve_is_noop(self):
        self.account.deposit(1, amt("10"))
        self.account.withdraw(2, amt("4"))
        before = self.account.snapshot()
        self.account.dispute(1)
        self.account.resolve(1)
        assert self.account.snapshot() == before

    def test_resolve_not_disputed(self):
        self.account.deposit(1, amt("10"))
        with pytest.raises(NotDisputed):
            self.account.resolve(1)

    def test_resolve_unknown(self):
        with pytest.raises(UnknownTransaction):
            self.account.resolve(1)

    def test_redispute_after_resolve(self):
        self.account.deposit(1, amt("10"))
        self.account.dispute(1)
        self.account.resolve(1)
        self.account.dispute(1)
        assert self.account.held == amt("10")

    def test_chargeback(self):
        self.account.deposit(1, amt("10"))
        self.account.deposit(2, amt("5"))
        self.account.dispute(1)
        self.account.chargeback(1)
        assert self.account.snapshot() == AccountSnapshot(1, amt("5"), ZERO, amt("5"), True)

    def test_chargeback_not_disputed(self):
        self.account.deposit(1, amt("10"))
        with pytest.raises(NotDisputed):
            self.account.chargeback(1)
        assert self.account.locked is False

    def test_chargeback_unknown(self):
        with pytest.raises(UnknownTransaction):
            self.account.chargeback(5)

    def test_locked_account_rejects_everything(self):
        self.account.deposit(1, amt("10"))
        self.account.deposit(2, amt("3"))
        self.account.dispute(1)
        self.account.chargeback(1)
        before = self.account.snapshot()

        with pytest.raises(AccountLocked):
            self.account.deposit(3, amt("5"))
        with pytest.raises(AccountLocked):
            self.account.withdraw(4, amt("1"))
        with pytest.raises(AccountLocked):
            self.account.dispute(2)
        with pytest.raises(AccountLocked):
            self.account.resolve(1)
        with pytest.raises(AccountLocked):
            self.account.chargeback(1)

        assert self.account.snapshot() == before

    def test_disputed_withdrawal_is_held(self):
        self.account.deposit(1, amt("10"))
        self.account.withdraw(2, amt("4"))
        self.account.dispute(2)
        assert self.account.available == amt("2")
        assert self.account.held == amt("4")
        assert self.account.total == amt("6")

    def test_worked_example(self):
        self.account.deposit(1, amt("10.0000"))
        self.account.withdraw(2, amt("3.0000"))
        assert self.account.snapshot() == AccountSnapshot(1, amt("7"), ZERO, amt("7"), False)

        self.account.dispute(1)
        assert self.account.snapshot() == AccountSnapshot(1, amt("-3"), amt("10"), amt("7"), False)

        self.account.chargeback(1)
        locked = AccountSnapshot(1, amt("-3"), ZERO, amt("-3"), True)
        assert self.account.snapshot() == locked

        with pytest.raises(AccountLocked):
            self.account.deposit(3, amt("5"))
        assert self.account.snapshot() == locked

    def test_conservation(self):
        deposits = ["12.5", "0.0001", "100", "7.25"]
        withdrawals = ["3.3333", "50", "0.0001"]
        expected = ZERO
        for tx, value in enumerate(deposits, start=1):
            self.account.deposit(tx, amt(value))
            expected += amt(value)
        for tx, value in enumerate(withdrawals, start=100):
            self.account.withdraw(tx, amt(value))
            expected -= amt(value)

        assert self.account.available + self.account.held == expected
        assert self.account.total == expected
