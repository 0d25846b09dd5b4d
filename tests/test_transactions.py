from decimal import Decimal

import pytest

from atm_states import TransactionType
from atm_transactions import DepositTransaction, Transaction, WithdrawTransaction


def test_withdraw_validation_allows_full_balance(ledger, funded_account):
    assert WithdrawTransaction(funded_account, Decimal("500")).validate()
    assert not WithdrawTransaction(funded_account, Decimal("500.01")).validate()


def test_validate_does_not_mutate(funded_account):
    WithdrawTransaction(funded_account, Decimal("100")).validate()
    DepositTransaction(funded_account, Decimal("100")).validate()
    assert funded_account.balance == Decimal("500")


def test_apply(funded_account):
    WithdrawTransaction(funded_account, Decimal("120")).apply()
    assert funded_account.balance == Decimal("380")
    DepositTransaction(funded_account, Decimal("20")).apply()
    assert funded_account.balance == Decimal("400")


def test_deposit_always_valid(account):
    assert DepositTransaction(account, Decimal("1000000")).validate()


def test_types():
    assert WithdrawTransaction.type is TransactionType.WITHDRAW
    assert DepositTransaction.type is TransactionType.DEPOSIT


def test_base_transaction_is_abstract(account):
    with pytest.raises(TypeError):
        Transaction(account, Decimal("1"))
