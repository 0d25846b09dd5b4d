from abc import ABC, abstractmethod
from decimal import Decimal

from atm_states import TransactionType


class Transaction(ABC):
    """
    A single balance change against one account.

    validate() and apply() are separate so the caller decides whether to
    apply before anything is mutated. Instances live for one event only.
    """

    type: TransactionType = None

    def __init__(self, account, amount: Decimal):
        self.account = account
        self.amount = amount

    @abstractmethod
    def validate(self) -> bool:
        ...

    @abstractmethod
    def apply(self):
        ...

    def __repr__(self):
        return f"{self.__class__.__name__}({self.account.account_number!r}, {self.amount})"


class WithdrawTransaction(Transaction):
    type = TransactionType.WITHDRAW

    def validate(self) -> bool:
        # withdrawing the full balance is allowed
        return self.amount <= self.account.balance

    def apply(self):
        self.account.update_balance(-self.amount)


class DepositTransaction(Transaction):
    type = TransactionType.DEPOSIT

    def validate(self) -> bool:
        return True

    def apply(self):
        self.account.update_balance(self.amount)
