import logging
import threading
from decimal import Context, Decimal, DecimalException, Inexact, InvalidOperation, Overflow, Rounded
from enum import Enum
from typing import Dict, Iterator, Optional

from werkzeug.security import check_password_hash, generate_password_hash

import config
from atm_errors import DuplicateAccountError, InvalidAmountError, InvariantViolation
from atm_transactions import DepositTransaction, WithdrawTransaction

log = logging.getLogger(__name__)

ZERO = Decimal("0")
CENT = Decimal("0.01")

# traps every lossy operation so a balance is either exact or unchanged
MONEY_CONTEXT = Context(prec=34, traps=[InvalidOperation, Inexact, Rounded, Overflow])


class AccountType(Enum):
    CHECKING = "checking"
    SAVING = "saving"


def parse_amount(value) -> Decimal:
    """
    Convert user or caller input to an exact Decimal quantized to cents.

    Floats are refused outright since they cannot carry an exact money value.
    Negative, NaN, infinite, sub-cent and over-limit amounts are refused as well.
    """
    if isinstance(value, bool) or isinstance(value, float):
        raise InvalidAmountError(f"Amount must be an exact decimal, got {value!r}")
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, str)):
        try:
            amount = Decimal(value.strip() if isinstance(value, str) else value)
        except InvalidOperation as e:
            raise InvalidAmountError(f"Amount is not a number: {value!r}") from e
    else:
        raise InvalidAmountError(f"Unsupported amount type: {type(value).__name__}")

    if not amount.is_finite():
        raise InvalidAmountError(f"Amount must be finite, got {value!r}")
    if amount < 0:
        raise InvalidAmountError(f"Amount must be >= 0, got {amount}")
    max_amount = Decimal(config.MAX_AMOUNT)
    if amount > max_amount:
        raise InvalidAmountError(f"Amount must be <= {max_amount}")

    cents = amount.quantize(CENT)
    if cents != amount:
        raise InvalidAmountError(f"Amount must not have fractions of a cent, got {value!r}")
    return cents


class Account:
    def __init__(self, account_number: str, account_type: AccountType, card_id: str, pin: str,
                 pin_hash_method: str = None):
        self.account_number = account_number
        self.account_type = account_type
        self.card_id = card_id
        self._pin_hash = generate_password_hash(pin, method=pin_hash_method or config.PIN_HASH_METHOD)
        self._balance = ZERO
        # held across check + mutation of the balance
        self.lock = threading.RLock()

    @property
    def balance(self) -> Decimal:
        return self._balance

    def validate_pin(self, pin: str) -> bool:
        return check_password_hash(self._pin_hash, pin)

    def update_balance(self, change: Decimal):
        with self.lock:
            try:
                new_balance = MONEY_CONTEXT.add(self._balance, change)
            except DecimalException as e:
                raise InvariantViolation(
                    f"Balance change {change} on account {self.account_number} is not exact") from e
            self._balance = new_balance

    def __repr__(self):
        return f"Account({self.account_number!r}, {self.account_type.name}, balance={self._balance})"


class Ledger:
    """
    Account store keyed both by account number and by card id.

    Both maps are only ever written together in add_account, so an account
    is reachable through exactly one number and one card.
    """

    def __init__(self, pin_hash_method: str = None):
        self._accounts: Dict[str, Account] = {}
        self._accounts_by_card: Dict[str, Account] = {}
        self._pin_hash_method = pin_hash_method
        self._lock = threading.Lock()

    # ---------------- REGISTRATION ----------------
    def add_account(self, account_number: str, account_type: AccountType, card_id: str, pin: str) -> Account:
        with self._lock:
            if account_number in self._accounts:
                log.warning("add_account rejected: account %s already registered", account_number)
                raise DuplicateAccountError(f"Account '{account_number}' already exists")
            if card_id in self._accounts_by_card:
                log.warning("add_account rejected: card %s already linked", card_id)
                raise DuplicateAccountError(f"Card '{card_id}' is already linked to an account")

            account = Account(account_number, account_type, card_id, pin, self._pin_hash_method)
            self._accounts[account_number] = account
            self._accounts_by_card[card_id] = account

        log.info("add_account number=%s type=%s", account_number, account_type.name)
        return account

    # ---------------- LOOKUPS ----------------
    def validate_card(self, card_id: str) -> bool:
        return self.get_account_by_card(card_id) is not None

    def check_pin(self, card_id: str, pin: str) -> bool:
        account = self.get_account_by_card(card_id)
        if account is None:
            return False
        return account.validate_pin(pin)

    def get_account_by_card(self, card_id: str) -> Optional[Account]:
        return self._accounts_by_card.get(card_id)

    def get_account_by_number(self, account_number: str) -> Optional[Account]:
        return self._accounts.get(account_number)

    def accounts(self) -> Iterator[Account]:
        return iter(list(self._accounts.values()))

    def __len__(self):
        return len(self._accounts)

    # ---------------- MUTATIONS ----------------
    def withdraw(self, account: Account, amount) -> bool:
        amount = parse_amount(amount)
        with account.lock:
            transaction = WithdrawTransaction(account, amount)
            if not transaction.validate():
                log.info("withdraw rejected number=%s amount=%s balance=%s",
                         account.account_number, amount, account.balance)
                return False
            transaction.apply()
            new_balance = account.balance

        log.info("withdraw number=%s amount=%s new_balance=%s", account.account_number, amount, new_balance)
        return True

    def deposit(self, account: Account, amount):
        amount = parse_amount(amount)
        with account.lock:
            transaction = DepositTransaction(account, amount)
            if transaction.validate():
                transaction.apply()
            new_balance = account.balance

        log.info("deposit number=%s amount=%s new_balance=%s", account.account_number, amount, new_balance)
