"""
Events delivered to the ATM controller by its input peripherals.

Card reader: CardInserted, CardEjected. Keypad: PinEntered,
TransactionSelected, AmountEntered. Deposit slot: CashDeposited.
"""
from dataclasses import dataclass
from decimal import Decimal

from atm_bank import parse_amount
from atm_states import TransactionType


@dataclass(frozen=True)
class CardInserted:
    card_id: str


@dataclass(frozen=True)
class CardEjected:
    pass


@dataclass(frozen=True)
class PinEntered:
    pin: str

    def __repr__(self):
        return "PinEntered(pin='****')"


@dataclass(frozen=True)
class TransactionSelected:
    kind: TransactionType

    def __post_init__(self):
        if not isinstance(self.kind, TransactionType):
            object.__setattr__(self, "kind", TransactionType(self.kind))


@dataclass(frozen=True)
class AmountEntered:
    amount: Decimal

    def __post_init__(self):
        object.__setattr__(self, "amount", parse_amount(self.amount))


@dataclass(frozen=True)
class CashDeposited:
    amount: Decimal

    def __post_init__(self):
        object.__setattr__(self, "amount", parse_amount(self.amount))


ATMEvent = (CardInserted, CardEjected, PinEntered, TransactionSelected, AmountEntered, CashDeposited)
