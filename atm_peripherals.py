from abc import ABC, abstractmethod
from decimal import Decimal
from typing import List, Optional

from atm_events import (
    AmountEntered,
    CardEjected,
    CardInserted,
    CashDeposited,
    PinEntered,
    TransactionSelected,
)
from atm_states import TransactionType


# ---------------- OUTPUT ----------------
class Display(ABC):
    @abstractmethod
    def show(self, message: str):
        ...

    @abstractmethod
    def last_message(self) -> Optional[str]:
        ...


class CashDispenser(ABC):
    @abstractmethod
    def dispense(self, amount: Decimal):
        ...


# ---------------- INPUT ----------------
class CardReader(ABC):
    @abstractmethod
    def insert_card(self, card_id: str):
        ...

    @abstractmethod
    def eject_card(self):
        ...

    @abstractmethod
    def current_card_id(self) -> Optional[str]:
        ...


class Keypad(ABC):
    @abstractmethod
    def enter_pin(self, pin: str):
        ...

    @abstractmethod
    def select_transaction(self, kind: TransactionType):
        ...

    @abstractmethod
    def enter_amount(self, amount):
        ...


class DepositSlot(ABC):
    @abstractmethod
    def accept_cash(self, amount):
        ...


# ---------------- SIMULATED HARDWARE ----------------
class ConsoleDisplay(Display):
    def __init__(self, echo: bool = False):
        self.echo = echo
        self.history: List[str] = []

    def show(self, message: str):
        self.history.append(message)
        if self.echo:
            print(f"[ATM] {message}")

    def last_message(self) -> Optional[str]:
        return self.history[-1] if self.history else None


class SimulatedCashDispenser(CashDispenser):
    def __init__(self):
        self.dispensed: List[Decimal] = []

    def dispense(self, amount: Decimal):
        # real hardware would count out notes here
        self.dispensed.append(amount)

    def total_dispensed(self) -> Decimal:
        return sum(self.dispensed, Decimal("0"))


class SimulatedCardReader(CardReader):
    def __init__(self, machine):
        self.machine = machine
        self._card_id = None

    def insert_card(self, card_id: str):
        # a rejected card is not held by the reader
        step = self.machine.handle(CardInserted(card_id))
        self._card_id = step.session.card_id
        return step

    def eject_card(self):
        step = self.machine.handle(CardEjected())
        self._card_id = step.session.card_id
        return step

    def current_card_id(self) -> Optional[str]:
        return self._card_id


class SimulatedKeypad(Keypad):
    def __init__(self, machine):
        self.machine = machine

    def enter_pin(self, pin: str):
        return self.machine.handle(PinEntered(pin))

    def select_transaction(self, kind: TransactionType):
        return self.machine.handle(TransactionSelected(kind))

    def enter_amount(self, amount):
        return self.machine.handle(AmountEntered(amount))


class SimulatedDepositSlot(DepositSlot):
    def __init__(self, machine):
        self.machine = machine

    def accept_cash(self, amount):
        return self.machine.handle(CashDeposited(amount))
