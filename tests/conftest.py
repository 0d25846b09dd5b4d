# tests/conftest.py
from decimal import Decimal

import pytest

from app import create_app
from atm_bank import AccountType, Ledger
from atm_logic import ATMStateMachine
from atm_peripherals import (
    ConsoleDisplay,
    SimulatedCardReader,
    SimulatedCashDispenser,
    SimulatedDepositSlot,
    SimulatedKeypad,
)

# scrypt is deliberately slow; a cheap pbkdf2 keeps the suite fast
FAST_HASH = "pbkdf2:sha256:1000"

ACCOUNT_NUMBER = "123456"
CARD_ID = "1111-2222-3333-4444"
PIN = "1234"


class ATMRig:
    """Controller plus simulated hardware, wired the way a real machine would be."""

    def __init__(self, ledger):
        self.ledger = ledger
        self.display = ConsoleDisplay()
        self.cash_dispenser = SimulatedCashDispenser()
        self.machine = ATMStateMachine(ledger, self.display, self.cash_dispenser)
        self.card_reader = SimulatedCardReader(self.machine)
        self.keypad = SimulatedKeypad(self.machine)
        self.deposit_slot = SimulatedDepositSlot(self.machine)

    @property
    def message(self):
        return self.display.last_message()

    def login(self, card_id=CARD_ID, pin=PIN):
        self.card_reader.insert_card(card_id)
        self.keypad.enter_pin(pin)


@pytest.fixture()
def ledger():
    return Ledger(pin_hash_method=FAST_HASH)


@pytest.fixture()
def account(ledger):
    return ledger.add_account(ACCOUNT_NUMBER, AccountType.SAVING, CARD_ID, PIN)


@pytest.fixture()
def funded_account(ledger, account):
    ledger.deposit(account, Decimal("500"))
    return account


@pytest.fixture()
def rig(ledger, account):
    return ATMRig(ledger)


@pytest.fixture()
def app(ledger, account):
    return create_app(ledger=ledger, ADMIN_USER="admin", ADMIN_PASSWORD="pw", TESTING=True)


@pytest.fixture()
def client(app):
    return app.test_client()
