import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Dict, Tuple

from atm_bank import Account, Ledger
from atm_errors import InvariantViolation
from atm_events import (
    ATMEvent,
    AmountEntered,
    CardEjected,
    CardInserted,
    CashDeposited,
    PinEntered,
    TransactionSelected,
)
from atm_session import ATMSession
from atm_states import ATMState, TransactionType

log = logging.getLogger(__name__)

# ---------------- DISPLAY TEXT ----------------
MSG_INVALID_ACTION = "Invalid action, please try again."
MSG_ENTER_PIN = "Please enter your PIN"
MSG_INVALID_CARD = "Invalid card. Please try again."
MSG_CARD_EJECTED = "Card ejected"
MSG_PIN_CORRECT = "PIN correct, select transaction type"
MSG_INVALID_PIN = "Invalid PIN. Please try again"
MSG_SELECTION_CANCELLED = "Card ejected, transaction cancelled."
MSG_ENTER_AMOUNT = "Enter amount to withdraw:"
MSG_DEPOSIT_CASH = "Please deposit cash into the deposit box."
MSG_TAKE_CASH = "Please take your cash."
MSG_INSUFFICIENT_FUNDS = "Insufficient funds, please try again."
MSG_TRANSACTION_CANCELLED = "Transaction cancelled, card ejected"
MSG_DEPOSIT_SUCCESS = "Deposit successful. Deposited amount: {amount} to account: {account_number}"


# ---------------- EFFECTS ----------------
@dataclass(frozen=True)
class Show:
    message: str


@dataclass(frozen=True)
class Dispense:
    amount: Decimal


@dataclass(frozen=True)
class Step:
    """Result of handling one event: next state, next session, effects to run in order."""

    state: ATMState
    session: ATMSession
    effects: Tuple = ()

    @property
    def messages(self):
        return [e.message for e in self.effects if isinstance(e, Show)]

    @property
    def dispensed(self) -> Decimal:
        return sum((e.amount for e in self.effects if isinstance(e, Dispense)), Decimal("0"))


Handler = Callable[[ATMState, object, ATMSession, Ledger], Step]

_HANDLERS: Dict[Tuple[ATMState, type], Handler] = {}


def on(*states: ATMState, event=None):
    """Register a handler for `event` in each of `states`."""
    def register(fn: Handler) -> Handler:
        for state in states:
            _HANDLERS[(state, event)] = fn
        return fn
    return register


def handles(state: ATMState, event_type: type) -> bool:
    return (state, event_type) in _HANDLERS


def invalid_action(state, event, session, ledger) -> Step:
    return Step(state, session, (Show(MSG_INVALID_ACTION),))


def transition(state: ATMState, event, session: ATMSession, ledger: Ledger) -> Step:
    handler = _HANDLERS.get((state, type(event)), invalid_action)
    return handler(state, event, session, ledger)


# ---------------- HELPERS ----------------
def _resolve_account(session: ATMSession, ledger: Ledger) -> Account:
    # looked up per event so a card revoked mid-session is never served from a stale copy
    card_id = session.require_card()
    account = ledger.get_account_by_card(card_id)
    if account is None:
        raise InvariantViolation(f"No account linked to inserted card {card_id}")
    return account


def _execute_pending(session: ATMSession, ledger: Ledger) -> Tuple[Account, bool]:
    account = _resolve_account(session, ledger)
    if session.amount is None:
        raise InvariantViolation("No pending amount to execute")
    if session.transaction is TransactionType.WITHDRAW:
        return account, ledger.withdraw(account, session.amount)
    if session.transaction is TransactionType.DEPOSIT:
        ledger.deposit(account, session.amount)
        return account, True
    raise InvariantViolation("No transaction selected")


def _eject(message: str) -> Step:
    return Step(ATMState.IDLE, ATMSession(), (Show(message),))


# ---------------- IDLE ----------------
@on(ATMState.IDLE, event=CardInserted)
def accept_card(state, event: CardInserted, session, ledger) -> Step:
    if ledger.validate_card(event.card_id):
        return Step(ATMState.PIN_ENTRY, session.start(event.card_id), (Show(MSG_ENTER_PIN),))
    return Step(state, session, (Show(MSG_INVALID_CARD),))


# ---------------- PIN ENTRY ----------------
@on(ATMState.PIN_ENTRY, event=CardEjected)
def eject_before_pin(state, event, session, ledger) -> Step:
    return _eject(MSG_CARD_EJECTED)


@on(ATMState.PIN_ENTRY, event=PinEntered)
def verify_pin(state, event: PinEntered, session, ledger) -> Step:
    card_id = session.require_card()
    if ledger.check_pin(card_id, event.pin):
        return Step(ATMState.TRANSACTION_SELECTION, session, (Show(MSG_PIN_CORRECT),))
    return Step(state, session, (Show(MSG_INVALID_PIN),))


# ---------------- TRANSACTION SELECTION ----------------
@on(ATMState.TRANSACTION_SELECTION, event=CardEjected)
def eject_at_selection(state, event, session, ledger) -> Step:
    return _eject(MSG_SELECTION_CANCELLED)


@on(ATMState.TRANSACTION_SELECTION, event=TransactionSelected)
def select_transaction(state, event: TransactionSelected, session, ledger) -> Step:
    session.require_card()
    if event.kind is TransactionType.WITHDRAW:
        return Step(ATMState.WITHDRAW_AMOUNT_ENTRY, session.select(event.kind), (Show(MSG_ENTER_AMOUNT),))
    return Step(ATMState.DEPOSIT_COLLECTION, session.select(event.kind), (Show(MSG_DEPOSIT_CASH),))


# ---------------- WITHDRAW / DEPOSIT ----------------
@on(ATMState.WITHDRAW_AMOUNT_ENTRY, ATMState.DEPOSIT_COLLECTION, event=CardEjected)
def cancel_transaction(state, event, session, ledger) -> Step:
    return _eject(MSG_TRANSACTION_CANCELLED)


@on(ATMState.WITHDRAW_AMOUNT_ENTRY, event=AmountEntered)
def withdraw_amount(state, event: AmountEntered, session, ledger) -> Step:
    pending = session.with_amount(event.amount)
    _, ok = _execute_pending(pending, ledger)
    if ok:
        effects = (Dispense(event.amount), Show(MSG_TAKE_CASH))
    else:
        effects = (Show(MSG_INSUFFICIENT_FUNDS),)
    return Step(ATMState.TRANSACTION_SELECTION, pending.reset_for_next_transaction(), effects)


@on(ATMState.DEPOSIT_COLLECTION, event=CashDeposited)
def collect_deposit(state, event: CashDeposited, session, ledger) -> Step:
    pending = session.with_amount(event.amount)
    account, _ = _execute_pending(pending, ledger)
    message = MSG_DEPOSIT_SUCCESS.format(amount=event.amount, account_number=account.account_number)
    return Step(ATMState.TRANSACTION_SELECTION, pending.reset_for_next_transaction(), (Show(message),))


# ---------------- CONTROLLER ----------------
def check_consistency(state: ATMState, session: ATMSession):
    if (state is ATMState.IDLE) == session.has_card:
        raise InvariantViolation(f"State {state.name} is inconsistent with card={session.card_id!r}")
    if state is ATMState.WITHDRAW_AMOUNT_ENTRY and session.transaction is not TransactionType.WITHDRAW:
        raise InvariantViolation("Withdraw amount entry without a withdraw transaction selected")
    if state is ATMState.DEPOSIT_COLLECTION and session.transaction is not TransactionType.DEPOSIT:
        raise InvariantViolation("Deposit collection without a deposit transaction selected")


class ATMStateMachine:
    """
    Holds the active state and session, routes each event through
    `transition` and plays the resulting effects on the output peripherals.
    One session at a time; events must not be delivered concurrently.
    """

    def __init__(self, ledger: Ledger, display, cash_dispenser):
        self.ledger = ledger
        self.display = display
        self.cash_dispenser = cash_dispenser
        self._state = ATMState.IDLE
        self._session = ATMSession()

    @property
    def state(self) -> ATMState:
        return self._state

    @property
    def session(self) -> ATMSession:
        return self._session

    def handle(self, event) -> Step:
        if not isinstance(event, ATMEvent):
            raise InvariantViolation(f"Unsupported event: {event!r}")

        if not handles(self._state, type(event)):
            log.debug("Ignored %s in state %s", type(event).__name__, self._state.name)

        step = transition(self._state, event, self._session, self.ledger)
        check_consistency(step.state, step.session)

        if step.state is not self._state:
            log.info("State transition: %s -> %s on %s", self._state.name, step.state.name, type(event).__name__)
        self._state = step.state
        self._session = step.session

        for effect in step.effects:
            if isinstance(effect, Dispense):
                self.cash_dispenser.dispense(effect.amount)
            else:
                self.display.show(effect.message)
        return step

    # ---------------- CONVENIENCE ----------------
    def insert_card(self, card_id: str) -> Step:
        return self.handle(CardInserted(card_id))

    def eject_card(self) -> Step:
        return self.handle(CardEjected())

    def enter_pin(self, pin: str) -> Step:
        return self.handle(PinEntered(pin))

    def select_transaction(self, kind: TransactionType) -> Step:
        return self.handle(TransactionSelected(kind))

    def enter_amount(self, amount) -> Step:
        return self.handle(AmountEntered(amount))

    def deposit_cash(self, amount) -> Step:
        return self.handle(CashDeposited(amount))
