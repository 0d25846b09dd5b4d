import config
from atm_bank import Ledger, parse_amount
from atm_errors import InvalidAmountError
from atm_logic import ATMStateMachine
from atm_peripherals import (
    ConsoleDisplay,
    SimulatedCardReader,
    SimulatedCashDispenser,
    SimulatedDepositSlot,
    SimulatedKeypad,
)
from atm_states import ATMState, TransactionType
from init_ledger import build_demo_ledger


def read_amount(prompt: str):
    """Prompt until a valid amount is typed; blank input cancels (returns None)."""
    while True:
        raw = input(prompt).strip()
        if not raw:
            return None
        try:
            amount = parse_amount(raw)
        except InvalidAmountError as e:
            print(e)
            continue
        if amount == 0:
            print("Amount must be > 0")
            continue
        return amount


def atm_ui(ledger: Ledger = None) -> ATMStateMachine:
    ledger = ledger if ledger is not None else build_demo_ledger()
    display = ConsoleDisplay(echo=True)
    machine = ATMStateMachine(ledger, display, SimulatedCashDispenser())
    card_reader = SimulatedCardReader(machine)
    keypad = SimulatedKeypad(machine)
    deposit_slot = SimulatedDepositSlot(machine)

    print("=== Welcome to the ATM ===")

    # ---------------- Card ----------------
    while machine.state == ATMState.IDLE:
        card_id = input("Insert card (enter Card ID, blank to quit): ").strip()
        if not card_id:
            return machine
        card_reader.insert_card(card_id)

    # ---------------- PIN Verification ----------------
    while machine.state == ATMState.PIN_ENTRY:
        pin = input("Enter PIN (blank to eject card): ").strip()
        if not pin:
            card_reader.eject_card()
            return machine
        keypad.enter_pin(pin)

    # ---------------- Transaction Loop ----------------
    while machine.state == ATMState.TRANSACTION_SELECTION:
        print("Select Transaction:")
        print("1) Withdraw")
        print("2) Deposit")
        print("3) Exit")
        choice = input("Choice: ").strip()

        if choice == "1":
            keypad.select_transaction(TransactionType.WITHDRAW)
            amount = read_amount("Enter withdrawal amount (blank to cancel): ")
            if amount is None:
                card_reader.eject_card()
                break
            keypad.enter_amount(amount)
            _print_balance(machine, card_reader)

        elif choice == "2":
            keypad.select_transaction(TransactionType.DEPOSIT)
            amount = read_amount("Insert cash (enter amount, blank to cancel): ")
            if amount is None:
                card_reader.eject_card()
                break
            deposit_slot.accept_cash(amount)
            _print_balance(machine, card_reader)

        elif choice == "3":
            card_reader.eject_card()
            print("Thank you for using the ATM. Goodbye!")
            break

        else:
            print("Invalid choice. Try again.\n")

    return machine


def _print_balance(machine: ATMStateMachine, card_reader: SimulatedCardReader):
    account = machine.ledger.get_account_by_card(card_reader.current_card_id())
    if account is not None:
        print(f"Your account balance is: {config.CURRENCY_SYMBOL}{account.balance}\n")


if __name__ == "__main__":
    from logger_config import setup_logging

    setup_logging(level="WARNING")
    atm_ui()
