import logging
from decimal import Decimal

from atm_bank import AccountType, Ledger

log = logging.getLogger(__name__)

# account number, type, card id, PIN, opening balance
DEMO_ACCOUNTS = [
    ("123456", AccountType.SAVING, "1111-2222-3333-4444", "1234", Decimal("500")),
    ("654321", AccountType.CHECKING, "5555-6666-7777-8888", "4321", Decimal("50000")),
]


def build_demo_ledger(ledger: Ledger = None) -> Ledger:
    ledger = ledger if ledger is not None else Ledger()
    for account_number, account_type, card_id, pin, balance in DEMO_ACCOUNTS:
        account = ledger.add_account(account_number, account_type, card_id, pin)
        if balance:
            ledger.deposit(account, balance)
    log.info("Demo ledger ready with %d accounts", len(ledger))
    return ledger


if __name__ == "__main__":
    from logger_config import setup_logging

    setup_logging()
    for account in build_demo_ledger().accounts():
        print(f"{account.account_number}  card={account.card_id}  balance={account.balance}")
