from atm_bank import Ledger
from conftest import FAST_HASH
from init_ledger import DEMO_ACCOUNTS, build_demo_ledger


def test_demo_ledger_balances_and_pins():
    ledger = build_demo_ledger(Ledger(pin_hash_method=FAST_HASH))
    assert len(ledger) == len(DEMO_ACCOUNTS)
    for account_number, _, card_id, pin, balance in DEMO_ACCOUNTS:
        assert ledger.get_account_by_number(account_number).balance == balance
        assert ledger.check_pin(card_id, pin)


def test_app_seeds_demo_ledger_unless_disabled(monkeypatch):
    import app as atm_app

    monkeypatch.setattr(atm_app, "build_demo_ledger", lambda: build_demo_ledger(Ledger(pin_hash_method=FAST_HASH)))
    seeded = atm_app.create_app()
    assert len(seeded.extensions["atm_ledger"]) == len(DEMO_ACCOUNTS)

    empty = atm_app.create_app(DISABLE_SEED=True)
    assert len(empty.extensions["atm_ledger"]) == 0
