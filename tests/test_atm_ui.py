from decimal import Decimal

import pytest

import config
from atm_states import ATMState
from conftest import CARD_ID, PIN


@pytest.fixture()
def keyboard(monkeypatch):
    def type_lines(*lines):
        answers = iter(lines)
        monkeypatch.setattr("builtins.input", lambda prompt="": next(answers))
    return type_lines


def test_withdraw_then_exit(keyboard, capsys, ledger, funded_account):
    from atm_ui import atm_ui

    keyboard(CARD_ID, PIN, "1", "200", "3")
    machine = atm_ui(ledger)

    out = capsys.readouterr().out
    assert "Please take your cash." in out
    assert f"{config.CURRENCY_SYMBOL}300.00" in out
    assert machine.state is ATMState.IDLE
    assert funded_account.balance == Decimal("300")


def test_bad_pin_retry_and_deposit(keyboard, capsys, ledger, account):
    from atm_ui import atm_ui

    keyboard(CARD_ID, "0000", PIN, "2", "abc", "0", "75.50", "3")
    atm_ui(ledger)

    out = capsys.readouterr().out
    assert "Invalid PIN. Please try again" in out
    assert "Amount must be > 0" in out
    assert account.balance == Decimal("75.50")


def test_invalid_card_then_quit(keyboard, capsys, ledger, account):
    from atm_ui import atm_ui

    keyboard("bogus", "")
    machine = atm_ui(ledger)

    assert "Invalid card. Please try again." in capsys.readouterr().out
    assert machine.state is ATMState.IDLE


def test_cancel_amount_ejects_card(keyboard, ledger, funded_account):
    from atm_ui import atm_ui

    keyboard(CARD_ID, PIN, "1", "")
    machine = atm_ui(ledger)

    assert machine.state is ATMState.IDLE
    assert funded_account.balance == Decimal("500")
