import importlib
from decimal import Decimal

import pytest

import config
from atm_bank import parse_amount
from atm_errors import InvalidAmountError


@pytest.fixture()
def env_config(monkeypatch):
    def load(**env):
        for name, value in env.items():
            monkeypatch.setenv(name, value)
        return importlib.reload(config)
    yield load
    monkeypatch.undo()
    importlib.reload(config)


def test_defaults(env_config, monkeypatch):
    monkeypatch.delenv("ATM_CURRENCY_SYMBOL", raising=False)
    monkeypatch.delenv("ATM_MAX_AMOUNT", raising=False)
    cfg = env_config()
    assert cfg.CURRENCY_SYMBOL == "₦"
    assert Decimal(cfg.MAX_AMOUNT) == Decimal("1000000")


def test_currency_symbol_uses_atm_prefix(env_config, monkeypatch):
    monkeypatch.delenv("ATM_CURRENCY_SYMBOL", raising=False)
    assert env_config(CURRENCY_SYMBOL="€").CURRENCY_SYMBOL == "₦"
    assert env_config(ATM_CURRENCY_SYMBOL="$").CURRENCY_SYMBOL == "$"


def test_max_amount_from_environment(env_config):
    env_config(ATM_MAX_AMOUNT="250.00")
    assert parse_amount("250") == Decimal("250.00")
    with pytest.raises(InvalidAmountError):
        parse_amount("250.01")
