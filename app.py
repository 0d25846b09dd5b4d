import hmac
import logging
import threading
from functools import wraps

from flask import Blueprint, Flask, Response, abort, current_app, jsonify, request
from werkzeug.exceptions import HTTPException

import config
from atm_bank import AccountType, Ledger, parse_amount
from atm_errors import DuplicateAccountError, InvalidAmountError, InvariantViolation
from atm_logic import ATMStateMachine
from atm_peripherals import (
    ConsoleDisplay,
    SimulatedCardReader,
    SimulatedCashDispenser,
    SimulatedDepositSlot,
    SimulatedKeypad,
)
from atm_states import TransactionType
from init_ledger import build_demo_ledger
from logger_config import setup_logging

log = logging.getLogger(__name__)

bp = Blueprint("atm", __name__)


class ATMTerminal:
    """One machine: the controller wired to its simulated peripherals."""

    def __init__(self, ledger: Ledger):
        self.display = ConsoleDisplay()
        self.cash_dispenser = SimulatedCashDispenser()
        self.machine = ATMStateMachine(ledger, self.display, self.cash_dispenser)
        self.card_reader = SimulatedCardReader(self.machine)
        self.keypad = SimulatedKeypad(self.machine)
        self.deposit_slot = SimulatedDepositSlot(self.machine)
        # a single session; HTTP requests may arrive on several threads
        self.lock = threading.Lock()


def get_terminal() -> ATMTerminal:
    return current_app.extensions["atm_terminal"]


def get_ledger() -> Ledger:
    return current_app.extensions["atm_ledger"]


# ---------------- SECURITY ----------------
def check_auth(username, password):
    """Check if a username/password combination is valid."""
    return (hmac.compare_digest(username.encode(), current_app.config["ADMIN_USER"].encode())
            and hmac.compare_digest(password.encode(), current_app.config["ADMIN_PASSWORD"].encode()))


def authenticate():
    """Sends a 401 response that enables basic auth"""
    return Response(
        'Could not verify your access level for that URL.\n'
        'You have to login with proper credentials', 401,
        {'WWW-Authenticate': 'Basic realm="Login Required"'})


def requires_auth(f):
    @wraps(f)
    def decorated(*args, **kwargs):
        auth = request.authorization
        if not auth or not auth.username or not check_auth(auth.username, auth.password or ""):
            log.warning("Rejected admin request to %s", request.path)
            return authenticate()
        return f(*args, **kwargs)
    return decorated


# ---------------- HELPERS ----------------
def json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        abort(400, description="JSON object body required")
    return data


def amount_from(data: dict):
    if data.get("amount") is None:
        abort(400, description="Amount required")
    amount = parse_amount(data["amount"])
    if amount == 0:
        abort(400, description="Amount must be > 0")
    return amount


def state_payload(terminal: ATMTerminal, step=None) -> dict:
    payload = {
        "status": "success",
        "state": terminal.machine.state.name,
        "card_id": terminal.machine.session.card_id,
        "message": terminal.display.last_message(),
    }
    if step is not None and step.dispensed:
        payload["dispensed"] = str(step.dispensed)
    return payload


def run_on_terminal(action):
    terminal = get_terminal()
    with terminal.lock:
        step = action(terminal)
        return jsonify(state_payload(terminal, step))


def account_payload(account) -> dict:
    # balances go out as strings so no float rounding happens on the way
    return {
        "account_number": account.account_number,
        "account_type": account.account_type.name,
        "card_id": account.card_id,
        "balance": str(account.balance),
    }


# ---------------- ROUTES ----------------
@bp.route("/")
def home():
    return jsonify({"status": "ok", "message": "ATM controller is running"})


@bp.route("/atm/state")
def atm_state():
    terminal = get_terminal()
    with terminal.lock:
        return jsonify(state_payload(terminal))


@bp.route("/atm/card", methods=["POST"])
def insert_card():
    card_id = json_body().get("card_id")
    if not card_id or not isinstance(card_id, str):
        abort(400, description="Card ID required")
    return run_on_terminal(lambda t: t.card_reader.insert_card(card_id))


@bp.route("/atm/eject", methods=["POST"])
def eject_card():
    return run_on_terminal(lambda t: t.card_reader.eject_card())


@bp.route("/atm/pin", methods=["POST"])
def enter_pin():
    pin = json_body().get("pin")
    if not pin or not isinstance(pin, str):
        abort(400, description="PIN required")
    return run_on_terminal(lambda t: t.keypad.enter_pin(pin))


@bp.route("/atm/transaction", methods=["POST"])
def select_transaction():
    transaction_type = json_body().get("transaction_type")
    try:
        kind = TransactionType(str(transaction_type).lower())
    except ValueError:
        abort(400, description="Invalid transaction")
    return run_on_terminal(lambda t: t.keypad.select_transaction(kind))


@bp.route("/atm/amount", methods=["POST"])
def enter_amount():
    amount = amount_from(json_body())
    return run_on_terminal(lambda t: t.keypad.enter_amount(amount))


@bp.route("/atm/deposit", methods=["POST"])
def deposit_cash():
    amount = amount_from(json_body())
    return run_on_terminal(lambda t: t.deposit_slot.accept_cash(amount))


# ---------------- ADMIN ----------------
@bp.route("/admin/accounts")
@requires_auth
def list_accounts():
    return jsonify({"accounts": [account_payload(a) for a in get_ledger().accounts()]})


@bp.route("/admin/accounts", methods=["POST"])
@requires_auth
def create_account():
    data = json_body()
    fields = {}
    for name in ("account_number", "card_id", "pin"):
        value = data.get(name)
        if not value or not isinstance(value, str):
            abort(400, description=f"{name} required")
        fields[name] = value
    try:
        account_type = AccountType[str(data.get("account_type", "SAVING")).upper()]
    except KeyError:
        abort(400, description="Invalid account type")
    initial_balance = parse_amount(data.get("initial_balance", 0))

    ledger = get_ledger()
    account = ledger.add_account(fields["account_number"], account_type, fields["card_id"], fields["pin"])
    if initial_balance:
        ledger.deposit(account, initial_balance)
    return jsonify(account_payload(account)), 201


@bp.route("/admin/accounts/<account_number>")
@requires_auth
def get_account(account_number):
    account = get_ledger().get_account_by_number(account_number)
    if account is None:
        abort(404, description=f"Account '{account_number}' does not exist")
    return jsonify(account_payload(account))


# ---------------- ERRORS ----------------
def error_response(status: int, message: str):
    return jsonify({"status": "error", "message": message}), status


def register_error_handlers(app: Flask):
    @app.errorhandler(HTTPException)
    def http_error(e):
        log.warning("%s %s -> %s (%s)", request.method, request.path, e.code, e.description)
        return error_response(e.code, e.description)

    @app.errorhandler(InvalidAmountError)
    def invalid_amount(e):
        return error_response(400, str(e))

    @app.errorhandler(DuplicateAccountError)
    def duplicate_account(e):
        return error_response(409, str(e))

    @app.errorhandler(InvariantViolation)
    def invariant_violation(e):
        log.exception("Controller invariant violated on %s %s", request.method, request.path)
        return error_response(500, "Internal controller error")


def create_app(ledger: Ledger = None, **overrides) -> Flask:
    setup_logging()
    app = Flask(__name__)
    app.config.update(
        ADMIN_USER=config.ADMIN_USER,
        ADMIN_PASSWORD=config.ADMIN_PASSWORD,
        DISABLE_SEED=config.DISABLE_SEED,
    )
    app.config.update(overrides)

    if ledger is None:
        ledger = Ledger() if app.config["DISABLE_SEED"] else build_demo_ledger()
    app.extensions["atm_ledger"] = ledger
    app.extensions["atm_terminal"] = ATMTerminal(ledger)

    app.register_blueprint(bp)
    register_error_handlers(app)
    log.info("ATM API started with %d accounts", len(ledger))
    return app


if __name__ == "__main__":
    create_app().run(debug=True)
