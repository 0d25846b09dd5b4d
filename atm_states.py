from enum import Enum, auto


class ATMState(Enum):
    IDLE = auto()
    PIN_ENTRY = auto()
    TRANSACTION_SELECTION = auto()
    WITHDRAW_AMOUNT_ENTRY = auto()
    DEPOSIT_COLLECTION = auto()


class TransactionType(Enum):
    WITHDRAW = "withdraw"
    DEPOSIT = "deposit"
