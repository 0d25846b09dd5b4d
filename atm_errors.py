class ATMError(Exception):
    """Base class for errors raised by the ATM core."""


class DuplicateAccountError(ATMError):
    """An account number or card id is already registered with the ledger."""


class InvariantViolation(ATMError, RuntimeError):
    """
    The controller was driven outside its contract (caller bug).
    User mistakes such as a wrong PIN never raise this.
    """


class InvalidAmountError(ATMError, ValueError):
    """Amount is negative or not an exact decimal."""
