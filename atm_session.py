from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Optional

from atm_errors import InvariantViolation
from atm_states import TransactionType


@dataclass(frozen=True)
class ATMSession:
    """Context of the card currently in the machine. Never persisted."""

    card_id: Optional[str] = None
    transaction: Optional[TransactionType] = None
    amount: Optional[Decimal] = None

    @property
    def has_card(self) -> bool:
        return self.card_id is not None

    def require_card(self) -> str:
        if self.card_id is None:
            raise InvariantViolation("Action requires an inserted card, but the session has none")
        return self.card_id

    def start(self, card_id: str) -> "ATMSession":
        return ATMSession(card_id=card_id)

    def select(self, transaction: TransactionType) -> "ATMSession":
        return replace(self, transaction=transaction, amount=None)

    def with_amount(self, amount: Decimal) -> "ATMSession":
        return replace(self, amount=amount)

    def reset_for_next_transaction(self) -> "ATMSession":
        return replace(self, transaction=None, amount=None)

    def cleared(self) -> "ATMSession":
        return ATMSession()
