"""Domain model for payment cards.

Cards are tokenized payment instruments with a stored balance. The balance
is only changed by the payment service, through the card repository's
atomic adjustment.
"""

import re
from dataclasses import dataclass, replace
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

CENTS = Decimal("0.01")

# Visa, Mastercard, American Express and Discover number formats
CARD_NUMBER_PATTERN = re.compile(
    r"^(?:4[0-9]{12}(?:[0-9]{3})?|5[1-5][0-9]{14}|3[47][0-9]{13}|6(?:011|5[0-9]{2})[0-9]{12})$"
)
CVV_PATTERN = re.compile(r"^[0-9]{3,4}$")


def to_money(value: Decimal | int | str) -> Decimal:
    """Quantize an amount to two fractional digits."""
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class Card:
    """A stored payment card.

    Attributes:
        card_number: Digit string, unique across all cards
        cardholder_name: Name as it appears on the card
        expiration_date: Card is usable while today is strictly before this date
        cvv: 3 or 4 digit verification code
        balance: Available balance, never negative
        id: Store-assigned identifier (None until persisted)
    """

    card_number: str
    cardholder_name: str
    expiration_date: date
    cvv: str
    balance: Decimal
    id: Optional[int] = None

    def __post_init__(self):
        """Validate card fields."""
        if not self.card_number or not self.card_number.isdigit():
            raise ValueError("card_number must be numeric")

        if not self.cardholder_name or not self.cardholder_name.strip():
            raise ValueError("cardholder_name cannot be empty")

        if not self.cvv or not CVV_PATTERN.match(self.cvv):
            raise ValueError("cvv must be 3 or 4 digits")

        if self.balance is None or Decimal(self.balance) < 0:
            raise ValueError("balance must be greater than or equal to 0")

        object.__setattr__(self, "balance", to_money(self.balance))

    def is_expired(self, today: date) -> bool:
        """Check whether the card is expired on the given date."""
        return self.expiration_date <= today

    def with_balance(self, balance: Decimal) -> "Card":
        """Return a copy of this card carrying a new balance."""
        return replace(self, balance=balance)

    def with_id(self, card_id: int) -> "Card":
        """Return a copy of this card carrying a store-assigned id."""
        return replace(self, id=card_id)


def is_valid_card_number(card_number: str) -> bool:
    """Check a card number against the supported network formats."""
    return bool(card_number) and CARD_NUMBER_PATTERN.match(card_number) is not None
