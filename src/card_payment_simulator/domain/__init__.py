"""Card payment domain layer.

This package contains the domain entities, repository interfaces and
services for the card store, the transaction ledger and payment
authorization.
"""

from card_payment_simulator.domain.card import Card, is_valid_card_number, to_money
from card_payment_simulator.domain.exceptions import (
    BalanceConflictError,
    CardNotFoundError,
    CardPaymentError,
    CardsInUseError,
    DuplicateCardNumberError,
    InvalidTransactionStateError,
    TransactionNotFoundError,
)
from card_payment_simulator.domain.repositories import (
    IAtomicScope,
    ICardRepository,
    ITransactionRepository,
)
from card_payment_simulator.domain.services import CardService, PaymentService, utc_now
from card_payment_simulator.domain.transaction import (
    PaymentOutcome,
    Transaction,
    TransactionStatus,
)

__all__ = [
    # Entities
    "Card",
    "Transaction",
    "TransactionStatus",
    "PaymentOutcome",
    "is_valid_card_number",
    "to_money",
    # Exceptions
    "CardPaymentError",
    "CardNotFoundError",
    "TransactionNotFoundError",
    "DuplicateCardNumberError",
    "CardsInUseError",
    "InvalidTransactionStateError",
    "BalanceConflictError",
    # Repository interfaces
    "ICardRepository",
    "ITransactionRepository",
    "IAtomicScope",
    # Services
    "CardService",
    "PaymentService",
    "utc_now",
]
