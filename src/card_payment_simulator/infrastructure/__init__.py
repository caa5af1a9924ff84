"""Infrastructure layer exports."""

from card_payment_simulator.infrastructure.memory import InMemoryStore
from card_payment_simulator.infrastructure.repository import (
    CardRepository,
    SessionAtomicScope,
    TransactionRepository,
)

__all__ = [
    "CardRepository",
    "TransactionRepository",
    "SessionAtomicScope",
    "InMemoryStore",
]
