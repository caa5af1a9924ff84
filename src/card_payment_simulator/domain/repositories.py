"""Card store and transaction ledger repository interfaces.

The domain layer defines what it needs from persistence (these interfaces)
and the infrastructure layer implements them, either on SQLAlchemy or in
memory. The payment service only talks to these abstractions.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from decimal import Decimal
from typing import Optional

from card_payment_simulator.domain.card import Card
from card_payment_simulator.domain.transaction import Transaction, TransactionStatus


class ICardRepository(ABC):
    """Abstract card store.

    The store enforces card number uniqueness. Field validation happens
    before a card reaches it.
    """

    @abstractmethod
    def create(self, card: Card) -> Card:
        """Persist a new card.

        Returns:
            The stored card carrying its assigned id.

        Raises:
            DuplicateCardNumberError: If the card number already exists.
        """
        pass

    @abstractmethod
    def list_all(self) -> list[Card]:
        """Return every stored card."""
        pass

    @abstractmethod
    def find_by_number(self, card_number: str) -> Optional[Card]:
        """Look up a card by its card number."""
        pass

    @abstractmethod
    def get(self, card_id: int) -> Optional[Card]:
        """Look up a card by its store id."""
        pass

    @abstractmethod
    def adjust_balance(self, card_id: int, delta: Decimal) -> Card:
        """Atomically add ``delta`` to a card's balance.

        The read-modify-write happens as a single guarded update, so two
        concurrent debits cannot both succeed against the same funds.

        Returns:
            The card with its updated balance.

        Raises:
            CardNotFoundError: If the card does not exist.
            BalanceConflictError: If the update would make the balance negative.
        """
        pass

    @abstractmethod
    def delete_all(self) -> int:
        """Delete every card.

        Returns:
            Number of cards removed.

        Raises:
            CardsInUseError: If any transaction references a card.
        """
        pass


class ITransactionRepository(ABC):
    """Abstract transaction ledger. Entries are appended, never deleted."""

    @abstractmethod
    def create(self, transaction: Transaction) -> Transaction:
        """Append a transaction and return it with its assigned id."""
        pass

    @abstractmethod
    def list_all(self) -> list[Transaction]:
        """Return every transaction."""
        pass

    @abstractmethod
    def find_by_id(self, transaction_id: int) -> Optional[Transaction]:
        """Look up a transaction by id."""
        pass

    @abstractmethod
    def find_by_card_number(self, card_number: str) -> list[Transaction]:
        """Return the transactions of a card (empty when it has none)."""
        pass

    @abstractmethod
    def update_status(
        self,
        transaction_id: int,
        status: TransactionStatus,
        expected_status: Optional[TransactionStatus] = None,
    ) -> Transaction:
        """Change a transaction's status.

        With ``expected_status`` the change is a guarded transition: it only
        applies while the transaction is still in that status.

        Raises:
            TransactionNotFoundError: If the transaction does not exist.
            InvalidTransactionStateError: If the current status is not
                ``expected_status``.
        """
        pass


class IAtomicScope(ABC):
    """Unit of work boundary offered by the store.

    Repository calls made inside ``atomic()`` become visible together, or
    not at all if the block raises.
    """

    @abstractmethod
    def atomic(self) -> AbstractContextManager[None]:
        pass
