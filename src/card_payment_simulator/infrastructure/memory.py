"""In-memory card store and transaction ledger.

Both repositories share one InMemoryStore so the ledger can resolve card
numbers and the card store can refuse a reset while transactions exist.
Entities are frozen dataclasses, so snapshots only need to copy the maps.
"""

import itertools
import threading
from contextlib import contextmanager
from decimal import Decimal
from typing import Iterator, Optional

from card_payment_simulator.domain.card import Card
from card_payment_simulator.domain.exceptions import (
    BalanceConflictError,
    CardNotFoundError,
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
from card_payment_simulator.domain.transaction import Transaction, TransactionStatus


class InMemoryStore(IAtomicScope):
    """Shared state for the in-memory repositories."""

    def __init__(self) -> None:
        self.cards: dict[int, Card] = {}
        self.transactions: dict[int, Transaction] = {}
        self.card_ids = itertools.count(1)
        self.transaction_ids = itertools.count(1)
        self.lock = threading.RLock()

        self.card_repository = InMemoryCardRepository(self)
        self.transaction_repository = InMemoryTransactionRepository(self)

    @contextmanager
    def atomic(self) -> Iterator[None]:
        with self.lock:
            cards_snapshot = dict(self.cards)
            transactions_snapshot = dict(self.transactions)
            try:
                yield
            except Exception:
                self.cards = cards_snapshot
                self.transactions = transactions_snapshot
                raise


class InMemoryCardRepository(ICardRepository):
    """Card store kept in a dict keyed by card id."""

    def __init__(self, store: InMemoryStore):
        self.store = store

    def create(self, card: Card) -> Card:
        with self.store.lock:
            if self.find_by_number(card.card_number) is not None:
                raise DuplicateCardNumberError(
                    f"Card ****{card.card_number[-4:]} already exists"
                )
            created = card.with_id(next(self.store.card_ids))
            self.store.cards[created.id] = created
            return created

    def list_all(self) -> list[Card]:
        with self.store.lock:
            return sorted(self.store.cards.values(), key=lambda card: card.id)

    def find_by_number(self, card_number: str) -> Optional[Card]:
        with self.store.lock:
            for card in self.store.cards.values():
                if card.card_number == card_number:
                    return card
            return None

    def get(self, card_id: int) -> Optional[Card]:
        return self.store.cards.get(card_id)

    def adjust_balance(self, card_id: int, delta: Decimal) -> Card:
        with self.store.lock:
            card = self.store.cards.get(card_id)
            if card is None:
                raise CardNotFoundError(f"Card {card_id} not found")

            new_balance = card.balance + delta
            if new_balance < 0:
                raise BalanceConflictError(
                    f"Balance update of {delta} rejected for card {card_id}"
                )

            updated = card.with_balance(new_balance)
            self.store.cards[card_id] = updated
            return updated

    def delete_all(self) -> int:
        with self.store.lock:
            if self.store.transactions:
                raise CardsInUseError("Cards are referenced by recorded transactions")
            removed = len(self.store.cards)
            self.store.cards.clear()
            return removed


class InMemoryTransactionRepository(ITransactionRepository):
    """Append-only ledger kept in a dict keyed by transaction id."""

    def __init__(self, store: InMemoryStore):
        self.store = store

    def create(self, transaction: Transaction) -> Transaction:
        with self.store.lock:
            card = self.store.cards.get(transaction.card_id)
            if card is None:
                raise CardNotFoundError(f"Card {transaction.card_id} not found")

            created = Transaction(
                id=next(self.store.transaction_ids),
                card_id=transaction.card_id,
                card_number=card.card_number,
                amount=transaction.amount,
                status=transaction.status,
                timestamp=transaction.timestamp,
                description=transaction.description,
            )
            self.store.transactions[created.id] = created
            return created

    def list_all(self) -> list[Transaction]:
        with self.store.lock:
            return sorted(self.store.transactions.values(), key=lambda t: t.id)

    def find_by_id(self, transaction_id: int) -> Optional[Transaction]:
        return self.store.transactions.get(transaction_id)

    def find_by_card_number(self, card_number: str) -> list[Transaction]:
        return [
            transaction
            for transaction in self.list_all()
            if transaction.card_number == card_number
        ]

    def update_status(
        self,
        transaction_id: int,
        status: TransactionStatus,
        expected_status: Optional[TransactionStatus] = None,
    ) -> Transaction:
        with self.store.lock:
            transaction = self.store.transactions.get(transaction_id)
            if transaction is None:
                raise TransactionNotFoundError(f"Transaction {transaction_id} not found")
            if expected_status is not None:
                expected = TransactionStatus(expected_status)
                if transaction.status != expected:
                    raise InvalidTransactionStateError(
                        f"Transaction {transaction_id} is not {expected.value}"
                    )
            updated = transaction.with_status(TransactionStatus(status))
            self.store.transactions[transaction_id] = updated
            return updated
