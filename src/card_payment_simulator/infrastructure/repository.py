"""Repository layer for card and transaction database operations.

This module provides the SQLAlchemy implementations of the card store, the
transaction ledger and the atomic scope used by the domain services.
"""

from contextlib import contextmanager
from decimal import Decimal
from typing import Iterator, Optional

import structlog
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from card_payment_simulator.domain.card import Card, to_money
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
from card_payment_simulator.infrastructure.models import CardModel, TransactionModel
from card_payment_simulator.logging_config import mask_card_number

logger = structlog.get_logger(__name__)


class CardRepository(ICardRepository):
    """Repository for card database operations."""

    def __init__(self, session: Session):
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy database session
        """
        self.session = session

    def create(self, card: Card) -> Card:
        logger.debug("saving_card", card=mask_card_number(card.card_number))

        if self._get_model_by_number(card.card_number) is not None:
            raise DuplicateCardNumberError(
                f"Card {mask_card_number(card.card_number)} already exists"
            )

        card_model = CardModel(
            card_number=card.card_number,
            cardholder_name=card.cardholder_name,
            expiration_date=card.expiration_date,
            cvv=card.cvv,
            balance=card.balance,
        )
        self.session.add(card_model)

        try:
            self.session.flush()  # Flush to assign the id and check constraints
        except IntegrityError as e:
            # Lost a race against a concurrent insert of the same number
            raise DuplicateCardNumberError(
                f"Card {mask_card_number(card.card_number)} already exists"
            ) from e

        return card.with_id(card_model.id)

    def list_all(self) -> list[Card]:
        models = self.session.query(CardModel).order_by(CardModel.id).all()
        return [self._to_domain_entity(model) for model in models]

    def find_by_number(self, card_number: str) -> Optional[Card]:
        model = self._get_model_by_number(card_number)
        if model is None:
            logger.debug("card_not_found", card=mask_card_number(card_number))
            return None
        return self._to_domain_entity(model)

    def get(self, card_id: int) -> Optional[Card]:
        model = self.session.get(CardModel, card_id)
        return self._to_domain_entity(model) if model else None

    def adjust_balance(self, card_id: int, delta: Decimal) -> Card:
        """Apply a compare-and-swap balance update.

        The new balance is computed in Decimal from a fresh read and written
        only if the stored balance still equals that read, so a concurrent
        change makes this update match no row instead of overwriting it.
        """
        model = self._get_fresh_model(card_id)
        if model is None:
            raise CardNotFoundError(f"Card {card_id} not found")

        expected = to_money(model.balance)
        new_balance = to_money(expected + delta)
        if new_balance < 0:
            raise BalanceConflictError(
                f"Balance update of {delta} rejected for card {card_id}"
            )

        result = self.session.execute(
            update(CardModel)
            .where(CardModel.id == card_id, CardModel.balance == expected)
            .values(balance=new_balance)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise BalanceConflictError(
                f"Balance of card {card_id} changed during update of {delta}"
            )

        logger.debug("card_balance_adjusted", card_id=card_id, delta=str(delta))
        return self._to_domain_entity(self._get_fresh_model(card_id))

    def delete_all(self) -> int:
        if self.session.query(TransactionModel.id).first() is not None:
            raise CardsInUseError("Cards are referenced by recorded transactions")

        removed = self.session.query(CardModel).delete()
        self.session.flush()
        logger.info("cards_deleted", count=removed)
        return removed

    def _get_fresh_model(self, card_id: int) -> Optional[CardModel]:
        return (
            self.session.query(CardModel)
            .populate_existing()
            .filter(CardModel.id == card_id)
            .first()
        )

    def _get_model_by_number(self, card_number: str) -> Optional[CardModel]:
        return (
            self.session.query(CardModel)
            .filter(CardModel.card_number == card_number)
            .first()
        )

    def _to_domain_entity(self, model: CardModel) -> Card:
        """Convert ORM model to domain entity."""
        return Card(
            id=model.id,
            card_number=model.card_number,
            cardholder_name=model.cardholder_name,
            expiration_date=model.expiration_date,
            cvv=model.cvv,
            balance=model.balance,
        )


class TransactionRepository(ITransactionRepository):
    """Repository for the transaction ledger."""

    def __init__(self, session: Session):
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy database session
        """
        self.session = session

    def create(self, transaction: Transaction) -> Transaction:
        logger.debug("saving_transaction", card_id=transaction.card_id)

        transaction_model = TransactionModel(
            card_id=transaction.card_id,
            amount=transaction.amount,
            status=transaction.status.value,
            timestamp=transaction.timestamp,
            description=transaction.description,
        )
        self.session.add(transaction_model)
        self.session.flush()

        card = self.session.get(CardModel, transaction.card_id)
        return Transaction(
            id=transaction_model.id,
            card_id=transaction.card_id,
            card_number=card.card_number if card else None,
            amount=transaction.amount,
            status=transaction.status,
            timestamp=transaction.timestamp,
            description=transaction.description,
        )

    def list_all(self) -> list[Transaction]:
        models = (
            self.session.query(TransactionModel)
            .options(joinedload(TransactionModel.card))
            .order_by(TransactionModel.id)
            .all()
        )
        return [self._to_domain_entity(model) for model in models]

    def find_by_id(self, transaction_id: int) -> Optional[Transaction]:
        model = self._get_model(transaction_id)
        if model is None:
            logger.debug("transaction_not_found", transaction_id=transaction_id)
            return None
        return self._to_domain_entity(model)

    def find_by_card_number(self, card_number: str) -> list[Transaction]:
        models = (
            self.session.query(TransactionModel)
            .join(TransactionModel.card)
            .options(joinedload(TransactionModel.card))
            .filter(CardModel.card_number == card_number)
            .order_by(TransactionModel.id)
            .all()
        )
        return [self._to_domain_entity(model) for model in models]

    def update_status(
        self,
        transaction_id: int,
        status: TransactionStatus,
        expected_status: Optional[TransactionStatus] = None,
    ) -> Transaction:
        criteria = [TransactionModel.id == transaction_id]
        if expected_status is not None:
            criteria.append(
                TransactionModel.status == TransactionStatus(expected_status).value
            )

        result = self.session.execute(
            update(TransactionModel)
            .where(*criteria)
            .values(status=TransactionStatus(status).value)
            .execution_options(synchronize_session=False)
        )

        if result.rowcount == 0:
            if self.session.get(TransactionModel, transaction_id) is None:
                raise TransactionNotFoundError(f"Transaction {transaction_id} not found")
            expected = TransactionStatus(expected_status).value
            raise InvalidTransactionStateError(
                f"Transaction {transaction_id} is not {expected}"
            )

        model = (
            self.session.query(TransactionModel)
            .populate_existing()
            .options(joinedload(TransactionModel.card))
            .filter(TransactionModel.id == transaction_id)
            .one()
        )
        logger.debug(
            "transaction_status_updated",
            transaction_id=transaction_id,
            status=model.status,
        )
        return self._to_domain_entity(model)

    def _get_model(self, transaction_id: int) -> Optional[TransactionModel]:
        return (
            self.session.query(TransactionModel)
            .options(joinedload(TransactionModel.card))
            .filter(TransactionModel.id == transaction_id)
            .first()
        )

    def _to_domain_entity(self, model: TransactionModel) -> Transaction:
        """Convert ORM model to domain entity."""
        return Transaction(
            id=model.id,
            card_id=model.card_id,
            card_number=model.card.card_number if model.card else None,
            amount=model.amount,
            status=TransactionStatus(model.status),
            timestamp=model.timestamp,
            description=model.description,
        )


class SessionAtomicScope(IAtomicScope):
    """Atomic scope backed by the request's SQLAlchemy session.

    Commits the session when the block succeeds and rolls it back when it
    raises, so repository writes made inside it land together.
    """

    def __init__(self, session: Session):
        self.session = session

    @contextmanager
    def atomic(self) -> Iterator[None]:
        try:
            yield
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
