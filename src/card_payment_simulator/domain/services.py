"""Domain services for card management and payment authorization.

PaymentService holds the authorization decision procedure: it validates a
payment against the stored card, records approved payments in the ledger
and reverses them on refund. CardService is the thin card store facade used
by the HTTP layer and the fixture loaders.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, Iterable, Optional

import structlog

from card_payment_simulator.domain.card import Card, to_money
from card_payment_simulator.domain.exceptions import (
    CardNotFoundError,
    InvalidTransactionStateError,
    TransactionNotFoundError,
)
from card_payment_simulator.domain.repositories import (
    IAtomicScope,
    ICardRepository,
    ITransactionRepository,
)
from card_payment_simulator.domain.transaction import (
    PaymentOutcome,
    Transaction,
    TransactionStatus,
)
from card_payment_simulator.logging_config import mask_card_number

logger = structlog.get_logger(__name__)

Clock = Callable[[], datetime]

CARD_NOT_FOUND = "Card not found"
CARD_EXPIRED = "Card is expired"
INVALID_CVV = "Invalid CVV"
INSUFFICIENT_FUNDS = "Insufficient funds"
PAYMENT_APPROVED = "Payment processed successfully"
REFUND_NOT_ALLOWED = "Cannot refund a non-approved transaction"
REFUND_PROCESSED = "Refund processed successfully"


def utc_now() -> datetime:
    """Default clock: timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


class PaymentService:
    """Domain service for payment authorization and refunds.

    Business rules implemented:
    - Checks run in a fixed order (card lookup, expiry, CVV, funds) and stop
      at the first failure.
    - Business rejections are DECLINED outcomes; unexpected errors are
      FAILED outcomes. Neither is raised to the caller.
    - An approval writes the ledger entry and the balance debit in one
      atomic scope.
    - Only APPROVED transactions can be refunded, and only once.
    """

    def __init__(
        self,
        card_repository: ICardRepository,
        transaction_repository: ITransactionRepository,
        atomic_scope: IAtomicScope,
        clock: Clock = utc_now,
    ):
        self.card_repository = card_repository
        self.transaction_repository = transaction_repository
        self.atomic_scope = atomic_scope
        self.clock = clock

    def process_payment(
        self,
        card_number: str,
        cvv: str,
        amount: Decimal,
        description: Optional[str] = None,
    ) -> PaymentOutcome:
        """Authorize a payment and debit the card on approval.

        Args:
            card_number: Card number to charge
            cvv: Verification code supplied with the request
            amount: Positive amount to charge
            description: Optional free-text description

        Returns:
            APPROVED outcome with the new transaction id, DECLINED with the
            decline reason, or FAILED for an unknown card or a system error.
        """
        log = logger.bind(card=mask_card_number(card_number), amount=str(amount))
        log.info("processing_payment")

        try:
            return self._authorize(card_number, cvv, to_money(amount), description, log)
        except Exception as e:
            log.exception("payment_processing_failed", error=str(e))
            return PaymentOutcome.failed(f"Payment processing failed: {e}")

    def _authorize(
        self,
        card_number: str,
        cvv: str,
        amount: Decimal,
        description: Optional[str],
        log: structlog.stdlib.BoundLogger,
    ) -> PaymentOutcome:
        card = self.card_repository.find_by_number(card_number)
        if card is None:
            log.warning("payment_card_not_found")
            return PaymentOutcome.failed(CARD_NOT_FOUND)

        now = self.clock()

        if card.is_expired(now.date()):
            return self._decline(log, CARD_EXPIRED)

        if card.cvv != cvv:
            return self._decline(log, INVALID_CVV)

        if card.balance < amount:
            return self._decline(log, INSUFFICIENT_FUNDS)

        with self.atomic_scope.atomic():
            transaction = self.transaction_repository.create(
                Transaction(
                    card_id=card.id,
                    amount=amount,
                    status=TransactionStatus.APPROVED,
                    timestamp=now,
                    description=description,
                )
            )
            updated_card = self.card_repository.adjust_balance(card.id, -amount)

        log.info(
            "payment_approved",
            transaction_id=transaction.id,
            new_balance=str(updated_card.balance),
        )
        return PaymentOutcome(
            status=TransactionStatus.APPROVED,
            message=PAYMENT_APPROVED,
            transaction_id=transaction.id,
            timestamp=transaction.timestamp,
        )

    @staticmethod
    def _decline(log: structlog.stdlib.BoundLogger, reason: str) -> PaymentOutcome:
        log.info("payment_declined", reason=reason)
        return PaymentOutcome.declined(reason)

    def process_refund(self, transaction_id: int) -> PaymentOutcome:
        """Refund an approved transaction.

        Marks the transaction REFUNDED and credits the amount back to the
        card. The status change only applies while the transaction is still
        APPROVED, so of two concurrent refunds exactly one credits the card.
        Refunding anything that is not APPROVED (including a transaction
        that was already refunded) is declined.

        Raises:
            TransactionNotFoundError: If the transaction does not exist.
        """
        log = logger.bind(transaction_id=transaction_id)
        log.info("processing_refund")

        transaction = self.transaction_repository.find_by_id(transaction_id)
        if transaction is None:
            log.warning("refund_transaction_not_found")
            raise TransactionNotFoundError(f"Transaction {transaction_id} not found")

        if not transaction.is_refundable:
            log.info("refund_declined", status=transaction.status.value)
            return PaymentOutcome.declined(REFUND_NOT_ALLOWED)

        refunded_at = self.clock()
        try:
            with self.atomic_scope.atomic():
                self.transaction_repository.update_status(
                    transaction_id,
                    TransactionStatus.REFUNDED,
                    expected_status=TransactionStatus.APPROVED,
                )
                updated_card = self.card_repository.adjust_balance(
                    transaction.card_id, transaction.amount
                )
        except InvalidTransactionStateError:
            log.info("refund_declined", reason="refunded_concurrently")
            return PaymentOutcome.declined(REFUND_NOT_ALLOWED)
        except Exception as e:
            log.exception("refund_processing_failed", error=str(e))
            return PaymentOutcome.failed(f"Refund processing failed: {e}")

        log.info("refund_processed", new_balance=str(updated_card.balance))
        return PaymentOutcome(
            status=TransactionStatus.REFUNDED,
            message=REFUND_PROCESSED,
            transaction_id=transaction_id,
            timestamp=refunded_at,
        )

    def list_transactions(self) -> list[Transaction]:
        return self.transaction_repository.list_all()

    def get_transaction(self, transaction_id: int) -> Transaction:
        """Return a transaction or raise TransactionNotFoundError."""
        transaction = self.transaction_repository.find_by_id(transaction_id)
        if transaction is None:
            raise TransactionNotFoundError(f"Transaction {transaction_id} not found")
        return transaction

    def get_transactions_for_card(self, card_number: str) -> list[Transaction]:
        """Return the card's transactions; empty if the card has none or is unknown."""
        return self.transaction_repository.find_by_card_number(card_number)

    def get_transaction_status(self, transaction_id: int) -> str:
        return self.get_transaction(transaction_id).status.value


class CardService:
    """Card store operations for the HTTP layer and fixture loading."""

    def __init__(self, card_repository: ICardRepository, atomic_scope: IAtomicScope):
        self.card_repository = card_repository
        self.atomic_scope = atomic_scope

    def create_card(self, card: Card) -> Card:
        """Store a new card.

        Raises:
            DuplicateCardNumberError: If the card number already exists.
        """
        with self.atomic_scope.atomic():
            created = self.card_repository.create(card)
        logger.info(
            "card_created",
            card=mask_card_number(created.card_number),
            card_id=created.id,
        )
        return created

    def list_cards(self) -> list[Card]:
        return self.card_repository.list_all()

    def get_card(self, card_number: str) -> Card:
        card = self.card_repository.find_by_number(card_number)
        if card is None:
            raise CardNotFoundError(f"Card {mask_card_number(card_number)} not found")
        return card

    def reset_cards(self, cards: Iterable[Card]) -> list[Card]:
        """Replace every stored card with the given ones.

        Raises:
            CardsInUseError: If transactions reference the existing cards.
        """
        with self.atomic_scope.atomic():
            removed = self.card_repository.delete_all()
            created = [self.card_repository.create(card) for card in cards]

        logger.info("cards_reset", removed=removed, created=len(created))
        return created
