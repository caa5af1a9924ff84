"""Unit tests for payment authorization and refunds."""

from datetime import date
from decimal import Decimal
from unittest.mock import Mock

import pytest

from card_payment_simulator.domain import (
    BalanceConflictError,
    PaymentOutcome,
    PaymentService,
    TransactionNotFoundError,
    TransactionStatus,
)
from card_payment_simulator.infrastructure.memory import (
    InMemoryCardRepository,
    InMemoryTransactionRepository,
)

from tests.conftest import FROZEN_NOW, make_card


@pytest.fixture
def card(store):
    """A stored card with 1000.00 available."""
    return store.card_repository.create(make_card())


def pay(service: PaymentService, amount: str, cvv: str = "123", **kwargs) -> PaymentOutcome:
    return service.process_payment(
        card_number=kwargs.pop("card_number", "4242424242424242"),
        cvv=cvv,
        amount=Decimal(amount),
        **kwargs,
    )


class TestProcessPayment:
    """Tests for PaymentService.process_payment."""

    def test_approved_payment_debits_card(self, payment_service, store, card):
        outcome = pay(payment_service, "100.00", description="Coffee")

        assert outcome.status == TransactionStatus.APPROVED
        assert outcome.message == "Payment processed successfully"
        assert outcome.transaction_id == 1
        assert outcome.timestamp == FROZEN_NOW

        assert store.card_repository.get(card.id).balance == Decimal("900.00")

        transaction = store.transaction_repository.find_by_id(1)
        assert transaction.status == TransactionStatus.APPROVED
        assert transaction.amount == Decimal("100.00")
        assert transaction.card_id == card.id
        assert transaction.card_number == card.card_number
        assert transaction.description == "Coffee"
        assert transaction.timestamp == FROZEN_NOW

    def test_exact_balance_is_approved(self, payment_service, store, card):
        """Test a payment equal to the balance leaves it at zero."""
        outcome = pay(payment_service, "1000.00")

        assert outcome.status == TransactionStatus.APPROVED
        assert store.card_repository.get(card.id).balance == Decimal("0.00")

    def test_unknown_card_fails(self, payment_service, store):
        outcome = pay(payment_service, "10.00", card_number="4111111111111111")

        assert outcome.status == TransactionStatus.FAILED
        assert outcome.message == "Card not found"
        assert outcome.transaction_id is None
        assert store.transaction_repository.list_all() == []

    def test_expired_card_declined(self, payment_service, store):
        stored = store.card_repository.create(make_card(expiration_date=date(2025, 6, 1)))

        outcome = pay(payment_service, "10.00")

        assert outcome.status == TransactionStatus.DECLINED
        assert outcome.message == "Card is expired"
        assert store.card_repository.get(stored.id).balance == Decimal("1000.00")
        assert store.transaction_repository.list_all() == []

    def test_card_expiring_today_declined(self, payment_service, store):
        """Test a card is already unusable on its expiration date."""
        store.card_repository.create(make_card(expiration_date=FROZEN_NOW.date()))

        outcome = pay(payment_service, "10.00")

        assert outcome.status == TransactionStatus.DECLINED
        assert outcome.message == "Card is expired"

    def test_invalid_cvv_declined(self, payment_service, store, card):
        outcome = pay(payment_service, "10.00", cvv="999")

        assert outcome.status == TransactionStatus.DECLINED
        assert outcome.message == "Invalid CVV"
        assert store.card_repository.get(card.id).balance == Decimal("1000.00")
        assert store.transaction_repository.list_all() == []

    def test_insufficient_funds_declined(self, payment_service, store, card):
        outcome = pay(payment_service, "1000.01")

        assert outcome.status == TransactionStatus.DECLINED
        assert outcome.message == "Insufficient funds"
        assert store.card_repository.get(card.id).balance == Decimal("1000.00")
        assert store.transaction_repository.list_all() == []

    def test_expiry_checked_before_cvv(self, payment_service, store):
        store.card_repository.create(make_card(expiration_date=date(2024, 1, 1)))

        outcome = pay(payment_service, "5000.00", cvv="000")

        assert outcome.message == "Card is expired"

    def test_cvv_checked_before_funds(self, payment_service, card):
        outcome = pay(payment_service, "5000.00", cvv="000")

        assert outcome.message == "Invalid CVV"

    def test_consecutive_payments_drain_balance(self, payment_service, store, card):
        assert pay(payment_service, "600.00").status == TransactionStatus.APPROVED

        second = pay(payment_service, "600.00")

        assert second.status == TransactionStatus.DECLINED
        assert second.message == "Insufficient funds"
        assert store.card_repository.get(card.id).balance == Decimal("400.00")
        assert len(store.transaction_repository.list_all()) == 1

    def test_repository_error_becomes_failed_outcome(self, store, frozen_clock):
        card_repository = Mock()
        card_repository.find_by_number.side_effect = RuntimeError("database unavailable")
        service = PaymentService(
            card_repository, store.transaction_repository, store, clock=frozen_clock
        )

        outcome = pay(service, "10.00")

        assert outcome.status == TransactionStatus.FAILED
        assert outcome.message == "Payment processing failed: database unavailable"

    def test_failed_debit_rolls_back_ledger_entry(self, store, frozen_clock, card):
        """Test the ledger entry is discarded when the balance update fails."""

        class ConflictingCardRepository(InMemoryCardRepository):
            def adjust_balance(self, card_id, delta):
                raise BalanceConflictError("balance changed concurrently")

        service = PaymentService(
            ConflictingCardRepository(store),
            store.transaction_repository,
            store,
            clock=frozen_clock,
        )

        outcome = pay(service, "10.00")

        assert outcome.status == TransactionStatus.FAILED
        assert outcome.message.startswith("Payment processing failed:")
        assert store.transaction_repository.list_all() == []
        assert store.card_repository.get(card.id).balance == Decimal("1000.00")


class TestProcessRefund:
    """Tests for PaymentService.process_refund."""

    def test_refund_restores_balance(self, payment_service, store, card):
        payment = pay(payment_service, "250.00")

        outcome = payment_service.process_refund(payment.transaction_id)

        assert outcome.status == TransactionStatus.REFUNDED
        assert outcome.message == "Refund processed successfully"
        assert outcome.transaction_id == payment.transaction_id
        assert outcome.timestamp == FROZEN_NOW
        assert store.card_repository.get(card.id).balance == Decimal("1000.00")
        assert (
            store.transaction_repository.find_by_id(payment.transaction_id).status
            == TransactionStatus.REFUNDED
        )

    def test_second_refund_declined(self, payment_service, store, card):
        payment = pay(payment_service, "250.00")
        payment_service.process_refund(payment.transaction_id)

        outcome = payment_service.process_refund(payment.transaction_id)

        assert outcome.status == TransactionStatus.DECLINED
        assert outcome.message == "Cannot refund a non-approved transaction"
        assert store.card_repository.get(card.id).balance == Decimal("1000.00")

    def test_interleaved_refunds_credit_once(self, store, frozen_clock, card):
        """Test a refund racing another refund of the same transaction is declined."""
        transactions = InterleavingTransactionRepository(store)
        service = PaymentService(
            store.card_repository, transactions, store, clock=frozen_clock
        )
        payment = pay(service, "100.00")

        transactions.competing_refund = lambda: service.process_refund(payment.transaction_id)
        outcome = service.process_refund(payment.transaction_id)

        assert [r.status for r in transactions.competing_results] == [TransactionStatus.REFUNDED]
        assert outcome.status == TransactionStatus.DECLINED
        assert outcome.message == "Cannot refund a non-approved transaction"
        assert store.card_repository.get(card.id).balance == Decimal("1000.00")
        assert (
            store.transaction_repository.find_by_id(payment.transaction_id).status
            == TransactionStatus.REFUNDED
        )

    def test_unknown_transaction_raises(self, payment_service):
        with pytest.raises(TransactionNotFoundError):
            payment_service.process_refund(42)

    def test_refund_failure_keeps_transaction_approved(self, store, frozen_clock, card):
        service = PaymentService(
            store.card_repository, store.transaction_repository, store, clock=frozen_clock
        )
        payment = pay(service, "100.00")

        transaction_repository = Mock(wraps=store.transaction_repository)
        transaction_repository.update_status.side_effect = RuntimeError("write failed")
        failing = PaymentService(
            store.card_repository, transaction_repository, store, clock=frozen_clock
        )

        outcome = failing.process_refund(payment.transaction_id)

        assert outcome.status == TransactionStatus.FAILED
        assert outcome.message == "Refund processing failed: write failed"
        assert store.card_repository.get(card.id).balance == Decimal("900.00")
        assert (
            store.transaction_repository.find_by_id(payment.transaction_id).status
            == TransactionStatus.APPROVED
        )


class TestTransactionQueries:
    """Tests for the ledger read operations."""

    def test_list_transactions(self, payment_service, card):
        pay(payment_service, "10.00")
        pay(payment_service, "20.00")

        transactions = payment_service.list_transactions()

        assert [t.amount for t in transactions] == [Decimal("10.00"), Decimal("20.00")]

    def test_get_transaction(self, payment_service, card):
        payment = pay(payment_service, "10.00")

        assert payment_service.get_transaction(payment.transaction_id).id == payment.transaction_id

    def test_get_missing_transaction_raises(self, payment_service):
        with pytest.raises(TransactionNotFoundError):
            payment_service.get_transaction(99)

    def test_get_transactions_for_card(self, payment_service, store, card):
        store.card_repository.create(make_card(card_number="5555555555554444", cvv="456"))
        pay(payment_service, "10.00")
        pay(payment_service, "15.00", cvv="456", card_number="5555555555554444")

        transactions = payment_service.get_transactions_for_card("4242424242424242")

        assert len(transactions) == 1
        assert transactions[0].card_number == "4242424242424242"
        assert payment_service.get_transactions_for_card("6011111111111117") == []

    def test_get_transaction_status(self, payment_service, card):
        payment = pay(payment_service, "10.00")
        assert payment_service.get_transaction_status(payment.transaction_id) == "APPROVED"

        payment_service.process_refund(payment.transaction_id)
        assert payment_service.get_transaction_status(payment.transaction_id) == "REFUNDED"


class InterleavingTransactionRepository(InMemoryTransactionRepository):
    """Runs a competing refund right after the first transaction read."""

    def __init__(self, store):
        super().__init__(store)
        self.competing_refund = None
        self.competing_results = []

    def find_by_id(self, transaction_id):
        transaction = super().find_by_id(transaction_id)
        if self.competing_refund is not None:
            competing, self.competing_refund = self.competing_refund, None
            self.competing_results.append(competing())
        return transaction
