"""Unit tests for API request/response models."""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest
from pydantic import ValidationError

from card_payment_simulator.api.models import (
    CardResponseJSON,
    CreateCardRequestJSON,
    PaymentRequestJSON,
    PaymentResponseJSON,
    TransactionResponseJSON,
)
from card_payment_simulator.domain import PaymentOutcome, Transaction, TransactionStatus

from tests.conftest import make_card


def card_request(**overrides) -> dict:
    payload = {
        "card_number": "4242424242424242",
        "cardholder_name": "John Doe",
        "expiration_date": "2099-12-31",
        "cvv": "123",
        "balance": "1000.00",
    }
    payload.update(overrides)
    return payload


class TestCreateCardRequest:
    """Tests for CreateCardRequestJSON validation."""

    def test_valid_request_to_domain(self):
        card = CreateCardRequestJSON(**card_request()).to_domain()

        assert card.card_number == "4242424242424242"
        assert card.expiration_date == date(2099, 12, 31)
        assert card.balance == Decimal("1000.00")

    @pytest.mark.parametrize("card_number", ["1234567890123456", "4242", "4242a24242424242"])
    def test_invalid_card_number(self, card_number):
        with pytest.raises(ValidationError):
            CreateCardRequestJSON(**card_request(card_number=card_number))

    def test_blank_cardholder_name(self):
        with pytest.raises(ValidationError, match="Cardholder name is required"):
            CreateCardRequestJSON(**card_request(cardholder_name="   "))

    def test_past_expiration_date(self):
        with pytest.raises(ValidationError, match="must not be expired"):
            CreateCardRequestJSON(**card_request(expiration_date="2020-01-01"))

    def test_negative_balance(self):
        with pytest.raises(ValidationError):
            CreateCardRequestJSON(**card_request(balance="-1.00"))

    def test_balance_precision(self):
        with pytest.raises(ValidationError):
            CreateCardRequestJSON(**card_request(balance="1.001"))


class TestPaymentRequest:
    """Tests for PaymentRequestJSON validation."""

    def test_valid_request(self):
        request = PaymentRequestJSON(
            card_number="4242424242424242", cvv="123", amount="10.50"
        )

        assert request.amount == Decimal("10.50")
        assert request.description is None

    def test_card_number_must_have_16_digits(self):
        with pytest.raises(ValidationError):
            PaymentRequestJSON(card_number="378282246310005", cvv="1234", amount="1.00")

    @pytest.mark.parametrize("amount", ["0", "-1.00", "1.001"])
    def test_invalid_amount(self, amount):
        with pytest.raises(ValidationError):
            PaymentRequestJSON(card_number="4242424242424242", cvv="123", amount=amount)

    def test_description_too_long(self):
        with pytest.raises(ValidationError):
            PaymentRequestJSON(
                card_number="4242424242424242",
                cvv="123",
                amount="1.00",
                description="x" * 256,
            )


class TestResponses:
    """Tests for response model conversion and serialization."""

    def test_card_response_serializes_balance_as_number(self):
        response = CardResponseJSON.from_domain(make_card(balance="12.50").with_id(3))

        payload = response.model_dump(mode="json")

        assert payload["id"] == 3
        assert payload["balance"] == 12.5
        assert payload["expiration_date"] == "2027-06-30"

    def test_payment_response_from_declined_outcome(self):
        payload = PaymentResponseJSON.from_outcome(
            PaymentOutcome.declined("Invalid CVV")
        ).model_dump(mode="json")

        assert payload == {
            "status": "DECLINED",
            "message": "Invalid CVV",
            "transaction_id": None,
            "timestamp": None,
        }

    def test_transaction_response_from_domain(self):
        transaction = Transaction(
            id=5,
            card_id=1,
            card_number="4242424242424242",
            amount=Decimal("99.99"),
            status=TransactionStatus.REFUNDED,
            timestamp=datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc),
            description="Books",
        )

        payload = TransactionResponseJSON.from_domain(transaction).model_dump(mode="json")

        assert payload["id"] == 5
        assert payload["amount"] == 99.99
        assert payload["status"] == "REFUNDED"
        assert payload["card_number"] == "4242424242424242"
        assert payload["timestamp"].startswith("2025-06-15T12:00:00")
