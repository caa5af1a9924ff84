"""Pydantic models for JSON API requests/responses.

Request models carry the boundary validation (formats, ranges, lengths):
malformed input is rejected here and never reaches the domain services.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, field_validator

from card_payment_simulator.domain import (
    Card,
    PaymentOutcome,
    Transaction,
    TransactionStatus,
    utc_now,
)
from card_payment_simulator.domain.card import CARD_NUMBER_PATTERN, CVV_PATTERN

# Amounts go out as JSON numbers rather than pydantic's default decimal strings
Money = Annotated[
    Decimal, PlainSerializer(float, return_type=float, when_used="json")
]


class CreateCardRequestJSON(BaseModel):
    """JSON request model for creating a card."""

    card_number: str = Field(
        ...,
        pattern=CARD_NUMBER_PATTERN.pattern,
        description="Visa, Mastercard, American Express or Discover card number",
    )
    cardholder_name: str = Field(..., min_length=1, description="Cardholder name")
    expiration_date: date = Field(..., description="Expiration date (must be in the future)")
    cvv: str = Field(..., pattern=CVV_PATTERN.pattern, description="3 or 4-digit CVV code")
    balance: Decimal = Field(..., ge=0, decimal_places=2, description="Initial balance")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "card_number": "4242424242424242",
                "cardholder_name": "John Doe",
                "expiration_date": "2030-12-31",
                "cvv": "123",
                "balance": 1000.00,
            }
        }
    )

    @field_validator("cardholder_name")
    @classmethod
    def cardholder_name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Cardholder name is required")
        return value

    @field_validator("expiration_date")
    @classmethod
    def expiration_date_in_future(cls, value: date) -> date:
        if value <= utc_now().date():
            raise ValueError("Card must not be expired")
        return value

    def to_domain(self) -> Card:
        return Card(
            card_number=self.card_number,
            cardholder_name=self.cardholder_name,
            expiration_date=self.expiration_date,
            cvv=self.cvv,
            balance=self.balance,
        )


class CardResponseJSON(BaseModel):
    """JSON response model for a stored card."""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="Card ID")
    card_number: str = Field(..., description="Card number")
    cardholder_name: str = Field(..., description="Cardholder name")
    expiration_date: date = Field(..., description="Expiration date")
    cvv: str = Field(..., description="CVV code")
    balance: Money = Field(..., description="Available balance")

    @classmethod
    def from_domain(cls, card: Card) -> "CardResponseJSON":
        return cls.model_validate(card)


class PaymentRequestJSON(BaseModel):
    """JSON request model for processing a payment."""

    card_number: str = Field(
        ..., pattern=r"^[0-9]{16}$", description="16-digit card number"
    )
    cvv: str = Field(..., pattern=CVV_PATTERN.pattern, description="3 or 4-digit CVV code")
    amount: Decimal = Field(..., gt=0, decimal_places=2, description="Payment amount")
    description: Optional[str] = Field(
        None, max_length=255, description="Optional payment description"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "card_number": "4242424242424242",
                "cvv": "123",
                "amount": 100.00,
                "description": "Payment for services",
            }
        }
    )


class PaymentResponseJSON(BaseModel):
    """JSON response model for payment and refund outcomes."""

    status: TransactionStatus = Field(..., description="Outcome status")
    message: str = Field(..., description="Response message")
    transaction_id: Optional[int] = Field(None, description="Transaction ID")
    timestamp: Optional[datetime] = Field(None, description="Processing timestamp")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "status": "APPROVED",
                "message": "Payment processed successfully",
                "transaction_id": 1,
                "timestamp": "2024-03-20T10:30:00Z",
            }
        }
    )

    @classmethod
    def from_outcome(cls, outcome: PaymentOutcome) -> "PaymentResponseJSON":
        return cls(
            status=outcome.status,
            message=outcome.message,
            transaction_id=outcome.transaction_id,
            timestamp=outcome.timestamp,
        )


class TransactionResponseJSON(BaseModel):
    """JSON response model for a ledger transaction."""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="Transaction ID")
    card_id: int = Field(..., description="Debited card ID")
    card_number: Optional[str] = Field(None, description="Debited card number")
    amount: Money = Field(..., description="Charged amount")
    status: TransactionStatus = Field(..., description="Transaction status")
    timestamp: datetime = Field(..., description="Creation timestamp")
    description: Optional[str] = Field(None, description="Payment description")

    @classmethod
    def from_domain(cls, transaction: Transaction) -> "TransactionResponseJSON":
        return cls.model_validate(transaction)


class TransactionStatusResponseJSON(BaseModel):
    """JSON response model for a transaction status lookup."""

    transaction_id: int = Field(..., description="Transaction ID")
    status: TransactionStatus = Field(..., description="Transaction status")
