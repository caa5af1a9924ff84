"""Transaction domain models."""

from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from card_payment_simulator.domain.card import to_money

DESCRIPTION_MAX_LENGTH = 255


class TransactionStatus(str, Enum):
    """Transaction and payment outcome status."""

    APPROVED = "APPROVED"
    DECLINED = "DECLINED"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"


@dataclass(frozen=True)
class Transaction:
    """
    Ledger entry for one approved payment.

    Only APPROVED transactions are recorded. The single allowed status
    change afterwards is APPROVED -> REFUNDED.
    """

    card_id: int
    amount: Decimal
    status: TransactionStatus
    timestamp: datetime
    description: Optional[str] = None
    id: Optional[int] = None

    # Resolved through the card reference when read back from a store
    card_number: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate amount and description."""
        if self.amount is None or Decimal(self.amount) <= 0:
            raise ValueError("amount must be greater than 0")
        if self.description is not None and len(self.description) > DESCRIPTION_MAX_LENGTH:
            raise ValueError(
                f"description must not exceed {DESCRIPTION_MAX_LENGTH} characters"
            )
        object.__setattr__(self, "amount", to_money(self.amount))
        object.__setattr__(self, "status", TransactionStatus(self.status))

    @property
    def is_refundable(self) -> bool:
        return self.status == TransactionStatus.APPROVED

    def with_status(self, status: TransactionStatus) -> "Transaction":
        return replace(self, status=status)

    def with_id(self, transaction_id: int) -> "Transaction":
        return replace(self, id=transaction_id)


@dataclass
class PaymentOutcome:
    """
    Result of a payment or refund attempt.

    Declines and system failures are outcomes, not exceptions: the status
    tells callers which one happened and the message carries the reason.
    """

    status: TransactionStatus
    message: str
    transaction_id: Optional[int] = None
    timestamp: Optional[datetime] = None

    @classmethod
    def declined(cls, message: str) -> "PaymentOutcome":
        return cls(status=TransactionStatus.DECLINED, message=message)

    @classmethod
    def failed(cls, message: str) -> "PaymentOutcome":
        return cls(status=TransactionStatus.FAILED, message=message)
