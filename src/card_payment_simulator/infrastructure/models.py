"""SQLAlchemy ORM models for Card Payment Simulator."""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    TIMESTAMP,
    CheckConstraint,
    Date,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from card_payment_simulator.infrastructure.database import Base


class CardModel(Base):
    """
    Stored payment cards.

    The balance column is only written through the guarded balance update
    in the card repository.
    """

    __tablename__ = "cards"

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True, comment="Card ID"
    )

    card_number: Mapped[str] = mapped_column(
        String(19), nullable=False, unique=True, comment="Card number (PAN)"
    )

    cardholder_name: Mapped[str] = mapped_column(
        String(255), nullable=False, comment="Name as it appears on the card"
    )

    expiration_date: Mapped[date] = mapped_column(
        Date, nullable=False, comment="Card is usable strictly before this date"
    )

    cvv: Mapped[str] = mapped_column(
        String(4), nullable=False, comment="Card verification value"
    )

    balance: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, comment="Available balance"
    )

    transactions: Mapped[list["TransactionModel"]] = relationship(
        back_populates="card"
    )

    __table_args__ = (
        CheckConstraint("balance >= 0", name="check_card_balance_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<Card {self.id} ****{self.card_number[-4:]}>"


class TransactionModel(Base):
    """
    Ledger of approved payments.

    Rows are appended on approval and only ever updated to REFUNDED.
    """

    __tablename__ = "transactions"

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True, comment="Transaction ID"
    )

    card_id: Mapped[int] = mapped_column(
        ForeignKey("cards.id"), nullable=False, comment="Debited card"
    )

    amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, comment="Charged amount"
    )

    status: Mapped[str] = mapped_column(
        String(16), nullable=False, comment="APPROVED, DECLINED, FAILED or REFUNDED"
    )

    timestamp: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), nullable=False, comment="Creation timestamp"
    )

    description: Mapped[Optional[str]] = mapped_column(
        String(255), nullable=True, comment="Optional payment description"
    )

    card: Mapped[CardModel] = relationship(back_populates="transactions")

    __table_args__ = (
        CheckConstraint("amount > 0", name="check_transaction_amount_positive"),
        CheckConstraint(
            "status IN ('APPROVED', 'DECLINED', 'FAILED', 'REFUNDED')",
            name="check_transaction_status",
        ),
        Index("idx_transactions_card_id", "card_id"),
    )
