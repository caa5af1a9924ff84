"""FastAPI dependencies for database sessions, repositories and services."""

from typing import Annotated, Generator

from fastapi import Depends
from sqlalchemy.orm import Session

from card_payment_simulator.domain import CardService, PaymentService, utc_now
from card_payment_simulator.domain.services import Clock
from card_payment_simulator.infrastructure.database import get_db_session
from card_payment_simulator.infrastructure.repository import (
    CardRepository,
    SessionAtomicScope,
    TransactionRepository,
)


# Database session dependency
def get_db() -> Generator[Session, None, None]:
    """Provide database session for request.

    Yields:
        SQLAlchemy session that is automatically committed/rolled back
    """
    with get_db_session() as session:
        yield session


DBSession = Annotated[Session, Depends(get_db)]


def get_clock() -> Clock:
    """Provide the clock used for expiry checks and timestamps."""
    return utc_now


ClockDep = Annotated[Clock, Depends(get_clock)]


def get_card_repository(session: DBSession) -> CardRepository:
    return CardRepository(session)


CardRepo = Annotated[CardRepository, Depends(get_card_repository)]


def get_transaction_repository(session: DBSession) -> TransactionRepository:
    return TransactionRepository(session)


TransactionRepo = Annotated[TransactionRepository, Depends(get_transaction_repository)]


def get_atomic_scope(session: DBSession) -> SessionAtomicScope:
    return SessionAtomicScope(session)


AtomicScope = Annotated[SessionAtomicScope, Depends(get_atomic_scope)]


def get_payment_service(
    card_repo: CardRepo,
    transaction_repo: TransactionRepo,
    atomic_scope: AtomicScope,
    clock: ClockDep,
) -> PaymentService:
    """Provide the payment service wired to the request's session.

    Returns:
        PaymentService instance
    """
    return PaymentService(card_repo, transaction_repo, atomic_scope, clock=clock)


PaymentSvc = Annotated[PaymentService, Depends(get_payment_service)]


def get_card_service(card_repo: CardRepo, atomic_scope: AtomicScope) -> CardService:
    return CardService(card_repo, atomic_scope)


CardSvc = Annotated[CardService, Depends(get_card_service)]
