"""Pytest configuration and shared fixtures for all tests.

This module provides shared test fixtures including:
- A frozen clock so expiry checks do not depend on the calendar
- In-memory card store and ledger for domain service tests
- SQLite-backed session for repository tests
- FastAPI test client wired to an in-memory SQLite database
"""

import os

# Point the global engine at in-memory SQLite before the app is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("CREATE_SCHEMA_ON_STARTUP", "false")

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from card_payment_simulator.domain import Card, PaymentService
from card_payment_simulator.infrastructure import InMemoryStore
from card_payment_simulator.infrastructure.database import create_db_engine, reset_db


FROZEN_NOW = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)
TODAY = FROZEN_NOW.date()


def make_card(
    card_number: str = "4242424242424242",
    cvv: str = "123",
    balance: str = "1000.00",
    expiration_date: date = date(2027, 6, 30),
    cardholder_name: str = "John Doe",
) -> Card:
    """Build a card with sensible defaults for tests."""
    return Card(
        card_number=card_number,
        cardholder_name=cardholder_name,
        expiration_date=expiration_date,
        cvv=cvv,
        balance=Decimal(balance),
    )


@pytest.fixture
def frozen_clock():
    """Clock pinned to FROZEN_NOW."""
    return lambda: FROZEN_NOW


@pytest.fixture
def store():
    """Fresh in-memory card store and ledger."""
    return InMemoryStore()


@pytest.fixture
def payment_service(store, frozen_clock):
    """Payment service over the in-memory store."""
    return PaymentService(
        store.card_repository,
        store.transaction_repository,
        store,
        clock=frozen_clock,
    )


@pytest.fixture
def db_engine():
    """Private in-memory SQLite engine with the schema created."""
    engine = create_db_engine("sqlite://")
    reset_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(db_engine):
    """Database session bound to the private test engine."""
    session = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def client(frozen_clock):
    """Test client for the API backed by a clean in-memory database."""
    from card_payment_simulator.api.dependencies import get_clock
    from card_payment_simulator.api.main import app
    from card_payment_simulator.infrastructure import database

    reset_db(database.engine)
    app.dependency_overrides[get_clock] = lambda: frozen_clock

    yield TestClient(app)

    app.dependency_overrides.clear()
