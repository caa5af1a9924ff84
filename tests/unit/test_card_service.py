"""Unit tests for CardService."""

from datetime import date
from decimal import Decimal

import pytest

from card_payment_simulator.domain import (
    CardNotFoundError,
    CardService,
    CardsInUseError,
    DuplicateCardNumberError,
)
from card_payment_simulator.fixtures import scenario_cards, valid_cards

from tests.conftest import TODAY, make_card


@pytest.fixture
def card_service(store):
    return CardService(store.card_repository, store)


def test_create_card_assigns_id(card_service):
    card = card_service.create_card(make_card())

    assert card.id == 1
    assert card_service.get_card("4242424242424242") == card


def test_create_duplicate_card_rejected(card_service):
    card_service.create_card(make_card())

    with pytest.raises(DuplicateCardNumberError):
        card_service.create_card(make_card(cardholder_name="Someone Else"))

    assert len(card_service.list_cards()) == 1


def test_get_unknown_card_raises(card_service):
    with pytest.raises(CardNotFoundError):
        card_service.get_card("4111111111111111")


def test_reset_cards_replaces_store(card_service):
    card_service.create_card(make_card(card_number="4111111111111111"))

    cards = card_service.reset_cards(valid_cards(TODAY))

    assert len(cards) == 4
    assert [c.card_number for c in card_service.list_cards()] == [
        "4242424242424242",
        "5555555555554444",
        "378282246310005",
        "6011111111111117",
    ]


def test_reset_cards_is_repeatable(card_service):
    card_service.reset_cards(scenario_cards(TODAY))
    cards = card_service.reset_cards(scenario_cards(TODAY))

    assert len(cards) == 10
    assert len(card_service.list_cards()) == 10


def test_reset_refused_while_transactions_exist(card_service, payment_service, store):
    card_service.create_card(make_card())
    payment_service.process_payment("4242424242424242", "123", Decimal("5.00"))

    with pytest.raises(CardsInUseError):
        card_service.reset_cards(valid_cards(TODAY))

    # Existing card survives the refused reset
    assert card_service.get_card("4242424242424242").balance == Decimal("995.00")
    assert len(card_service.list_cards()) == 1


def test_reset_with_duplicates_rolls_back(card_service):
    card_service.create_card(make_card(card_number="4111111111111111"))
    duplicated = [make_card(), make_card(expiration_date=date(2030, 1, 1))]

    with pytest.raises(DuplicateCardNumberError):
        card_service.reset_cards(duplicated)

    assert [c.card_number for c in card_service.list_cards()] == ["4111111111111111"]
