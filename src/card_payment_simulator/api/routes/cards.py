"""Card management endpoints.

- POST /api/cards/initialize: Reset the store with valid test cards
- POST /api/cards/initialize-test-scenarios: Reset the store with scenario cards
- POST /api/cards: Create a card
- GET /api/cards: List all cards
- GET /api/cards/test-scenarios: Describe the scenario cards
- GET /api/cards/{card_number}: Retrieve a card by number
"""

from typing import Callable

import structlog
from fastapi import APIRouter, HTTPException, status
from fastapi.responses import JSONResponse

from card_payment_simulator import fixtures
from card_payment_simulator.api.dependencies import CardSvc, ClockDep
from card_payment_simulator.api.models import CardResponseJSON, CreateCardRequestJSON
from card_payment_simulator.domain import (
    Card,
    CardNotFoundError,
    CardService,
    CardsInUseError,
    DuplicateCardNumberError,
)
from card_payment_simulator.domain.services import Clock
from card_payment_simulator.logging_config import mask_card_number

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/cards", tags=["Card Management"])


def _cards_response(cards: list[Card], status_code: int = status.HTTP_200_OK) -> JSONResponse:
    return JSONResponse(
        content=[CardResponseJSON.from_domain(card).model_dump(mode="json") for card in cards],
        status_code=status_code,
    )


def _reset_cards(
    card_service: CardService,
    build_cards: Callable[..., list[Card]],
    clock: Clock,
    fixture_name: str,
) -> JSONResponse:
    logger.info("initializing_cards", fixture=fixture_name)

    try:
        cards = card_service.reset_cards(build_cards(clock().date()))
    except CardsInUseError as e:
        logger.warning("cards_reset_refused", fixture=fixture_name, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Cannot reset cards while transactions reference them",
        )
    except Exception as e:
        logger.exception("cards_reset_failed", fixture=fixture_name, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        )

    logger.info("cards_initialized", fixture=fixture_name, count=len(cards))
    return _cards_response(cards)


@router.post("/initialize")
async def initialize_valid_cards(card_service: CardSvc, clock: ClockDep) -> JSONResponse:
    """Replace all cards with a set of valid test cards with different balances.

    Responses:
        200 OK: Cards initialized
        409 Conflict: Existing cards are referenced by transactions
        500 Internal Server Error: System error
    """
    return _reset_cards(card_service, fixtures.valid_cards, clock, "valid_cards")


@router.post("/initialize-test-scenarios")
async def initialize_test_scenario_cards(
    card_service: CardSvc, clock: ClockDep
) -> JSONResponse:
    """Replace all cards with the approval, decline, error and expiry scenario cards.

    Responses:
        200 OK: Cards initialized
        409 Conflict: Existing cards are referenced by transactions
        500 Internal Server Error: System error
    """
    return _reset_cards(card_service, fixtures.scenario_cards, clock, "test_scenarios")


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_card(request: CreateCardRequestJSON, card_service: CardSvc) -> JSONResponse:
    """Create a new payment card.

    Responses:
        201 Created: Card created
        400 Bad Request: Invalid card details
        409 Conflict: Card number already exists
        500 Internal Server Error: System error
    """
    logger.info("create_card_request", card=mask_card_number(request.card_number))

    try:
        card = card_service.create_card(request.to_domain())
    except DuplicateCardNumberError as e:
        logger.warning("duplicate_card_number", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Card number already exists",
        )
    except ValueError as e:
        logger.warning("invalid_card", error=str(e))
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.exception("create_card_failed", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        )

    return JSONResponse(
        content=CardResponseJSON.from_domain(card).model_dump(mode="json"),
        status_code=status.HTTP_201_CREATED,
    )


@router.get("")
async def get_all_cards(card_service: CardSvc) -> JSONResponse:
    """Retrieve all cards in the system."""
    logger.info("fetching_all_cards")

    try:
        cards = card_service.list_cards()
    except Exception as e:
        logger.exception("fetch_cards_failed", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        )

    logger.info("cards_found", count=len(cards))
    return _cards_response(cards)


@router.get("/test-scenarios")
async def get_test_scenarios(clock: ClockDep) -> JSONResponse:
    """Describe the available test card scenarios."""
    return JSONResponse(content=fixtures.scenario_catalogue(clock().date()))


@router.get("/{card_number}")
async def get_card_by_number(card_number: str, card_service: CardSvc) -> JSONResponse:
    """Retrieve a specific card by its card number.

    Responses:
        200 OK: Card found
        404 Not Found: No card with this number
    """
    logger.info("fetching_card", card=mask_card_number(card_number))

    try:
        card = card_service.get_card(card_number)
    except CardNotFoundError:
        logger.warning("card_not_found", card=mask_card_number(card_number))
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Card not found")
    except Exception as e:
        logger.exception("fetch_card_failed", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        )

    return JSONResponse(content=CardResponseJSON.from_domain(card).model_dump(mode="json"))
