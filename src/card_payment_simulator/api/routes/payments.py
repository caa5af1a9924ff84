"""Payment processing and transaction endpoints.

- POST /api/payments/process: Authorize a payment against a stored card
- POST /api/payments/refund/{transaction_id}: Refund an approved transaction
- GET /api/payments/transactions: List all transactions
- GET /api/payments/transactions/{transaction_id}: Retrieve a transaction
- GET /api/payments/transactions/card/{card_number}: List a card's transactions
- GET /api/payments/status/{transaction_id}: Retrieve a transaction's status

Declined and failed payments are reported in the response body with a 200:
only malformed requests (400) and unknown transactions (404) change the
HTTP status.
"""

import structlog
from fastapi import APIRouter, HTTPException, status
from fastapi.responses import JSONResponse

from card_payment_simulator.api.dependencies import PaymentSvc
from card_payment_simulator.api.models import (
    PaymentRequestJSON,
    PaymentResponseJSON,
    TransactionResponseJSON,
    TransactionStatusResponseJSON,
)
from card_payment_simulator.domain import TransactionNotFoundError
from card_payment_simulator.logging_config import mask_card_number

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/payments", tags=["Payment Processing"])


def _internal_error() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Internal server error",
    )


def _transaction_not_found(transaction_id: int) -> HTTPException:
    logger.warning("transaction_not_found", transaction_id=transaction_id)
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="Transaction not found",
    )


@router.post("/process")
async def process_payment(
    request: PaymentRequestJSON, payment_service: PaymentSvc
) -> JSONResponse:
    """Process a payment with the provided card details.

    Responses:
        200 OK: Payment processed (status APPROVED, DECLINED or FAILED in body)
        400 Bad Request: Invalid payment request
        500 Internal Server Error: System error
    """
    logger.info(
        "process_payment_request",
        card=mask_card_number(request.card_number),
        amount=str(request.amount),
    )

    try:
        outcome = payment_service.process_payment(
            card_number=request.card_number,
            cvv=request.cvv,
            amount=request.amount,
            description=request.description,
        )
    except Exception as e:
        logger.exception("process_payment_error", error=str(e))
        raise _internal_error()

    logger.info("payment_processed", status=outcome.status.value)
    return JSONResponse(
        content=PaymentResponseJSON.from_outcome(outcome).model_dump(mode="json"),
        status_code=status.HTTP_200_OK,
    )


@router.post("/refund/{transaction_id}")
async def process_refund(transaction_id: int, payment_service: PaymentSvc) -> JSONResponse:
    """Refund a specific transaction.

    Responses:
        200 OK: Refund processed (status REFUNDED, DECLINED or FAILED in body)
        404 Not Found: Transaction doesn't exist
        500 Internal Server Error: System error
    """
    logger.info("process_refund_request", transaction_id=transaction_id)

    try:
        outcome = payment_service.process_refund(transaction_id)
    except TransactionNotFoundError:
        raise _transaction_not_found(transaction_id)
    except Exception as e:
        logger.exception("process_refund_error", transaction_id=transaction_id, error=str(e))
        raise _internal_error()

    logger.info("refund_processed", transaction_id=transaction_id, status=outcome.status.value)
    return JSONResponse(
        content=PaymentResponseJSON.from_outcome(outcome).model_dump(mode="json"),
        status_code=status.HTTP_200_OK,
    )


@router.get("/transactions")
async def get_all_transactions(payment_service: PaymentSvc) -> JSONResponse:
    """Retrieve all payment transactions."""
    logger.info("fetching_all_transactions")

    try:
        transactions = payment_service.list_transactions()
    except Exception as e:
        logger.exception("fetch_transactions_failed", error=str(e))
        raise _internal_error()

    logger.info("transactions_found", count=len(transactions))
    return JSONResponse(
        content=[
            TransactionResponseJSON.from_domain(t).model_dump(mode="json")
            for t in transactions
        ]
    )


@router.get("/transactions/card/{card_number}")
async def get_transactions_by_card_number(
    card_number: str, payment_service: PaymentSvc
) -> JSONResponse:
    """Retrieve all transactions for a specific card.

    Responses:
        200 OK: Transactions found
        404 Not Found: No transactions found for the card
    """
    log = logger.bind(card=mask_card_number(card_number))
    log.info("fetching_card_transactions")

    try:
        transactions = payment_service.get_transactions_for_card(card_number)
    except Exception as e:
        log.exception("fetch_card_transactions_failed", error=str(e))
        raise _internal_error()

    if not transactions:
        log.warning("no_transactions_for_card")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No transactions found for the card",
        )

    log.info("card_transactions_found", count=len(transactions))
    return JSONResponse(
        content=[
            TransactionResponseJSON.from_domain(t).model_dump(mode="json")
            for t in transactions
        ]
    )


@router.get("/transactions/{transaction_id}")
async def get_transaction_by_id(transaction_id: int, payment_service: PaymentSvc) -> JSONResponse:
    """Retrieve a specific transaction by its ID.

    Responses:
        200 OK: Transaction found
        404 Not Found: Transaction doesn't exist
    """
    logger.info("fetching_transaction", transaction_id=transaction_id)

    try:
        transaction = payment_service.get_transaction(transaction_id)
    except TransactionNotFoundError:
        raise _transaction_not_found(transaction_id)
    except Exception as e:
        logger.exception("fetch_transaction_failed", transaction_id=transaction_id, error=str(e))
        raise _internal_error()

    return JSONResponse(
        content=TransactionResponseJSON.from_domain(transaction).model_dump(mode="json")
    )


@router.get("/status/{transaction_id}")
async def get_transaction_status(transaction_id: int, payment_service: PaymentSvc) -> JSONResponse:
    """Retrieve the current status of a transaction.

    Responses:
        200 OK: Status found
        404 Not Found: Transaction doesn't exist
    """
    logger.info("fetching_transaction_status", transaction_id=transaction_id)

    try:
        transaction_status = payment_service.get_transaction_status(transaction_id)
    except TransactionNotFoundError:
        raise _transaction_not_found(transaction_id)
    except Exception as e:
        logger.exception("fetch_status_failed", transaction_id=transaction_id, error=str(e))
        raise _internal_error()

    response = TransactionStatusResponseJSON(
        transaction_id=transaction_id, status=transaction_status
    )
    return JSONResponse(content=response.model_dump(mode="json"))
