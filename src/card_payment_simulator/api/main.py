"""FastAPI application entry point for Card Payment Simulator."""

from contextlib import asynccontextmanager
from typing import AsyncIterator

import structlog
from fastapi import FastAPI, Request, Response, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from card_payment_simulator.api.routes import cards_router, payments_router
from card_payment_simulator.config import settings
from card_payment_simulator.infrastructure import database
from card_payment_simulator.logging_config import configure_logging

# Configure logging at module level
configure_logging()

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager.

    Creates any missing tables on startup unless schema management is left
    to the Alembic migrations.
    """
    logger.info("starting_card_payment_simulator", environment=settings.environment)

    if settings.create_schema_on_startup:
        try:
            database.init_db()
            logger.info("database_schema_initialized")
        except Exception as e:
            logger.error("failed_to_initialize_database", error=str(e))
            raise

    logger.info("card_payment_simulator_started")

    yield

    logger.info("shutting_down_card_payment_simulator")
    database.engine.dispose()


# Create FastAPI app
app = FastAPI(
    title="Card Payment Simulator",
    description="Simulated card authorization, refunds and transaction ledger",
    version="0.1.0",
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    lifespan=lifespan,
)

# Configure CORS for local development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://localhost:8080"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report malformed requests as 400 Bad Request."""
    logger.warning("request_validation_failed", path=request.url.path, errors=len(exc.errors()))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(exc.errors())},
    )


app.include_router(cards_router)
app.include_router(payments_router)


@app.get("/health")
async def health_check() -> Response:
    """Health check endpoint.

    Returns:
        200 OK if service is healthy
        503 Service Unavailable if unhealthy
    """
    try:
        with database.engine.connect() as conn:
            conn.execute(text("SELECT 1"))

        return JSONResponse(
            status_code=200,
            content={
                "status": "healthy",
                "service": settings.service_name,
                "environment": settings.environment,
            },
        )
    except Exception as e:
        logger.error("health_check_failed", error=str(e))
        return JSONResponse(
            status_code=503,
            content={
                "status": "unhealthy",
                "service": settings.service_name,
                "error": str(e),
            },
        )


@app.get("/")
async def root() -> dict:
    """Root endpoint."""
    return {
        "service": settings.service_name,
        "version": "0.1.0",
        "environment": settings.environment,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "card_payment_simulator.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
