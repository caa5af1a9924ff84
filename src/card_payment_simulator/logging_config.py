"""Structured logging configuration using structlog."""

import logging
import sys

import structlog
from structlog.types import Processor

from card_payment_simulator.config import settings


def configure_logging(
    log_level: str | None = None,
    format_as_json: bool | None = None,
) -> None:
    """Configure structured logging for the application.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR). Defaults to settings.
        format_as_json: If True, output logs as JSON; otherwise use console format.
            Defaults to JSON in production or when LOG_FORMAT_JSON is set.
    """
    level_name = (log_level or settings.log_level).upper()
    if format_as_json is None:
        format_as_json = settings.log_format_json or settings.environment == "production"

    # Configure standard library logging
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level_name),
    )

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if format_as_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Add service context to all logs
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(
        service=settings.service_name,
        environment=settings.environment,
    )


def mask_card_number(card_number: str | None) -> str:
    """Mask a card number for logging, keeping the last four digits."""
    if not card_number:
        return ""
    return f"****{card_number[-4:]}"
