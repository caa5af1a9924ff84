#!/usr/bin/env python3
"""Seed test cards for local development.

Usage:
    python scripts/seed_test_data.py                 # scenario cards
    python scripts/seed_test_data.py --fixture valid # valid cards only
"""

import argparse
import sys

import structlog

from card_payment_simulator import fixtures
from card_payment_simulator.domain import CardService, utc_now
from card_payment_simulator.infrastructure import CardRepository, SessionAtomicScope
from card_payment_simulator.infrastructure.database import get_db_session, init_db
from card_payment_simulator.logging_config import configure_logging, mask_card_number

logger = structlog.get_logger(__name__)

FIXTURES = {
    "scenarios": fixtures.scenario_cards,
    "valid": fixtures.valid_cards,
}


def seed_cards(fixture: str) -> int:
    """Replace all stored cards with the named fixture set."""
    init_db()
    today = utc_now().date()

    with get_db_session() as session:
        service = CardService(CardRepository(session), SessionAtomicScope(session))
        cards = service.reset_cards(FIXTURES[fixture](today))

    for card in cards:
        logger.info(
            "card_seeded",
            card_id=card.id,
            card=mask_card_number(card.card_number),
            balance=str(card.balance),
        )
    return len(cards)


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument(
        "--fixture",
        choices=sorted(FIXTURES),
        default="scenarios",
        help="Card set to seed (default: scenarios)",
    )
    args = parser.parse_args()

    configure_logging()

    try:
        count = seed_cards(args.fixture)
        logger.info("test_data_seeded", fixture=args.fixture, count=count)
    except Exception as e:
        logger.error("seeding_failed", error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
