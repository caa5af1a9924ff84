"""Well-known test cards for seeding the card store.

The card numbers are the public test numbers used by card networks and
processors, grouped by the scenario they exercise against the payment
service: approvals, declines, insufficient funds and expired cards.
"""

import calendar
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from card_payment_simulator.domain.card import Card


def add_months(start: date, months: int) -> date:
    """Shift a date by whole months, clamping to the end of the month."""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


@dataclass(frozen=True)
class ScenarioCard:
    """A test card definition with its expiry relative to today."""

    scenario: str
    card_number: str
    cardholder_name: str
    cvv: str
    balance: str
    months_valid: int = 0
    days_valid: int = 0
    description: str = ""

    def expiration_date(self, today: date) -> date:
        return date.fromordinal(
            add_months(today, self.months_valid).toordinal() + self.days_valid
        )

    def to_card(self, today: date) -> Card:
        return Card(
            card_number=self.card_number,
            cardholder_name=self.cardholder_name,
            expiration_date=self.expiration_date(today),
            cvv=self.cvv,
            balance=Decimal(self.balance),
        )


VALID_CARDS = (
    ScenarioCard("valid", "4242424242424242", "John Doe", "123", "1000.00", months_valid=24),
    ScenarioCard("valid", "5555555555554444", "Jane Smith", "456", "500.00", months_valid=12),
    ScenarioCard("valid", "378282246310005", "Bob Johnson", "789", "2000.00", months_valid=6),
    ScenarioCard("valid", "6011111111111117", "Alice Brown", "321", "750.00", months_valid=36),
)

TEST_SCENARIO_CARDS = (
    # Always approved
    ScenarioCard(
        "always_approved", "4242424242424242", "Always Approved", "123", "10000.00",
        months_valid=24, description="Visa card that will always be approved",
    ),
    ScenarioCard(
        "always_approved", "5555555555554444", "Always Approved", "456", "5000.00",
        months_valid=12, description="Mastercard that will always be approved",
    ),
    # Always declined
    ScenarioCard(
        "always_declined", "4000000000000002", "Always Declined", "789", "1000.00",
        months_valid=24, description="Visa card that will always be declined",
    ),
    ScenarioCard(
        "always_declined", "4000000000000010", "Always Declined", "321", "2000.00",
        months_valid=12, description="Visa card that will always be declined",
    ),
    # Processing error
    ScenarioCard(
        "processing_error", "4000000000000341", "Processing Error", "456", "3000.00",
        months_valid=24, description="Visa card that will trigger a processing error",
    ),
    ScenarioCard(
        "processing_error", "4000000000000119", "Processing Error", "789", "4000.00",
        months_valid=12, description="Visa card that will trigger a processing error",
    ),
    # Insufficient funds
    ScenarioCard(
        "insufficient_funds", "4000000000009995", "Insufficient Funds", "123", "10.00",
        months_valid=24, description="Visa card that will always have insufficient funds",
    ),
    ScenarioCard(
        "insufficient_funds", "4000000000009987", "Insufficient Funds", "456", "5.00",
        months_valid=12, description="Visa card that will always have insufficient funds",
    ),
    # Expired
    ScenarioCard(
        "expired_cards", "4000000000000069", "Expired Card", "789", "1000.00",
        months_valid=-1, description="Visa card that is expired",
    ),
    ScenarioCard(
        "expired_cards", "4000000000000127", "Expired Card", "321", "2000.00",
        days_valid=-1, description="Visa card that is expired",
    ),
)


def valid_cards(today: date) -> list[Card]:
    """Cards with varied balances, all usable today."""
    return [definition.to_card(today) for definition in VALID_CARDS]


def scenario_cards(today: date) -> list[Card]:
    """Cards covering approval, decline, error, funds and expiry scenarios."""
    return [definition.to_card(today) for definition in TEST_SCENARIO_CARDS]


def scenario_catalogue(today: date) -> dict[str, list[dict[str, str]]]:
    """Describe the scenario cards grouped by scenario name."""
    catalogue: dict[str, list[dict[str, str]]] = {}
    for definition in TEST_SCENARIO_CARDS:
        catalogue.setdefault(definition.scenario, []).append(
            {
                "card_number": definition.card_number,
                "description": definition.description,
                "cvv": definition.cvv,
                "expiry": definition.expiration_date(today).strftime("%m/%y"),
            }
        )
    return catalogue
