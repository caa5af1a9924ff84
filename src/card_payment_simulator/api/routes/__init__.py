"""API route modules."""

from card_payment_simulator.api.routes.cards import router as cards_router
from card_payment_simulator.api.routes.payments import router as payments_router

__all__ = ["cards_router", "payments_router"]
