"""Custom exceptions for Card Payment Simulator."""


class CardPaymentError(Exception):
    """Base exception for card and payment errors."""

    pass


class CardNotFoundError(CardPaymentError):
    """
    Raised when no card exists for the requested card number.

    Mapped to 404 by the HTTP layer. The payment flow does not raise it:
    an unknown card there is reported as a FAILED outcome.
    """

    pass


class TransactionNotFoundError(CardPaymentError):
    """Raised when no transaction exists for the requested id (404)."""

    pass


class DuplicateCardNumberError(CardPaymentError):
    """Raised when a card with the same card number already exists (409)."""

    pass


class CardsInUseError(CardPaymentError):
    """
    Raised when cards cannot be deleted because transactions reference them.

    Transactions are never deleted, so a card store reset is refused once
    the ledger holds any entry.
    """

    pass


class BalanceConflictError(CardPaymentError):
    """
    Raised when a guarded balance update would leave a negative balance.

    This happens when a concurrent request changed the balance between the
    sufficiency check and the update. The engine turns it into a FAILED
    outcome.
    """

    pass


class InvalidTransactionStateError(CardPaymentError):
    """
    Raised when a guarded status change finds the transaction in another state.

    A refund that loses the race against a concurrent refund sees REFUNDED
    instead of APPROVED and is declined.
    """

    pass
