"""Card Payment Simulator: simulated card authorization and transaction ledger."""

__version__ = "0.1.0"
