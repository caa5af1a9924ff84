"""HTTP API for Card Payment Simulator."""
