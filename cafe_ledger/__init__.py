"""Cafe stock ledger: inventory movements and daily closing."""

__version__ = "1.0.0"
