"""Infrastructure layer implementations."""

from cafe_ledger.infrastructure import storage

__all__ = ["storage"]
