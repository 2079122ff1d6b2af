"""Outlet domain entity."""

from datetime import UTC, datetime

from pydantic import BaseModel, Field


class Outlet(BaseModel):
    """A café outlet owning its own stock and business day."""

    id: int | None = None
    name: str
    timezone: str = "UTC"  # IANA name; local midnight defines the business day
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
