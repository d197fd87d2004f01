"""
Workshop Result Types.

Structured values passed between the services and their callers.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from decimal import Decimal
from typing import Any

from workshop.exceptions import ValidationError


@dataclass(frozen=True)
class Requirement:
    """Ingredient quantity needed to build an item."""

    ingredient_id: int
    ingredient_name: str
    required: int

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class Proof:
    """
    Proof of settlement.

    photo is an opaque payload (typically base64); lat/lng are optional.
    The workshop stores both verbatim and never looks inside.
    """

    photo: str = ""
    lat: float | None = None
    lng: float | None = None

    def __post_init__(self):
        if (self.lat is None) != (self.lng is None):
            raise ValidationError(field="location", message="needs both lat and lng")

    @classmethod
    def from_payload(cls, payload: dict[str, Any] | None) -> Proof | None:
        """Build from {'photo': ..., 'location': {'lat': ..., 'lng': ...}}."""
        if not payload:
            return None
        location = payload.get("location") or {}
        return cls(
            photo=payload.get("photo") or "",
            lat=location.get("lat", payload.get("lat")),
            lng=location.get("lng", payload.get("lng")),
        )

    @property
    def is_empty(self) -> bool:
        return not self.photo and self.lat is None


@dataclass
class DashboardSummary:
    """
    Headline numbers for the dashboard.

    All values are folds over the catalog and the ledger; nothing here
    is stored.
    """

    total_stock_value: Decimal
    low_stock_count: int
    pending_jobs: int
    total_revenue: Decimal

    def as_dict(self) -> dict:
        return asdict(self)
