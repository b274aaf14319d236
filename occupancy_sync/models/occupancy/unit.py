"""Rental unit and bedroom category models."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class Category(str, Enum):
    """Bedroom-count classification of a unit."""

    STUDIO = "Studio"
    ONE_BR = "1BR"
    TWO_BR = "2BR"
    TWO_BR_PREMIUM = "2BR Premium"
    THREE_BR = "3BR"
    UNKNOWN = "Unknown"


# Reporting order for category rollups. Unknown is appended only when non-empty.
CATEGORY_ORDER: tuple[Category, ...] = (
    Category.STUDIO,
    Category.ONE_BR,
    Category.TWO_BR,
    Category.TWO_BR_PREMIUM,
    Category.THREE_BR,
)


class RentalUnit(BaseModel):
    """A single rentable apartment, built fresh on every catalog fetch."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    display_name: str
    name: str = ""  # Public name
    category: Category = Category.UNKNOWN
    city: Optional[str] = None
    country: Optional[str] = None
    country_code: Optional[str] = None
    address: Optional[str] = None
    bedroom_count: Optional[int] = None
    guest_capacity: Optional[int] = None
