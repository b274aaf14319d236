"""Pydantic models for Hostaway calendar responses."""

from datetime import date
from typing import Any, Optional

from pydantic import BaseModel, Field


class HostawayCalendarDay(BaseModel):
    """One day of GET /listings/{id}/calendar."""

    date: date
    is_available: Optional[int] = Field(None, alias="isAvailable")  # 1/0 upstream
    status: Optional[str] = None  # available, reserved, blocked, pending...
    count_blocked_units: Optional[int] = Field(None, alias="countBlockedUnits")
    reservations: list[dict[str, Any]] = Field(default_factory=list)

    class Config:
        extra = "allow"
        populate_by_name = True
