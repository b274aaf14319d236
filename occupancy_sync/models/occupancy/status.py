"""Per-unit occupancy models: overrides, calendar signals and reconciled status."""

from datetime import date, datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from occupancy_sync.models.occupancy.unit import Category


class OccupancyStatus(str, Enum):
    """Authoritative status of a unit for one snapshot."""

    AVAILABLE = "Available"
    RESERVED = "Reserved"
    BLOCKED = "Blocked"


class StatusReason(str, Enum):
    """Which reconciliation rule decided the status."""

    OVERRIDE_BLOCKED = "override_blocked"
    CALENDAR_BLOCKED = "calendar_blocked"
    ACTIVE_STAY = "active_stay"
    CALENDAR_RESERVED = "calendar_reserved"
    NO_SIGNAL = "no_signal"
    DEGRADED = "degraded"


class GuestType(str, Enum):
    """Kind of guest occupying a reserved unit today."""

    CHECKING_IN = "Today's Check-in"
    STAYING = "Staying Guest"


class CleaningOverride(BaseModel):
    """Manually entered status for a unit. Never expires on its own."""

    model_config = ConfigDict(populate_by_name=True)

    unit_id: str
    manual_status: OccupancyStatus
    reason: str = ""
    created_at: datetime
    updated_at: datetime


class CalendarDay(BaseModel):
    """Calendar signals for one unit on one day."""

    unit_id: str
    date: date
    explicitly_blocked: bool = False
    blocked_unit_count: int = 0
    reservation_refs: list[str] = Field(default_factory=list)
    is_available: bool = True

    @property
    def is_blocked(self) -> bool:
        """True when the calendar marks the day blocked in any form."""
        return self.explicitly_blocked or self.blocked_unit_count > 0


class AnomalyKind(str, Enum):
    """Data inconsistencies detected during reconciliation."""

    OVERLAPPING_STAYS = "overlapping_stays"
    UNKNOWN_CATEGORY = "unknown_category"
    MISSING_CALENDAR_ENTRY = "missing_calendar_entry"
    PARTIAL_FETCH_FAILURE = "partial_fetch_failure"


class Anomaly(BaseModel):
    """A logged, non-fatal inconsistency attached to the snapshot."""

    kind: AnomalyKind
    unit_id: Optional[str] = None
    message: str
    details: dict[str, Any] = Field(default_factory=dict)


class ActiveStaySummary(BaseModel):
    """The stay that made a unit Reserved."""

    reservation_id: str
    guest_name: str
    arrival_date: date
    departure_date: date
    guest_type: GuestType


class UnitOccupancy(BaseModel):
    """Reconciled status of one unit."""

    unit_id: str
    display_name: str
    category: Category
    status: OccupancyStatus
    reason: StatusReason
    active_stay: Optional[ActiveStaySummary] = None
    checking_out_today: bool = False
    degraded: bool = False
    override_reason: Optional[str] = None
    anomalies: list[Anomaly] = Field(default_factory=list)
