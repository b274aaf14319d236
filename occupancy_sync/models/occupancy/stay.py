"""Stay (reservation) model and lifecycle status mapping."""

from datetime import date
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class LifecycleStatus(str, Enum):
    """Reservation lifecycle status.

    Only NEW and MODIFIED count towards occupancy.
    """

    NEW = "new"
    MODIFIED = "modified"
    CANCELLED = "cancelled"
    OTHER = "other"


class LifecycleStatusMapper:
    """Maps Hostaway reservation status strings to LifecycleStatus."""

    STATUS_MAPPING = {
        "new": LifecycleStatus.NEW,
        "modified": LifecycleStatus.MODIFIED,
        "cancelled": LifecycleStatus.CANCELLED,
        "canceled": LifecycleStatus.CANCELLED,
        "declined": LifecycleStatus.CANCELLED,
        "expired": LifecycleStatus.CANCELLED,
    }

    @staticmethod
    def map_hostaway_status(status: Optional[str]) -> LifecycleStatus:
        """Map a Hostaway status ("new", "modified", "cancelled", "inquiry"...).

        Unrecognised or missing values map to OTHER, which never counts as
        occupying a unit.

        Args:
            status: Raw status string from the reservation API

        Returns:
            LifecycleStatus value
        """
        if not status:
            return LifecycleStatus.OTHER
        return LifecycleStatusMapper.STATUS_MAPPING.get(
            status.strip().lower(), LifecycleStatus.OTHER
        )


class Stay(BaseModel):
    """One guest reservation against a unit."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    unit_id: str
    guest_name: str = ""
    arrival_date: date
    departure_date: date
    lifecycle_status: LifecycleStatus = LifecycleStatus.OTHER
    comment: str = ""
    guest_note: str = ""
    is_likely_test: bool = False
