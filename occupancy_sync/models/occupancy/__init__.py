"""Domain models for occupancy reconciliation."""

from occupancy_sync.models.occupancy.snapshot import (
    CategorySnapshot,
    OccupancySnapshot,
    SnapshotSyncReport,
    SyncResult,
)
from occupancy_sync.models.occupancy.status import (
    ActiveStaySummary,
    Anomaly,
    AnomalyKind,
    CalendarDay,
    CleaningOverride,
    GuestType,
    OccupancyStatus,
    StatusReason,
    UnitOccupancy,
)
from occupancy_sync.models.occupancy.stay import (
    LifecycleStatus,
    LifecycleStatusMapper,
    Stay,
)
from occupancy_sync.models.occupancy.unit import CATEGORY_ORDER, Category, RentalUnit

__all__ = [
    "Category",
    "CATEGORY_ORDER",
    "RentalUnit",
    "LifecycleStatus",
    "LifecycleStatusMapper",
    "Stay",
    "OccupancyStatus",
    "StatusReason",
    "GuestType",
    "CleaningOverride",
    "CalendarDay",
    "AnomalyKind",
    "Anomaly",
    "ActiveStaySummary",
    "UnitOccupancy",
    "CategorySnapshot",
    "OccupancySnapshot",
    "SyncResult",
    "SnapshotSyncReport",
]
