"""Snapshot, category rollup and sync result models."""

from datetime import date, datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from occupancy_sync.models.occupancy.status import Anomaly, UnitOccupancy
from occupancy_sync.models.occupancy.unit import Category


class CategorySnapshot(BaseModel):
    """Counts for one category (or the whole portfolio). Immutable."""

    model_config = ConfigDict(frozen=True)

    category: Optional[Category] = None  # None for the portfolio total
    available: int = 0
    reserved: int = 0
    blocked: int = 0
    total: int = 0
    occupancy_rate: int = 0  # Whole percent, rounded half up


class OccupancySnapshot(BaseModel):
    """Complete result of one reconciliation cycle."""

    as_of: date
    generated_at: datetime
    cycle_id: str
    total_units: int = 0
    available: int = 0
    reserved: int = 0
    blocked: int = 0
    occupancy_rate: int = 0
    per_category: list[CategorySnapshot] = Field(default_factory=list)
    per_unit: list[UnitOccupancy] = Field(default_factory=list)
    degraded_units: list[str] = Field(default_factory=list)
    overrides_loaded: bool = True
    anomalies: list[Anomaly] = Field(default_factory=list)
    errors: list[dict[str, str]] = Field(default_factory=list)


class SyncResult(BaseModel):
    """Outcome of one three-way sync against a store table."""

    table_id: str = ""
    created: int = 0
    updated: int = 0
    unchanged: int = 0
    deleted: int = 0
    errors: int = 0
    duration_seconds: float = 0.0


class SnapshotSyncReport(BaseModel):
    """Result of trigger_sync: the snapshot plus one SyncResult per table."""

    success: bool = False
    snapshot: Optional[OccupancySnapshot] = None
    units: Optional[SyncResult] = None
    categories: Optional[SyncResult] = None
    hourly_summary_posted: bool = False
    dry_run: bool = False
    errors: list[dict[str, str]] = Field(default_factory=list)
    stats: dict[str, Any] = Field(default_factory=dict)
