"""Reconciliation pipeline step implementations."""

from .aggregate_step import AggregateStep
from .classify_units_step import ClassifyUnitsStep
from .fetch_calendar_step import FetchCalendarStep
from .fetch_overrides_step import FetchOverridesStep
from .fetch_reservations_step import FetchReservationsStep
from .fetch_units_step import FetchUnitsStep
from .post_hourly_summary_step import PostHourlySummaryStep
from .reconcile_step import ReconcileStep
from .sync_snapshot_step import SyncSnapshotStep

__all__ = [
    "FetchUnitsStep",
    "ClassifyUnitsStep",
    "FetchReservationsStep",
    "FetchOverridesStep",
    "FetchCalendarStep",
    "ReconcileStep",
    "AggregateStep",
    "SyncSnapshotStep",
    "PostHourlySummaryStep",
]
