"""Pure reconciliation logic: classification, stay predicates, status, rollups."""

from occupancy_sync.engine.aggregation import (
    aggregate,
    aggregate_units,
    occupancy_rate,
    portfolio_total,
)
from occupancy_sync.engine.category_classifier import CategoryClassifier
from occupancy_sync.engine.reconciler import (
    OccupancyReconciler,
    effective_overrides,
    reconcile_all,
)
from occupancy_sync.engine.stay_filter import (
    TestBookingDetector,
    is_active_today,
    is_checking_out_today,
    is_eligible_status,
    is_likely_test_booking,
    qualifies_for_occupancy,
)

__all__ = [
    "CategoryClassifier",
    "TestBookingDetector",
    "is_active_today",
    "is_checking_out_today",
    "is_eligible_status",
    "is_likely_test_booking",
    "qualifies_for_occupancy",
    "OccupancyReconciler",
    "effective_overrides",
    "reconcile_all",
    "aggregate",
    "aggregate_units",
    "occupancy_rate",
    "portfolio_total",
]
