"""Per-cycle context shared between reconciliation steps."""

from datetime import date, datetime, timezone
from typing import Any, Optional

from occupancy_sync.models.occupancy import (
    Anomaly,
    CalendarDay,
    Category,
    CategorySnapshot,
    CleaningOverride,
    OccupancySnapshot,
    RentalUnit,
    Stay,
    SyncResult,
    UnitOccupancy,
)


class ReconciliationContext:
    """Context object for passing data between pipeline steps.

    Created fresh for every cycle; nothing in here outlives the cycle.
    """

    def __init__(self, cycle_id: str, today: date, local_now: datetime):
        """Initialize the context.

        Args:
            cycle_id: Identifier bound into every log line of the cycle
            today: Local calendar date being reconciled
            local_now: Current time in the portfolio's timezone
        """
        self.cycle_id = cycle_id
        self.today = today
        self.local_now = local_now
        self.start_time = datetime.now(timezone.utc)

        # Fetched inputs
        self.units: list[RentalUnit] = []
        self.stays: list[Stay] = []
        self.reservations_failed: bool = False
        self.overrides: list[CleaningOverride] = []
        self.overrides_failed: bool = False
        self.calendar_days: dict[str, Optional[CalendarDay]] = {}
        self.degraded_unit_ids: set[str] = set()

        # Reconciled output
        self.unit_occupancies: list[UnitOccupancy] = []
        self.per_category: dict[Category, CategorySnapshot] = {}
        self.portfolio: Optional[CategorySnapshot] = None
        self.snapshot: Optional[OccupancySnapshot] = None

        # Sync results
        self.units_sync: Optional[SyncResult] = None
        self.categories_sync: Optional[SyncResult] = None
        self.hourly_summary_posted: bool = False

        self.anomalies: list[Anomaly] = []
        self.stats: dict[str, Any] = {}
        self.errors: list[dict[str, str]] = []

        # Set when a credential failure makes further steps pointless
        self.fatal_error: Optional[Exception] = None

        self.success: bool = False

    def add_error(self, step_name: str, error_message: str) -> None:
        """Add an error to the context.

        Args:
            step_name: Name of the step where error occurred
            error_message: Error message
        """
        self.errors.append({
            "step": step_name,
            "message": error_message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        })

    def add_anomaly(self, anomaly: Anomaly) -> None:
        self.anomalies.append(anomaly)

    def has_errors(self) -> bool:
        return len(self.errors) > 0

    def get_results(self) -> dict[str, Any]:
        """Get final results dictionary.

        Returns:
            Dictionary containing results and statistics
        """
        end_time = datetime.now(timezone.utc)
        duration = (end_time - self.start_time).total_seconds()

        return {
            "cycle_id": self.cycle_id,
            "today": self.today.isoformat(),
            "success": self.success,
            "start_time": self.start_time.isoformat(),
            "end_time": end_time.isoformat(),
            "duration_seconds": duration,
            "errors": self.errors,
            "stats": self.stats,
        }
