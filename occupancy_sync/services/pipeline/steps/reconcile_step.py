"""Step to resolve one status per unit."""

from collections import Counter

from occupancy_sync.engine import OccupancyReconciler, reconcile_all
from occupancy_sync.services.pipeline import PipelineStep, ReconciliationContext


class ReconcileStep(PipelineStep):
    """Merge catalog, stays, calendar and overrides into per-unit statuses."""

    def __init__(self, reconciler: OccupancyReconciler):
        super().__init__("Reconcile")
        self.reconciler = reconciler

    async def execute(self, context: ReconciliationContext) -> bool:
        context.unit_occupancies = reconcile_all(
            context.units,
            context.stays,
            context.calendar_days,
            context.overrides,
            context.today,
            degraded_unit_ids=context.degraded_unit_ids,
            reservations_failed=context.reservations_failed,
            reconciler=self.reconciler,
        )

        for occupancy in context.unit_occupancies:
            context.anomalies.extend(occupancy.anomalies)

        context.stats["reasons"] = dict(
            Counter(o.reason.value for o in context.unit_occupancies)
        )
        return True
