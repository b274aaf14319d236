"""Step to roll statuses up and assemble the snapshot."""

from datetime import datetime, timezone

from occupancy_sync.engine import aggregate_units
from occupancy_sync.models.occupancy import CATEGORY_ORDER, Category, OccupancySnapshot
from occupancy_sync.services.pipeline import PipelineStep, ReconciliationContext


class AggregateStep(PipelineStep):
    """Build category rollups, the portfolio total and the snapshot."""

    def __init__(self):
        super().__init__("Aggregate")

    async def execute(self, context: ReconciliationContext) -> bool:
        per_category, portfolio = aggregate_units(context.unit_occupancies)
        context.per_category = per_category
        context.portfolio = portfolio

        ordered = [per_category[c] for c in CATEGORY_ORDER]
        if Category.UNKNOWN in per_category:
            ordered.append(per_category[Category.UNKNOWN])

        degraded = [o.unit_id for o in context.unit_occupancies if o.degraded]

        context.snapshot = OccupancySnapshot(
            as_of=context.today,
            generated_at=datetime.now(timezone.utc),
            cycle_id=context.cycle_id,
            total_units=portfolio.total,
            available=portfolio.available,
            reserved=portfolio.reserved,
            blocked=portfolio.blocked,
            occupancy_rate=portfolio.occupancy_rate,
            per_category=ordered,
            per_unit=context.unit_occupancies,
            degraded_units=degraded,
            overrides_loaded=not context.overrides_failed,
            anomalies=context.anomalies,
            errors=context.errors,
        )

        context.stats["snapshot"] = {
            "total_units": portfolio.total,
            "available": portfolio.available,
            "reserved": portfolio.reserved,
            "blocked": portfolio.blocked,
            "occupancy_rate": portfolio.occupancy_rate,
            "degraded_units": len(degraded),
            "anomalies": len(context.anomalies),
        }

        self.logger.info(
            "Snapshot assembled",
            cycle_id=context.cycle_id,
            **context.stats["snapshot"],
        )
        return True
