"""Step to fetch the unit catalog."""

from typing import Optional

from occupancy_sync.services.pipeline import PipelineStep, ReconciliationContext
from occupancy_sync.services.unit_catalog import RegionFilter, UnitCatalog


class FetchUnitsStep(PipelineStep):
    """Fetch every in-region unit. Nothing can be reconciled without it."""

    def __init__(self, catalog: UnitCatalog, region_filter: Optional[RegionFilter] = None):
        """Initialize the step.

        Args:
            catalog: Unit catalog
            region_filter: Region filter; defaults to REGION_* settings
        """
        super().__init__("FetchUnits")
        self.catalog = catalog
        self.region_filter = region_filter or RegionFilter.from_settings()

    async def execute(self, context: ReconciliationContext) -> bool:
        context.units = await self.catalog.fetch_all_units(self.region_filter)
        context.stats["units"] = {"count": len(context.units)}

        if not context.units:
            self.logger.warning("Catalog returned no units in region", cycle_id=context.cycle_id)

        return True
