"""Step to push the snapshot into the tabular store."""

from typing import Optional

from occupancy_sync.clients import FetchError
from occupancy_sync.config import settings
from occupancy_sync.services.pipeline import PipelineStep, ReconciliationContext
from occupancy_sync.services.snapshot_sync import TableStore, sync_table
from occupancy_sync.transformers import SnapshotTransformer


class SyncSnapshotStep(PipelineStep):
    """Sync per-unit rows and per-category rows with upsert/stale-delete."""

    def __init__(
        self,
        store: TableStore,
        units_table_id: Optional[str] = None,
        categories_table_id: Optional[str] = None,
        dry_run: Optional[bool] = None,
    ):
        """Initialize the step.

        Args:
            store: Table store
            units_table_id: Per-unit table; defaults to TEABLE_UNITS_TABLE_ID
            categories_table_id: Category table; defaults to TEABLE_CATEGORIES_TABLE_ID
            dry_run: Skip writes; defaults to DRY_RUN
        """
        super().__init__("SyncSnapshot")
        self.store = store
        self.units_table_id = units_table_id if units_table_id is not None else settings.teable.units_table_id
        self.categories_table_id = (
            categories_table_id
            if categories_table_id is not None
            else settings.teable.categories_table_id
        )
        self.dry_run = settings.dry_run if dry_run is None else dry_run

    async def execute(self, context: ReconciliationContext) -> bool:
        if context.snapshot is None:
            self.logger.warning("No snapshot to sync", cycle_id=context.cycle_id)
            return False
        if context.overrides_failed:
            # Manual blocks are unknown; writing now would release them in the store
            self.logger.warning("Overrides unavailable, store sync skipped", cycle_id=context.cycle_id)
            context.add_error(self.name, "Store sync skipped: cleaning overrides unavailable")
            return False

        success = True

        try:
            context.units_sync = await sync_table(
                self.store,
                self.units_table_id,
                SnapshotTransformer.unit_rows(context.snapshot),
                SnapshotTransformer.unit_key,
                dry_run=self.dry_run,
            )
        except FetchError as e:
            context.add_error(self.name, f"Failed to sync unit rows: {str(e)}")
            success = False

        try:
            context.categories_sync = await sync_table(
                self.store,
                self.categories_table_id,
                SnapshotTransformer.category_rows(context.snapshot),
                SnapshotTransformer.category_key,
                dry_run=self.dry_run,
            )
        except FetchError as e:
            context.add_error(self.name, f"Failed to sync category rows: {str(e)}")
            success = False

        context.stats["sync"] = {
            "units": context.units_sync.model_dump() if context.units_sync else None,
            "categories": context.categories_sync.model_dump() if context.categories_sync else None,
            "dry_run": self.dry_run,
        }
        return success
