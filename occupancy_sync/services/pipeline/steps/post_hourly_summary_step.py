"""Step to post the hourly portfolio summary."""

from typing import Optional

from occupancy_sync.config import settings
from occupancy_sync.services.hourly_summary import HourlySummaryPoster, SummaryStore
from occupancy_sync.services.pipeline import PipelineStep, ReconciliationContext


class PostHourlySummaryStep(PipelineStep):
    """Post one summary row per local hour; skipped when no table is set."""

    def __init__(
        self,
        store: SummaryStore,
        summary_table_id: Optional[str] = None,
        dry_run: Optional[bool] = None,
    ):
        super().__init__("PostHourlySummary")
        self.store = store
        self.summary_table_id = (
            summary_table_id if summary_table_id is not None else settings.teable.summary_table_id
        )
        self.dry_run = settings.dry_run if dry_run is None else dry_run

    async def execute(self, context: ReconciliationContext) -> bool:
        if not self.summary_table_id:
            self.logger.debug("No summary table configured", cycle_id=context.cycle_id)
            return True
        if context.snapshot is None:
            return False

        poster = HourlySummaryPoster(self.store, self.summary_table_id, dry_run=self.dry_run)
        context.hourly_summary_posted = await poster.post(context.snapshot, context.local_now)
        return True

    def is_required(self) -> bool:
        """The hourly summary is optional.

        Returns:
            False
        """
        return False
