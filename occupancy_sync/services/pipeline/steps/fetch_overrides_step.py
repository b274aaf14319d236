"""Step to load manual cleaning overrides."""

from occupancy_sync.models.occupancy import Anomaly, AnomalyKind
from occupancy_sync.services.override_store import OverrideStore, OverrideStoreError
from occupancy_sync.services.pipeline import PipelineStep, ReconciliationContext


class FetchOverridesStep(PipelineStep):
    """Load every stored override.

    Reconciliation proceeds without overrides when the store is down, but the
    context is flagged so the result is never written back to the store.
    """

    def __init__(self, override_store: OverrideStore):
        super().__init__("FetchOverrides")
        self.override_store = override_store

    async def execute(self, context: ReconciliationContext) -> bool:
        try:
            context.overrides = await self.override_store.list_overrides()
        except OverrideStoreError as e:
            self.logger.error(
                "Failed to load overrides",
                cycle_id=context.cycle_id,
                error=str(e),
            )
            context.overrides_failed = True
            context.add_anomaly(
                Anomaly(
                    kind=AnomalyKind.PARTIAL_FETCH_FAILURE,
                    message="Cleaning overrides unavailable",
                    details={"error": str(e)},
                )
            )
            context.add_error(self.name, str(e))
            return False

        context.stats["overrides"] = {"count": len(context.overrides)}
        return True

    def is_required(self) -> bool:
        """Overrides are optional; reconciliation proceeds without them.

        Returns:
            False
        """
        return False
