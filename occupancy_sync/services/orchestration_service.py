"""Main orchestrator for the occupancy reconciliation cycle."""

import uuid
from datetime import datetime, timezone
from typing import Callable, Optional
from zoneinfo import ZoneInfo

from structlog import get_logger

from occupancy_sync.clients import HostawayClient, TeableClient
from occupancy_sync.config import settings
from occupancy_sync.engine import CategoryClassifier, OccupancyReconciler, TestBookingDetector
from occupancy_sync.models.occupancy import (
    CategorySnapshot,
    CleaningOverride,
    OccupancySnapshot,
    OccupancyStatus,
    SnapshotSyncReport,
)
from occupancy_sync.services.calendar_service import CalendarService
from occupancy_sync.services.override_store import OverrideStore
from occupancy_sync.services.pipeline import Pipeline, PipelineStep, ReconciliationContext
from occupancy_sync.services.pipeline.steps import (
    AggregateStep,
    ClassifyUnitsStep,
    FetchCalendarStep,
    FetchOverridesStep,
    FetchReservationsStep,
    FetchUnitsStep,
    PostHourlySummaryStep,
    ReconcileStep,
    SyncSnapshotStep,
)
from occupancy_sync.services.reservation_fetcher import ReservationFetcher
from occupancy_sync.services.unit_catalog import RegionFilter, UnitCatalog

logger = get_logger(__name__)


class OrchestrationError(Exception):
    """Raised when a reconciliation cycle cannot produce a snapshot."""

    pass


class ServiceUnavailableError(OrchestrationError):
    """Raised when credentials are missing or rejected."""

    pass


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class OccupancyOrchestrator:
    """Runs reconciliation cycles and exposes their results.

    Each call runs a fresh cycle with its own context; nothing is cached
    between calls.
    """

    def __init__(
        self,
        hostaway_client: Optional[HostawayClient] = None,
        teable_client: Optional[TeableClient] = None,
        override_store: Optional[OverrideStore] = None,
        classifier: Optional[CategoryClassifier] = None,
        detector: Optional[TestBookingDetector] = None,
        region_filter: Optional[RegionFilter] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize the orchestrator with all required services.

        Args:
            hostaway_client: Catalog/reservation/calendar client
            teable_client: Tabular store client
            override_store: Cleaning override store
            classifier: Category classifier
            detector: Test-booking detector
            region_filter: Catalog region filter
            clock: Returns the current aware datetime (UTC)

        Raises:
            ServiceUnavailableError: If the Hostaway token is not configured
        """
        self.hostaway_client = hostaway_client or HostawayClient()
        if not self.hostaway_client.token:
            raise ServiceUnavailableError("HOSTAWAY_AUTH_TOKEN is not configured")

        self.teable_client = teable_client or TeableClient()
        self.override_store = override_store or OverrideStore()
        self.detector = detector or TestBookingDetector()
        self.classifier = classifier or CategoryClassifier()
        self.reconciler = OccupancyReconciler(self.detector)
        self.region_filter = region_filter or RegionFilter.from_settings()
        self.clock = clock or _utc_now
        self.tz = ZoneInfo(settings.timezone)

    def _reconcile_steps(self) -> list[PipelineStep]:
        return [
            FetchUnitsStep(UnitCatalog(self.hostaway_client), self.region_filter),
            ClassifyUnitsStep(self.classifier),
            FetchReservationsStep(ReservationFetcher(self.hostaway_client, self.detector)),
            FetchOverridesStep(self.override_store),
            FetchCalendarStep(CalendarService(self.hostaway_client)),
            ReconcileStep(self.reconciler),
            AggregateStep(),
        ]

    def _new_context(self) -> ReconciliationContext:
        local_now = self.clock().astimezone(self.tz)
        return ReconciliationContext(
            cycle_id=uuid.uuid4().hex[:8],
            today=local_now.date(),
            local_now=local_now,
        )

    async def _run(self, name: str, steps: list[PipelineStep]) -> ReconciliationContext:
        context = self._new_context()
        logger.info("Starting reconciliation cycle", cycle_id=context.cycle_id, pipeline=name)

        context = await Pipeline(name, steps).execute(context)

        if context.fatal_error is not None:
            raise ServiceUnavailableError(str(context.fatal_error)) from context.fatal_error
        if context.snapshot is None:
            messages = "; ".join(e["message"] for e in context.errors)
            raise OrchestrationError(f"Reconciliation cycle failed: {messages}")
        return context

    async def get_occupancy_snapshot(self) -> OccupancySnapshot:
        """Run a read-only cycle and return the snapshot.

        Raises:
            ServiceUnavailableError: On missing or rejected credentials
            OrchestrationError: If the catalog cannot be fetched
        """
        context = await self._run("occupancy-snapshot", self._reconcile_steps())
        return context.snapshot

    async def get_category_breakdown(self) -> list[CategorySnapshot]:
        """Per-category rollups of a fresh read-only cycle."""
        snapshot = await self.get_occupancy_snapshot()
        return snapshot.per_category

    async def trigger_sync(self) -> SnapshotSyncReport:
        """Run a full cycle and sync the snapshot into the store.

        Re-running with unchanged upstream data writes nothing.

        Raises:
            ServiceUnavailableError: On missing or rejected credentials
            OrchestrationError: If the catalog cannot be fetched
        """
        steps = self._reconcile_steps() + [
            SyncSnapshotStep(self.teable_client),
            PostHourlySummaryStep(self.teable_client),
        ]
        context = await self._run("snapshot-sync", steps)

        report = SnapshotSyncReport(
            success=context.success,
            snapshot=context.snapshot,
            units=context.units_sync,
            categories=context.categories_sync,
            hourly_summary_posted=context.hourly_summary_posted,
            dry_run=settings.dry_run,
            errors=context.errors,
            stats=context.get_results(),
        )

        logger.info(
            "Snapshot sync complete",
            cycle_id=context.cycle_id,
            success=report.success,
            error_count=len(report.errors),
        )
        return report

    async def set_override(
        self, unit_id: str, manual_status: OccupancyStatus, reason: str = ""
    ) -> CleaningOverride:
        return await self.override_store.set_override(
            unit_id, manual_status, reason, now=self.clock()
        )

    async def clear_override(self, unit_id: str) -> bool:
        return await self.override_store.clear_override(unit_id)

    async def list_overrides(self) -> list[CleaningOverride]:
        return await self.override_store.list_overrides()

    async def close(self) -> None:
        await self.override_store.close()
