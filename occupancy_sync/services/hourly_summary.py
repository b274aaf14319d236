"""Hourly portfolio summary posting, at most one row per local hour."""

from datetime import datetime
from typing import Any, Optional, Protocol

from structlog import get_logger

from occupancy_sync.clients import FetchError
from occupancy_sync.config import settings
from occupancy_sync.models.occupancy import OccupancySnapshot
from occupancy_sync.transformers.snapshot_transformer import (
    HOUR_BUCKET_FORMAT,
    SUMMARY_TIME_FIELD,
    SnapshotTransformer,
)

logger = get_logger(__name__)


class SummaryStore(Protocol):
    """Store operations the summary poster needs."""

    async def list_latest_records(
        self, table_id: str, order_field: str, take: int
    ) -> list[dict[str, Any]]: ...

    async def create_record(self, table_id: str, fields: dict[str, Any]) -> dict[str, Any]: ...


def hour_bucket(moment: datetime) -> str:
    """``YYYY-MM-DD HH`` of a local timestamp."""
    return moment.strftime(HOUR_BUCKET_FORMAT)


def _record_bucket(fields: dict[str, Any]) -> str:
    value = str(fields.get(SUMMARY_TIME_FIELD) or "").strip().replace("T", " ")
    return value[:13]


class HourlySummaryPoster:
    """Posts a portfolio summary row unless one exists for the current hour.

    Only the newest rows by timestamp are read, so the check stays cheap on a
    table that grows every hour. If the existence check itself fails the row
    is not written; a missed hour is preferred over a duplicate.
    """

    def __init__(
        self,
        store: SummaryStore,
        table_id: str,
        dry_run: bool = False,
        order_field: Optional[str] = None,
        take: Optional[int] = None,
    ):
        self.store = store
        self.table_id = table_id
        self.dry_run = dry_run
        self.order_field = order_field or settings.teable.summary_time_field
        self.take = max(1, take or settings.teable.summary_check_take)

    async def bucket_exists(self, bucket: str) -> bool:
        """Check the latest rows for one in the hour bucket.

        Raises:
            FetchError: If the table cannot be read
        """
        records = await self.store.list_latest_records(self.table_id, self.order_field, self.take)
        return any(_record_bucket(r.get("fields") or {}) == bucket for r in records)

    async def post(self, snapshot: OccupancySnapshot, local_now: datetime) -> bool:
        """Post the summary for ``local_now``'s hour.

        Returns:
            True if a row was written
        """
        bucket = hour_bucket(local_now)
        try:
            if await self.bucket_exists(bucket):
                logger.info("Hourly summary already posted", hour_bucket=bucket)
                return False
        except FetchError as e:
            logger.warning(
                "Hour bucket check failed, skipping summary",
                hour_bucket=bucket,
                error=str(e),
            )
            return False

        row = SnapshotTransformer.summary_row(snapshot, local_now)
        if self.dry_run:
            logger.info("Dry run, hourly summary not posted", hour_bucket=bucket)
            return False

        await self.store.create_record(self.table_id, row)
        logger.info("Posted hourly summary", hour_bucket=bucket)
        return True
