"""Bounded-concurrency per-unit calendar lookup."""

import asyncio
from datetime import date
from typing import Optional

from pydantic import BaseModel, Field
from structlog import get_logger

from occupancy_sync.clients import AuthConfigError, FetchError, HostawayClient
from occupancy_sync.config import settings
from occupancy_sync.models.occupancy import CalendarDay
from occupancy_sync.transformers import CalendarTransformer

logger = get_logger(__name__)


class CalendarFetchResult(BaseModel):
    """Today's calendar entry per unit plus units whose lookup failed."""

    days: dict[str, Optional[CalendarDay]] = Field(default_factory=dict)
    failed_unit_ids: set[str] = Field(default_factory=set)


class CalendarService:
    """Fetches one calendar day for many units on a bounded worker pool."""

    def __init__(self, client: HostawayClient, concurrency: Optional[int] = None):
        """Initialize the service.

        Args:
            client: Hostaway API client
            concurrency: Maximum in-flight calendar requests
        """
        self.client = client
        self.concurrency = max(1, concurrency or settings.hostaway.calendar_concurrency)

    async def fetch_days(self, unit_ids: list[str], day: date) -> CalendarFetchResult:
        """Fetch ``day`` for every unit.

        Any non-auth error for one unit marks only that unit as failed. Auth errors
        propagate and cancel the batch.

        Args:
            unit_ids: Units to look up
            day: Date to fetch

        Returns:
            CalendarFetchResult with None for units whose calendar had no entry
        """
        semaphore = asyncio.Semaphore(self.concurrency)
        result = CalendarFetchResult()

        async def fetch_one(unit_id: str) -> None:
            async with semaphore:
                try:
                    days_data = await self.client.get_calendar(unit_id, day, day)
                    if not isinstance(days_data, list):
                        raise FetchError(f"Unexpected calendar payload for unit {unit_id}")
                    calendar_day = CalendarTransformer.find_day(unit_id, days_data, day)
                except AuthConfigError:
                    raise
                except Exception as e:
                    logger.warning(
                        "Calendar lookup failed, unit degraded",
                        unit_id=unit_id,
                        error=str(e),
                        error_type=type(e).__name__,
                    )
                    result.failed_unit_ids.add(unit_id)
                    return
            result.days[unit_id] = calendar_day

        await asyncio.gather(*(fetch_one(unit_id) for unit_id in unit_ids))

        logger.info(
            "Fetched calendar days",
            date=day.isoformat(),
            units=len(unit_ids),
            failed=len(result.failed_unit_ids),
            missing=sum(1 for d in result.days.values() if d is None),
        )
        return result
