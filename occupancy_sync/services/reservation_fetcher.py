"""Multi-strategy reservation fetch, deduplicated by reservation id."""

from datetime import date, timedelta
from typing import Any, Optional

from pydantic import BaseModel, Field
from structlog import get_logger

from occupancy_sync.clients import AuthConfigError, FetchError, HostawayClient
from occupancy_sync.config import settings
from occupancy_sync.engine.stay_filter import TestBookingDetector
from occupancy_sync.models.occupancy import Stay
from occupancy_sync.transformers import ReservationTransformer

logger = get_logger(__name__)


class ReservationWindow(BaseModel):
    """Inclusive date window for reservation queries."""

    start: date
    end: date

    @classmethod
    def around(
        cls,
        today: date,
        lookback_days: Optional[int] = None,
        lookahead_days: Optional[int] = None,
    ) -> "ReservationWindow":
        """Window of ``today - lookback`` to ``today + lookahead`` (90 days each by default)."""
        back = lookback_days if lookback_days is not None else settings.hostaway.reservation_lookback_days
        ahead = lookahead_days if lookahead_days is not None else settings.hostaway.reservation_lookahead_days
        return cls(start=today - timedelta(days=back), end=today + timedelta(days=ahead))


class ReservationFetchResult(BaseModel):
    """Merged stays plus the strategies that failed."""

    stays: list[Stay] = Field(default_factory=list)
    strategy_counts: dict[str, int] = Field(default_factory=dict)
    failed_strategies: list[str] = Field(default_factory=list)

    @property
    def partial(self) -> bool:
        return bool(self.failed_strategies)


class ReservationFetcher:
    """Fetches reservations with three query strategies and merges them.

    Strategies, in merge order:
    - ``arrival``: arrivals inside the window
    - ``departure``: departures inside the window
    - ``recent``: no date filter, sorted by latest activity descending
    A later strategy's copy of a reservation replaces an earlier one.
    """

    def __init__(
        self,
        client: HostawayClient,
        detector: Optional[TestBookingDetector] = None,
    ):
        """Initialize the fetcher.

        Args:
            client: Hostaway API client
            detector: Test-booking detector used when mapping stays
        """
        self.client = client
        self.detector = detector
        self.page_size = settings.hostaway.reservations_page_size
        self.max_pages = settings.hostaway.max_pages

    @staticmethod
    def strategies(window: ReservationWindow) -> list[tuple[str, dict[str, Any]]]:
        start, end = window.start.isoformat(), window.end.isoformat()
        return [
            ("arrival", {"arrivalStartDate": start, "arrivalEndDate": end}),
            ("departure", {"departureStartDate": start, "departureEndDate": end}),
            ("recent", {"sortOrder": "latestActivityDesc"}),
        ]

    async def _fetch_strategy(self, name: str, filters: dict[str, Any]) -> list[dict[str, Any]]:
        """Page through one strategy until a short page or the page cap."""
        records: list[dict[str, Any]] = []
        for page in range(self.max_pages):
            batch = await self.client.list_reservations(
                filters=filters,
                offset=page * self.page_size,
                limit=self.page_size,
            )
            records.extend(batch)
            if len(batch) < self.page_size:
                break
        else:
            logger.warning(
                "Reservation pagination cap reached",
                strategy=name,
                max_pages=self.max_pages,
                fetched=len(records),
            )
        return records

    async def fetch_reservations_detailed(self, window: ReservationWindow) -> ReservationFetchResult:
        """Run every strategy and merge by reservation id.

        Raises:
            FetchError: If every strategy failed
            AuthConfigError: If the token is missing or rejected
        """
        merged: dict[str, dict[str, Any]] = {}
        result = ReservationFetchResult()

        for name, filters in self.strategies(window):
            try:
                records = await self._fetch_strategy(name, filters)
            except AuthConfigError:
                raise
            except Exception as e:
                logger.warning(
                    "Reservation strategy failed, continuing",
                    strategy=name,
                    error=str(e),
                )
                result.failed_strategies.append(name)
                continue

            result.strategy_counts[name] = len(records)
            for record in records:
                reservation_id = record.get("id") if isinstance(record, dict) else None
                if reservation_id is None:
                    continue
                merged[str(reservation_id)] = record

        if len(result.failed_strategies) == len(self.strategies(window)):
            raise FetchError("Every reservation query strategy failed")

        result.stays = ReservationTransformer.transform_batch(list(merged.values()), self.detector)
        logger.info(
            "Fetched reservations",
            window_start=window.start.isoformat(),
            window_end=window.end.isoformat(),
            unique_reservations=len(merged),
            stays=len(result.stays),
            strategy_counts=result.strategy_counts,
            failed_strategies=result.failed_strategies,
        )
        return result

    async def fetch_reservations(self, window: ReservationWindow) -> list[Stay]:
        """Deduplicated stays across every strategy."""
        result = await self.fetch_reservations_detailed(window)
        return result.stays
