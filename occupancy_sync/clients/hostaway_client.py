"""Hostaway API client for listings, reservations and calendar days."""

from datetime import date
from typing import Any, Optional

import httpx
from structlog import get_logger

from occupancy_sync.clients.base_client import BaseApiClient, FetchError
from occupancy_sync.config import settings

logger = get_logger(__name__)


class HostawayClient(BaseApiClient):
    """Client for Hostaway API endpoints.

    Every method returns a single page; pagination is driven by the callers
    (UnitCatalog, ReservationFetcher) so each keeps its own iteration guard.
    """

    service_name = "Hostaway API"

    def __init__(
        self,
        base_url: Optional[str] = None,
        auth_token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the Hostaway client with settings.

        Args:
            base_url: Override for HOSTAWAY_BASE_URL
            auth_token: Override for HOSTAWAY_AUTH_TOKEN
            transport: Optional httpx transport for tests
        """
        super().__init__(
            base_url=base_url or settings.hostaway.base_url,
            token=auth_token if auth_token is not None else settings.hostaway.auth_token,
            timeout=settings.hostaway.request_timeout,
            max_retries=settings.hostaway.max_retries,
            retry_backoff_base=settings.hostaway.retry_backoff_base,
            transport=transport,
        )

    @staticmethod
    def _extract_result(response: Any, endpoint: str) -> list[dict[str, Any]]:
        """Unwrap the ``{"status": "success", "result": [...]}`` envelope."""
        if not isinstance(response, dict):
            raise FetchError(f"Unexpected response shape from {endpoint}")
        status = response.get("status")
        if status is not None and status != "success":
            raise FetchError(f"{endpoint} returned status {status!r}")
        result = response.get("result") or []
        if not isinstance(result, list):
            raise FetchError(f"Unexpected result payload from {endpoint}")
        return result

    async def list_listings(self, offset: int = 0, limit: int = 1000) -> list[dict[str, Any]]:
        """Fetch one page of listings.

        Args:
            offset: Number of listings to skip
            limit: Page size

        Returns:
            Raw listing dictionaries
        """
        params = {"limit": limit, "offset": offset}
        response = await self._make_request("GET", "/listings", params=params)
        listings = self._extract_result(response, "/listings")
        logger.debug(
            "Fetched listings page",
            offset=offset,
            limit=limit,
            count=len(listings),
        )
        return listings

    async def list_reservations(
        self,
        filters: Optional[dict[str, Any]] = None,
        offset: int = 0,
        limit: int = 100,
    ) -> list[dict[str, Any]]:
        """Fetch one page of reservations.

        Args:
            filters: Query filters, e.g. ``arrivalStartDate``/``arrivalEndDate``
                or ``departureStartDate``/``departureEndDate``
            offset: Number of reservations to skip
            limit: Page size

        Returns:
            Raw reservation dictionaries
        """
        params: dict[str, Any] = dict(filters or {})
        params["limit"] = limit
        params["offset"] = offset
        response = await self._make_request("GET", "/reservations", params=params)
        reservations = self._extract_result(response, "/reservations")
        logger.debug(
            "Fetched reservations page",
            filters=filters,
            offset=offset,
            count=len(reservations),
        )
        return reservations

    async def get_calendar(
        self,
        listing_id: str,
        start_date: date,
        end_date: date,
    ) -> list[dict[str, Any]]:
        """Fetch calendar days for one listing.

        Args:
            listing_id: Listing identifier
            start_date: First day (inclusive)
            end_date: Last day (inclusive)

        Returns:
            Raw calendar day dictionaries
        """
        endpoint = f"/listings/{listing_id}/calendar"
        params = {
            "startDate": start_date.isoformat(),
            "endDate": end_date.isoformat(),
        }
        response = await self._make_request("GET", endpoint, params=params)
        return self._extract_result(response, endpoint)
