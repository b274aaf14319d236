"""Teable API client for record-level table operations."""

import json
from typing import Any, Optional

import httpx
from structlog import get_logger

from occupancy_sync.clients.base_client import BaseApiClient
from occupancy_sync.config import settings

logger = get_logger(__name__)


class TeableClient(BaseApiClient):
    """Client for Teable table record endpoints."""

    service_name = "Teable API"

    def __init__(
        self,
        base_url: Optional[str] = None,
        bearer_token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the Teable client with settings.

        Args:
            base_url: Override for TEABLE_BASE_URL
            bearer_token: Override for TEABLE_BEARER_TOKEN
            transport: Optional httpx transport for tests
        """
        super().__init__(
            base_url=base_url or settings.teable.base_url,
            token=bearer_token if bearer_token is not None else settings.teable.bearer_token,
            timeout=settings.teable.request_timeout,
            max_retries=settings.teable.max_retries,
            retry_backoff_base=settings.teable.retry_backoff_base,
            transport=transport,
        )
        self.page_size = settings.teable.page_size
        self.max_pages = settings.teable.max_pages

    async def list_records(self, table_id: str) -> list[dict[str, Any]]:
        """Fetch every record of a table, paging with take/skip.

        Stops on a short page or after ``max_pages`` pages.

        Args:
            table_id: Teable table identifier

        Returns:
            Records as ``{"id": ..., "fields": {...}}`` dictionaries
        """
        endpoint = f"/table/{table_id}/record"
        records: list[dict[str, Any]] = []

        for page in range(self.max_pages):
            params = {
                "take": self.page_size,
                "skip": page * self.page_size,
                "fieldKeyType": "name",
            }
            response = await self._make_request("GET", endpoint, params=params)
            page_records = response.get("records", []) if isinstance(response, dict) else []
            records.extend(page_records)
            if len(page_records) < self.page_size:
                break
        else:
            logger.warning(
                "Teable pagination cap reached",
                table_id=table_id,
                max_pages=self.max_pages,
                record_count=len(records),
            )

        logger.debug("Fetched Teable records", table_id=table_id, record_count=len(records))
        return records

    async def list_latest_records(
        self, table_id: str, order_field: str, take: int
    ) -> list[dict[str, Any]]:
        """Fetch the first ``take`` records sorted by ``order_field`` descending.

        Args:
            table_id: Teable table identifier
            order_field: Field to sort on
            take: Number of records to read

        Returns:
            Records as ``{"id": ..., "fields": {...}}`` dictionaries
        """
        params = {
            "take": take,
            "fieldKeyType": "name",
            "orderBy": json.dumps([{"fieldId": order_field, "order": "desc"}]),
        }
        response = await self._make_request("GET", f"/table/{table_id}/record", params=params)
        return response.get("records", []) if isinstance(response, dict) else []

    async def create_record(self, table_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        """Create one record.

        Args:
            table_id: Teable table identifier
            fields: Field name to value mapping

        Returns:
            The created record
        """
        response = await self._make_request(
            "POST",
            f"/table/{table_id}/record",
            data={"fieldKeyType": "name", "records": [{"fields": fields}]},
        )
        created = response.get("records") if isinstance(response, dict) else None
        return created[0] if created else response

    async def update_record(
        self, table_id: str, record_id: str, fields: dict[str, Any]
    ) -> dict[str, Any]:
        """Update fields of one record.

        Args:
            table_id: Teable table identifier
            record_id: Record identifier
            fields: Field name to value mapping

        Returns:
            The updated record
        """
        response = await self._make_request(
            "PATCH",
            f"/table/{table_id}/record",
            data={"fieldKeyType": "name", "records": [{"id": record_id, "fields": fields}]},
        )
        updated = response.get("records") if isinstance(response, dict) else None
        return updated[0] if updated else response

    async def delete_record(self, table_id: str, record_id: str) -> None:
        """Delete one record.

        Args:
            table_id: Teable table identifier
            record_id: Record identifier
        """
        await self._make_request("DELETE", f"/table/{table_id}/record/{record_id}")
