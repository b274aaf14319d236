"""Shared async HTTP request handling for upstream API clients."""

import asyncio
from typing import Any, Optional

import httpx
from structlog import get_logger

logger = get_logger(__name__)


class ApiClientError(Exception):
    """Base exception for upstream API client errors."""

    pass


class AuthConfigError(ApiClientError):
    """Raised when a credential is missing or rejected (401/403). Never retried."""

    pass


class FetchError(ApiClientError):
    """Raised when data could not be retrieved from an upstream API."""

    pass


class TransientNetworkError(FetchError):
    """Raised when timeouts, connection errors, 429 or 5xx outlast the retries."""

    pass


class NotFoundError(FetchError):
    """Raised when an upstream resource does not exist."""

    pass


class BaseApiClient:
    """Async JSON client with bounded retries and exponential backoff."""

    service_name = "API"

    def __init__(
        self,
        base_url: str,
        token: str,
        timeout: int = 30,
        max_retries: int = 3,
        retry_backoff_base: float = 2.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the client.

        Args:
            base_url: API base URL without trailing slash
            token: Bearer token
            timeout: Per-request timeout in seconds
            max_retries: Total attempts for retryable failures
            retry_backoff_base: Wait ``base ** attempt`` seconds between attempts
            transport: Optional httpx transport (tests inject a MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self.token = (token or "").strip()
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.retry_backoff_base = retry_backoff_base
        self.transport = transport

    def _get_headers(self) -> dict[str, str]:
        """Get default headers including the bearer token.

        Returns:
            Dictionary of HTTP headers.
        """
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.token}",
            "User-Agent": "UnitOccupancySync/1.0",
        }

    async def _backoff(self, attempt: int) -> float:
        wait_time = self.retry_backoff_base ** attempt
        await asyncio.sleep(wait_time)
        return wait_time

    async def _make_request(
        self,
        method: str,
        endpoint: str,
        data: Optional[dict[str, Any]] = None,
        params: Optional[dict[str, Any]] = None,
    ) -> Any:
        """Make an HTTP request with retry logic.

        Args:
            method: HTTP method (GET, POST, PATCH, DELETE)
            endpoint: API endpoint path (without base URL)
            data: Request body data
            params: Query parameters

        Returns:
            Decoded JSON response, or an empty dict for empty bodies

        Raises:
            AuthConfigError: If the token is missing or rejected
            NotFoundError: If the resource does not exist
            TransientNetworkError: If retryable failures exhaust the retries
            FetchError: For other client errors
        """
        if not self.token:
            raise AuthConfigError(f"{self.service_name} token is not configured")

        url = f"{self.base_url}{endpoint}"
        headers = self._get_headers()

        for attempt in range(self.max_retries):
            is_last = attempt >= self.max_retries - 1
            try:
                async with httpx.AsyncClient(
                    timeout=self.timeout, transport=self.transport
                ) as client:
                    response = await client.request(
                        method=method,
                        url=url,
                        headers=headers,
                        json=data,
                        params=params,
                    )

            except httpx.TimeoutException as e:
                if not is_last:
                    wait_time = self.retry_backoff_base ** attempt
                    logger.warning(
                        f"{self.service_name} request timeout, retrying",
                        endpoint=endpoint,
                        attempt=attempt + 1,
                        max_retries=self.max_retries,
                        wait_seconds=wait_time,
                    )
                    await self._backoff(attempt)
                    continue
                logger.error(
                    f"{self.service_name} request timeout, max retries exceeded",
                    endpoint=endpoint,
                )
                raise TransientNetworkError(f"Request timeout for {endpoint}") from e

            except httpx.RequestError as e:
                if not is_last:
                    wait_time = self.retry_backoff_base ** attempt
                    logger.warning(
                        f"{self.service_name} request error, retrying",
                        endpoint=endpoint,
                        error=str(e),
                        attempt=attempt + 1,
                        max_retries=self.max_retries,
                        wait_seconds=wait_time,
                    )
                    await self._backoff(attempt)
                    continue
                logger.error(
                    f"{self.service_name} request error, max retries exceeded",
                    endpoint=endpoint,
                    error=str(e),
                )
                raise TransientNetworkError(
                    f"Request failed for {endpoint}: {str(e)}"
                ) from e

            status_code = response.status_code

            if status_code in (401, 403):
                logger.error(
                    f"{self.service_name} authentication failed",
                    endpoint=endpoint,
                    status_code=status_code,
                )
                raise AuthConfigError(
                    f"Authentication failed for {endpoint}: HTTP {status_code}"
                )

            if status_code == 404:
                logger.warning(
                    f"{self.service_name} resource not found",
                    endpoint=endpoint,
                    status_code=status_code,
                )
                raise NotFoundError(f"Resource not found: {endpoint}")

            # Rate limiting and server errors are retried
            if status_code == 429 or status_code >= 500:
                if not is_last:
                    wait_time = self.retry_backoff_base ** attempt
                    logger.warning(
                        f"{self.service_name} retryable status, retrying",
                        endpoint=endpoint,
                        status_code=status_code,
                        attempt=attempt + 1,
                        max_retries=self.max_retries,
                        wait_seconds=wait_time,
                    )
                    await self._backoff(attempt)
                    continue
                logger.error(
                    f"{self.service_name} retryable status, max retries exceeded",
                    endpoint=endpoint,
                    status_code=status_code,
                )
                raise TransientNetworkError(
                    f"HTTP {status_code} at {endpoint}: {response.text[:200]}"
                )

            if 400 <= status_code < 500:
                logger.error(
                    f"{self.service_name} client error",
                    endpoint=endpoint,
                    status_code=status_code,
                    response_text=response.text[:200],
                )
                raise FetchError(f"Client error at {endpoint}: {response.text[:200]}")

            logger.debug(
                f"{self.service_name} request successful",
                endpoint=endpoint,
                method=method,
                status_code=status_code,
            )
            if not response.text:
                return {}
            try:
                return response.json()
            except ValueError as e:
                logger.error(
                    f"{self.service_name} returned a non-JSON body",
                    endpoint=endpoint,
                    status_code=status_code,
                    response_text=response.text[:200],
                )
                raise FetchError(f"Invalid JSON from {endpoint}: {str(e)}") from e

        raise TransientNetworkError(f"Failed to complete request to {endpoint}")
