"""API clients package."""

from occupancy_sync.clients.base_client import (
    ApiClientError,
    AuthConfigError,
    BaseApiClient,
    FetchError,
    NotFoundError,
    TransientNetworkError,
)
from occupancy_sync.clients.hostaway_client import HostawayClient
from occupancy_sync.clients.teable_client import TeableClient

__all__ = [
    "BaseApiClient",
    "HostawayClient",
    "TeableClient",
    "ApiClientError",
    "AuthConfigError",
    "FetchError",
    "TransientNetworkError",
    "NotFoundError",
]
