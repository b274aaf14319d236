"""Redis-backed store for manual cleaning overrides."""

from datetime import datetime, timezone
from typing import Optional

import redis.asyncio as redis
from pydantic import ValidationError
from structlog import get_logger

from occupancy_sync.config import settings
from occupancy_sync.models.occupancy import CleaningOverride, OccupancyStatus

logger = get_logger(__name__)


class OverrideStoreError(Exception):
    """Raised when the override store cannot be read or written."""

    pass


class OverrideStore:
    """Persists CleaningOverrides in a Redis hash keyed by unit id.

    Overrides live until explicitly cleared; nothing expires them.
    """

    def __init__(self, redis_client: Optional[redis.Redis] = None, key: Optional[str] = None):
        """Initialize the store.

        Args:
            redis_client: Redis client; built from REDIS_* settings when omitted
            key: Hash key; defaults to REDIS_OVERRIDES_KEY
        """
        self.redis_client = redis_client or redis.Redis(
            host=settings.redis.host,
            port=settings.redis.port,
            db=settings.redis.db,
            password=settings.redis.password,
            ssl=settings.redis.ssl,
            decode_responses=True,
            socket_timeout=settings.redis.socket_timeout,
            socket_connect_timeout=settings.redis.socket_connect_timeout,
        )
        self.key = key or settings.redis.overrides_key

    async def list_overrides(self) -> list[CleaningOverride]:
        """Return every stored override. Corrupt entries are skipped.

        Raises:
            OverrideStoreError: If Redis is unreachable
        """
        try:
            raw = await self.redis_client.hgetall(self.key)
        except redis.RedisError as e:
            raise OverrideStoreError(f"Failed to read overrides: {str(e)}") from e

        overrides = []
        for unit_id, payload in raw.items():
            try:
                overrides.append(CleaningOverride.model_validate_json(payload))
            except ValidationError as e:
                logger.warning(
                    "Skipping corrupt override entry",
                    unit_id=unit_id,
                    error=str(e),
                )
        return overrides

    async def get_override(self, unit_id: str) -> Optional[CleaningOverride]:
        try:
            payload = await self.redis_client.hget(self.key, unit_id)
        except redis.RedisError as e:
            raise OverrideStoreError(f"Failed to read override for {unit_id}: {str(e)}") from e
        if not payload:
            return None
        return CleaningOverride.model_validate_json(payload)

    async def set_override(
        self,
        unit_id: str,
        manual_status: OccupancyStatus,
        reason: str = "",
        now: Optional[datetime] = None,
    ) -> CleaningOverride:
        """Create or update the override for a unit.

        ``created_at`` is kept from an existing override; ``updated_at`` is
        always refreshed.

        Args:
            unit_id: Unit identifier
            manual_status: Status to force
            reason: Free-text reason shown alongside the unit
            now: Timestamp to record; defaults to the current UTC time

        Returns:
            The stored override
        """
        now = now or datetime.now(timezone.utc)
        existing = await self.get_override(unit_id)
        override = CleaningOverride(
            unit_id=unit_id,
            manual_status=manual_status,
            reason=reason,
            created_at=existing.created_at if existing else now,
            updated_at=now,
        )
        try:
            await self.redis_client.hset(self.key, unit_id, override.model_dump_json())
        except redis.RedisError as e:
            raise OverrideStoreError(f"Failed to store override for {unit_id}: {str(e)}") from e

        logger.info(
            "Stored cleaning override",
            unit_id=unit_id,
            manual_status=manual_status.value,
            updated=existing is not None,
        )
        return override

    async def clear_override(self, unit_id: str) -> bool:
        """Remove the override for a unit.

        Returns:
            True if an override existed
        """
        try:
            removed = await self.redis_client.hdel(self.key, unit_id)
        except redis.RedisError as e:
            raise OverrideStoreError(f"Failed to clear override for {unit_id}: {str(e)}") from e
        logger.info("Cleared cleaning override", unit_id=unit_id, existed=bool(removed))
        return bool(removed)

    async def close(self) -> None:
        """Close the Redis connection."""
        try:
            await self.redis_client.aclose()
        except redis.RedisError as e:
            logger.warning("Error closing Redis connection", error=str(e))
