"""Tests for the Redis-backed override store."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest
import redis.asyncio as redis

from occupancy_sync.models.occupancy import OccupancyStatus
from occupancy_sync.services.override_store import OverrideStore, OverrideStoreError

KEY = "test:overrides"


@pytest.fixture
def mock_redis():
    """AsyncMock Redis client backed by a plain dict."""
    data: dict[str, str] = {}
    client = AsyncMock()
    client.hgetall.side_effect = lambda key: dict(data)
    client.hget.side_effect = lambda key, field: data.get(field)

    def _hset(key, field, value):
        data[field] = value
        return 1

    def _hdel(key, field):
        return 1 if data.pop(field, None) is not None else 0

    client.hset.side_effect = _hset
    client.hdel.side_effect = _hdel
    client.data = data
    return client


@pytest.fixture
def store(mock_redis):
    return OverrideStore(redis_client=mock_redis, key=KEY)


@pytest.mark.asyncio
async def test_set_and_list(store):
    now = datetime(2024, 6, 15, 8, 0, tzinfo=timezone.utc)
    await store.set_override("100", OccupancyStatus.BLOCKED, "Deep clean", now=now)

    overrides = await store.list_overrides()

    assert len(overrides) == 1
    assert overrides[0].unit_id == "100"
    assert overrides[0].manual_status == OccupancyStatus.BLOCKED
    assert overrides[0].created_at == now


@pytest.mark.asyncio
async def test_update_keeps_created_at(store):
    first = datetime(2024, 6, 14, 8, 0, tzinfo=timezone.utc)
    second = datetime(2024, 6, 15, 8, 0, tzinfo=timezone.utc)
    await store.set_override("100", OccupancyStatus.BLOCKED, "Deep clean", now=first)

    updated = await store.set_override("100", OccupancyStatus.AVAILABLE, "Done", now=second)

    assert updated.created_at == first
    assert updated.updated_at == second
    assert (await store.get_override("100")).manual_status == OccupancyStatus.AVAILABLE


@pytest.mark.asyncio
async def test_clear(store):
    await store.set_override("100", OccupancyStatus.BLOCKED)
    assert await store.clear_override("100") is True
    assert await store.clear_override("100") is False
    assert await store.get_override("100") is None


@pytest.mark.asyncio
async def test_corrupt_entry_skipped(store, mock_redis):
    mock_redis.data["bad"] = "{not json"
    await store.set_override("100", OccupancyStatus.BLOCKED)

    overrides = await store.list_overrides()

    assert [o.unit_id for o in overrides] == ["100"]


@pytest.mark.asyncio
async def test_redis_error_wrapped(store, mock_redis):
    mock_redis.hgetall.side_effect = redis.ConnectionError("refused")
    with pytest.raises(OverrideStoreError):
        await store.list_overrides()


@pytest.mark.asyncio
async def test_close(store, mock_redis):
    await store.close()
    mock_redis.aclose.assert_awaited_once()
