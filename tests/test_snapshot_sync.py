"""Tests for the three-way snapshot sync against an in-memory store."""

import pytest

from occupancy_sync.clients import AuthConfigError, FetchError
from occupancy_sync.services.snapshot_sync import SnapshotSyncAdapter, has_changes, sync_table
from occupancy_sync.transformers import SnapshotTransformer

TABLE = "tblUnits"


def row(name, status):
    return {"Apartment Name": name, "Status": status}


@pytest.fixture
def adapter(fake_store):
    return SnapshotSyncAdapter(fake_store, TABLE)


@pytest.mark.asyncio
async def test_create_update_delete_then_idempotent(fake_store, adapter):
    """{A, B} -> {A changed, C}: one create, one update, one delete."""
    fake_store.seed(TABLE, row("A", "Available"))
    fake_store.seed(TABLE, row("B", "Available"))
    new_rows = [row("A", "Reserved"), row("C", "Blocked")]

    first = await adapter.sync(new_rows, SnapshotTransformer.unit_key)

    assert (first.created, first.updated, first.unchanged, first.deleted, first.errors) == (
        1, 1, 0, 1, 0,
    )
    assert sorted(r["Apartment Name"] for r in fake_store.rows(TABLE)) == ["A", "C"]

    second = await adapter.sync(new_rows, SnapshotTransformer.unit_key)

    assert (second.created, second.updated, second.unchanged, second.deleted, second.errors) == (
        0, 0, 2, 0, 0,
    )


@pytest.mark.asyncio
async def test_rows_without_key_are_untouched(fake_store, adapter):
    fake_store.seed(TABLE, {"Status": "Available"})
    result = await adapter.sync([row("A", "Reserved")], SnapshotTransformer.unit_key)
    assert result.deleted == 0
    assert len(fake_store.rows(TABLE)) == 2


@pytest.mark.asyncio
async def test_duplicate_existing_rows_are_removed(fake_store, adapter):
    fake_store.seed(TABLE, row("A", "Reserved"))
    fake_store.seed(TABLE, row("A", "Available"))
    result = await adapter.sync([row("A", "Reserved")], SnapshotTransformer.unit_key)
    assert (result.unchanged, result.deleted) == (1, 1)
    assert fake_store.rows(TABLE) == [row("A", "Reserved")]


@pytest.mark.asyncio
async def test_duplicate_key_in_batch_written_once(fake_store, adapter):
    result = await adapter.sync(
        [row("A", "Reserved"), row("A", "Available")], SnapshotTransformer.unit_key
    )
    assert result.created == 1
    assert result.errors == 1
    assert fake_store.rows(TABLE) == [row("A", "Reserved")]


@pytest.mark.asyncio
async def test_row_failure_is_counted_not_fatal(fake_store, adapter):
    failing_id = fake_store.seed(TABLE, row("A", "Available"))
    fake_store.seed(TABLE, row("B", "Available"))
    fake_store.fail_record_ids.add(failing_id)

    result = await adapter.sync(
        [row("A", "Reserved"), row("B", "Reserved"), row("C", "Available")],
        SnapshotTransformer.unit_key,
    )

    assert result.errors == 1
    assert result.updated == 1
    assert result.created == 1
    assert result.deleted == 0


@pytest.mark.asyncio
async def test_failed_update_keeps_row(fake_store, adapter):
    failing_id = fake_store.seed(TABLE, row("A", "Available"))
    fake_store.fail_record_ids.add(failing_id)
    await adapter.sync([row("A", "Reserved")], SnapshotTransformer.unit_key)
    assert fake_store.count("delete") == 0


@pytest.mark.asyncio
async def test_unexpected_row_error_does_not_stop_sync(fake_store, adapter):
    fake_store.seed(TABLE, row("Old", "Available"))
    create_record = fake_store.create_record

    async def _create(table_id, fields):
        if fields["Apartment Name"] == "A":
            raise ValueError("Expecting value: line 1 column 1")
        return await create_record(table_id, fields)

    fake_store.create_record = _create

    result = await adapter.sync([row("A", "Reserved"), row("B", "Reserved")], SnapshotTransformer.unit_key)

    assert (result.created, result.deleted, result.errors) == (1, 1, 1)
    assert [r["Apartment Name"] for r in fake_store.rows(TABLE)] == ["B"]


@pytest.mark.asyncio
async def test_stored_row_without_id_is_counted(fake_store, adapter):
    fake_store.seed(TABLE, row("A", "Available"))
    fake_store.seed(TABLE, row("Old", "Available"))
    fake_store.seed(TABLE, row("B", "Available"))
    for record in fake_store.tables[TABLE][:2]:
        del record["id"]

    result = await adapter.sync([row("A", "Reserved"), row("B", "Reserved")], SnapshotTransformer.unit_key)

    # A cannot be updated and Old cannot be deleted; B still goes through
    assert (result.updated, result.deleted, result.errors) == (1, 0, 2)
    assert fake_store.rows(TABLE)[2] == row("B", "Reserved")


@pytest.mark.asyncio
async def test_auth_error_on_row_aborts_sync(fake_store, adapter):
    async def _create(table_id, fields):
        raise AuthConfigError("401")

    fake_store.create_record = _create

    with pytest.raises(AuthConfigError):
        await adapter.sync([row("A", "Reserved")], SnapshotTransformer.unit_key)


@pytest.mark.asyncio
async def test_list_failure_propagates(fake_store, adapter):
    fake_store.fail_list = True
    with pytest.raises(FetchError):
        await adapter.sync([row("A", "Reserved")], SnapshotTransformer.unit_key)


@pytest.mark.asyncio
async def test_dry_run_counts_without_writing(fake_store):
    fake_store.seed(TABLE, row("A", "Available"))
    fake_store.seed(TABLE, row("B", "Available"))
    adapter = SnapshotSyncAdapter(fake_store, TABLE, dry_run=True)

    result = await adapter.sync([row("A", "Reserved"), row("C", "Blocked")], SnapshotTransformer.unit_key)

    assert (result.created, result.updated, result.deleted) == (1, 1, 1)
    assert fake_store.count("create") + fake_store.count("update") + fake_store.count("delete") == 0


@pytest.mark.asyncio
async def test_sync_table_without_table_is_skipped(fake_store):
    assert await sync_table(fake_store, "", [row("A", "Reserved")], SnapshotTransformer.unit_key) is None
    assert fake_store.calls == []


class TestHasChanges:
    def test_text_comparison(self):
        assert not has_changes({"Available": 3}, {"Available": "3"})

    def test_store_only_fields_ignored(self):
        assert not has_changes({"Status": "Reserved", "Notes": "x"}, {"Status": "Reserved"})

    def test_missing_field_is_change(self):
        assert has_changes({}, {"Status": "Reserved"})

    def test_none_equals_empty(self):
        assert not has_changes({"Guest Name": None}, {"Guest Name": ""})
