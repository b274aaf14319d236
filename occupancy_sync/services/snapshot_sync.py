"""Three-way create/update/delete sync of rows into a tabular store."""

import time
from typing import Any, Callable, Iterable, Optional, Protocol

from structlog import get_logger

from occupancy_sync.clients import AuthConfigError, FetchError
from occupancy_sync.models.occupancy import SyncResult

logger = get_logger(__name__)

NaturalKeyFn = Callable[[dict[str, Any]], str]


class TableStore(Protocol):
    """Record-level operations the sync needs from a store."""

    async def list_records(self, table_id: str) -> list[dict[str, Any]]: ...

    async def create_record(self, table_id: str, fields: dict[str, Any]) -> dict[str, Any]: ...

    async def update_record(
        self, table_id: str, record_id: str, fields: dict[str, Any]
    ) -> dict[str, Any]: ...

    async def delete_record(self, table_id: str, record_id: str) -> None: ...


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _record_id(record: dict[str, Any]) -> str:
    record_id = record.get("id")
    if not record_id:
        raise FetchError("Stored row has no record id")
    return str(record_id)


def has_changes(existing_fields: dict[str, Any], new_fields: dict[str, Any]) -> bool:
    """True if any field we write differs from the stored text value.

    Fields present only in the store are ignored.
    """
    return any(
        _as_text(existing_fields.get(name)) != _as_text(value)
        for name, value in new_fields.items()
    )


class SnapshotSyncAdapter:
    """Reconciles a batch of rows against one store table by natural key.

    Existing rows without a natural key are never touched. When several
    existing rows share a key, the first is kept and the rest are deleted as
    stale. A key repeated inside the new batch is written once; repeats are
    skipped with a warning and counted as errors. Row-level failures of any
    kind except rejected credentials are counted and never abort the sync.
    """

    def __init__(self, store: TableStore, table_id: str, dry_run: bool = False):
        """Initialize the adapter.

        Args:
            store: Table store (TeableClient in production)
            table_id: Destination table
            dry_run: Compute the plan without writing
        """
        self.store = store
        self.table_id = table_id
        self.dry_run = dry_run
        self.logger = logger.bind(table_id=table_id)

    async def sync(
        self,
        new_records: Iterable[dict[str, Any]],
        natural_key_fn: NaturalKeyFn,
    ) -> SyncResult:
        """Create, update or delete rows so the table mirrors ``new_records``.

        Args:
            new_records: Desired rows as field dictionaries
            natural_key_fn: Extracts the natural key from a field dictionary

        Returns:
            SyncResult with created/updated/unchanged/deleted/errors counts

        Raises:
            FetchError: If the existing rows cannot be listed
        """
        started = time.monotonic()
        result = SyncResult(table_id=self.table_id)

        existing_records = await self.store.list_records(self.table_id)

        existing_by_key: dict[str, dict[str, Any]] = {}
        duplicates: list[dict[str, Any]] = []
        for record in existing_records:
            key = natural_key_fn(record.get("fields") or {})
            if not key:
                continue
            if key in existing_by_key:
                duplicates.append(record)
            else:
                existing_by_key[key] = record

        visited: set[str] = set()
        seen_new: set[str] = set()

        for fields in new_records:
            key = natural_key_fn(fields)
            if not key:
                self.logger.warning("Skipping row without natural key", fields=fields)
                result.errors += 1
                continue
            if key in seen_new:
                self.logger.warning("Skipping duplicate natural key in batch", key=key)
                result.errors += 1
                continue
            seen_new.add(key)

            existing = existing_by_key.get(key)
            if existing is not None:
                visited.add(key)

            try:
                if existing is None:
                    if not self.dry_run:
                        await self.store.create_record(self.table_id, fields)
                    result.created += 1
                elif has_changes(existing.get("fields") or {}, fields):
                    if not self.dry_run:
                        await self.store.update_record(
                            self.table_id, _record_id(existing), fields
                        )
                    result.updated += 1
                else:
                    result.unchanged += 1
            except AuthConfigError:
                raise
            except Exception as e:
                self.logger.error(
                    "Row sync failed",
                    key=key,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                result.errors += 1

        stale = [
            record for key, record in existing_by_key.items() if key not in visited
        ] + duplicates
        for record in stale:
            try:
                if not self.dry_run:
                    await self.store.delete_record(self.table_id, _record_id(record))
                result.deleted += 1
            except AuthConfigError:
                raise
            except Exception as e:
                self.logger.error(
                    "Stale row delete failed",
                    record_id=record.get("id"),
                    error=str(e),
                    error_type=type(e).__name__,
                )
                result.errors += 1

        result.duration_seconds = round(time.monotonic() - started, 3)
        self.logger.info(
            "Table sync complete",
            created=result.created,
            updated=result.updated,
            unchanged=result.unchanged,
            deleted=result.deleted,
            errors=result.errors,
            dry_run=self.dry_run,
        )
        return result


async def sync_table(
    store: TableStore,
    table_id: Optional[str],
    rows: list[dict[str, Any]],
    natural_key_fn: NaturalKeyFn,
    dry_run: bool = False,
) -> Optional[SyncResult]:
    """Sync rows into ``table_id``; None when no table is configured."""
    if not table_id:
        logger.info("No destination table configured, skipping sync")
        return None
    return await SnapshotSyncAdapter(store, table_id, dry_run=dry_run).sync(rows, natural_key_fn)
