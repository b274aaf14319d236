from collections import defaultdict
from datetime import date, datetime, timezone
from typing import Any

import pytest

from occupancy_sync.clients import FetchError
from occupancy_sync.models.occupancy import (
    CalendarDay,
    Category,
    CleaningOverride,
    LifecycleStatus,
    OccupancyStatus,
    RentalUnit,
    Stay,
)

TODAY = date(2024, 6, 15)


class FakeTableStore:
    """In-memory table store with the TeableClient record interface."""

    def __init__(self):
        self.tables: dict[str, list[dict[str, Any]]] = defaultdict(list)
        self.calls: list[tuple[str, str]] = []
        self.fail_record_ids: set[str] = set()
        self.fail_create_keys: set[str] = set()
        self.fail_list = False
        self._next_id = 0

    def seed(self, table_id: str, fields: dict[str, Any]) -> str:
        self._next_id += 1
        record_id = f"rec{self._next_id}"
        self.tables[table_id].append({"id": record_id, "fields": dict(fields)})
        return record_id

    def rows(self, table_id: str) -> list[dict[str, Any]]:
        return [record["fields"] for record in self.tables[table_id]]

    async def list_records(self, table_id: str) -> list[dict[str, Any]]:
        self.calls.append(("list", table_id))
        if self.fail_list:
            raise FetchError("store unavailable")
        return [{"id": r.get("id"), "fields": dict(r["fields"])} for r in self.tables[table_id]]

    async def list_latest_records(
        self, table_id: str, order_field: str, take: int
    ) -> list[dict[str, Any]]:
        self.calls.append(("latest", table_id))
        if self.fail_list:
            raise FetchError("store unavailable")
        ordered = sorted(
            self.tables[table_id],
            key=lambda r: str(r["fields"].get(order_field) or ""),
            reverse=True,
        )
        return [{"id": r.get("id"), "fields": dict(r["fields"])} for r in ordered[:take]]

    async def create_record(self, table_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        self.calls.append(("create", table_id))
        if any(value in self.fail_create_keys for value in fields.values()):
            raise FetchError("create rejected")
        record_id = self.seed(table_id, fields)
        return {"id": record_id, "fields": dict(fields)}

    async def update_record(
        self, table_id: str, record_id: str, fields: dict[str, Any]
    ) -> dict[str, Any]:
        self.calls.append(("update", table_id))
        if record_id in self.fail_record_ids:
            raise FetchError("update rejected")
        for record in self.tables[table_id]:
            if record.get("id") == record_id:
                record["fields"].update(fields)
                return record
        raise FetchError(f"no record {record_id}")

    async def delete_record(self, table_id: str, record_id: str) -> None:
        self.calls.append(("delete", table_id))
        if record_id in self.fail_record_ids:
            raise FetchError("delete rejected")
        self.tables[table_id] = [r for r in self.tables[table_id] if r.get("id") != record_id]

    def count(self, operation: str) -> int:
        return sum(1 for op, _ in self.calls if op == operation)


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def fake_store():
    return FakeTableStore()


@pytest.fixture
def make_unit():
    """Factory for RentalUnits."""

    def _make(unit_id: str = "100", **overrides) -> RentalUnit:
        data = {
            "id": unit_id,
            "display_name": f"Unit {unit_id}",
            "name": "",
            "category": Category.ONE_BR,
            "city": "Dubai",
            "country": "United Arab Emirates",
            "country_code": "AE",
        }
        data.update(overrides)
        return RentalUnit(**data)

    return _make


@pytest.fixture
def make_stay():
    """Factory for Stays against unit 100, active on TODAY by default."""

    def _make(stay_id: str = "r1", **overrides) -> Stay:
        data = {
            "id": stay_id,
            "unit_id": "100",
            "guest_name": "John Smith",
            "arrival_date": date(2024, 6, 14),
            "departure_date": date(2024, 6, 17),
            "lifecycle_status": LifecycleStatus.NEW,
        }
        data.update(overrides)
        return Stay(**data)

    return _make


@pytest.fixture
def make_calendar_day():
    def _make(unit_id: str = "100", **overrides) -> CalendarDay:
        data = {"unit_id": unit_id, "date": TODAY}
        data.update(overrides)
        return CalendarDay(**data)

    return _make


@pytest.fixture
def make_override():
    def _make(
        unit_id: str = "100",
        manual_status: OccupancyStatus = OccupancyStatus.BLOCKED,
        updated_at: datetime = datetime(2024, 6, 15, 8, 0, tzinfo=timezone.utc),
        **overrides,
    ) -> CleaningOverride:
        data = {
            "unit_id": unit_id,
            "manual_status": manual_status,
            "reason": "Deep clean",
            "created_at": datetime(2024, 6, 14, 8, 0, tzinfo=timezone.utc),
            "updated_at": updated_at,
        }
        data.update(overrides)
        return CleaningOverride(**data)

    return _make


@pytest.fixture
def hostaway_listing():
    """Raw Hostaway listing payload."""
    return {
        "id": 288688,
        "name": "Luxury 2BR with Marina View",
        "internalListingName": "1F-12 (2B)",
        "city": "Dubai",
        "country": "United Arab Emirates",
        "countryCode": "AE",
        "address": "Dubai Marina, Dubai",
        "bedroomsNumber": 2,
        "personCapacity": 5,
        "basePrice": 850,
    }


@pytest.fixture
def hostaway_reservation():
    """Raw Hostaway reservation payload."""
    return {
        "id": 5551,
        "listingMapId": 288688,
        "guestName": "Amelia Clarke",
        "arrivalDate": "2024-06-14",
        "departureDate": "2024-06-17",
        "status": "new",
        "comment": None,
        "guestNote": "Late arrival around 11pm",
        "totalPrice": 2550,
    }
