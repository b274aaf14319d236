"""Unit tests for occupancy reconciliation."""

from datetime import date, datetime, timezone

import pytest

from occupancy_sync.engine import OccupancyReconciler, effective_overrides, reconcile_all
from occupancy_sync.models.occupancy import (
    AnomalyKind,
    GuestType,
    LifecycleStatus,
    OccupancyStatus,
    StatusReason,
)


@pytest.fixture
def reconciler():
    return OccupancyReconciler()


class TestPriority:
    """Signals are applied in strict priority order."""

    def test_blocked_override_beats_everything(
        self, reconciler, make_unit, make_stay, make_calendar_day, make_override, today
    ):
        result = reconciler.resolve(
            make_unit(),
            [make_stay()],
            make_calendar_day(is_available=False),
            make_override(),
            today,
        )
        assert result.status == OccupancyStatus.BLOCKED
        assert result.reason == StatusReason.OVERRIDE_BLOCKED
        assert result.override_reason == "Deep clean"

    def test_blocked_override_beats_degraded(self, reconciler, make_unit, make_override, today):
        result = reconciler.resolve(
            make_unit(), [], None, make_override(), today, calendar_failed=True
        )
        assert result.status == OccupancyStatus.BLOCKED

    def test_non_blocked_override_does_not_short_circuit(
        self, reconciler, make_unit, make_stay, make_calendar_day, make_override, today
    ):
        override = make_override(manual_status=OccupancyStatus.AVAILABLE)
        result = reconciler.resolve(
            make_unit(), [make_stay()], make_calendar_day(), override, today
        )
        assert result.status == OccupancyStatus.RESERVED

    def test_calendar_blocked_beats_active_stay(
        self, reconciler, make_unit, make_stay, make_calendar_day, today
    ):
        result = reconciler.resolve(
            make_unit(), [make_stay()], make_calendar_day(explicitly_blocked=True), None, today
        )
        assert result.status == OccupancyStatus.BLOCKED
        assert result.reason == StatusReason.CALENDAR_BLOCKED

    def test_blocked_unit_count_blocks(self, reconciler, make_unit, make_calendar_day, today):
        result = reconciler.resolve(
            make_unit(), [], make_calendar_day(blocked_unit_count=1), None, today
        )
        assert result.status == OccupancyStatus.BLOCKED

    def test_active_stay_reserves(self, reconciler, make_unit, make_stay, make_calendar_day, today):
        result = reconciler.resolve(make_unit(), [make_stay()], make_calendar_day(), None, today)
        assert result.status == OccupancyStatus.RESERVED
        assert result.reason == StatusReason.ACTIVE_STAY
        assert result.active_stay.reservation_id == "r1"
        assert result.active_stay.guest_type == GuestType.STAYING

    def test_arrival_today_is_check_in(
        self, reconciler, make_unit, make_stay, make_calendar_day, today
    ):
        stay = make_stay(arrival_date=today)
        result = reconciler.resolve(make_unit(), [stay], make_calendar_day(), None, today)
        assert result.active_stay.guest_type == GuestType.CHECKING_IN

    def test_calendar_unavailable_reserves(self, reconciler, make_unit, make_calendar_day, today):
        result = reconciler.resolve(
            make_unit(), [], make_calendar_day(is_available=False), None, today
        )
        assert result.status == OccupancyStatus.RESERVED
        assert result.reason == StatusReason.CALENDAR_RESERVED

    def test_calendar_reference_to_unknown_reservation_reserves(
        self, reconciler, make_unit, make_calendar_day, today
    ):
        result = reconciler.resolve(
            make_unit(), [], make_calendar_day(reservation_refs=["999"]), None, today
        )
        assert result.status == OccupancyStatus.RESERVED

    def test_calendar_reference_to_test_booking_is_ignored(
        self, reconciler, make_unit, make_stay, make_calendar_day, today
    ):
        test_stay = make_stay("r9", guest_name="Test Guest")
        day = make_calendar_day(reservation_refs=["r9"], is_available=False)
        result = reconciler.resolve(make_unit(), [test_stay], day, None, today)
        assert result.status == OccupancyStatus.AVAILABLE

    def test_calendar_reference_to_cancelled_stay_is_ignored(
        self, reconciler, make_unit, make_stay, make_calendar_day, today
    ):
        cancelled = make_stay("r9", lifecycle_status=LifecycleStatus.CANCELLED)
        day = make_calendar_day(reservation_refs=["r9"])
        result = reconciler.resolve(make_unit(), [cancelled], day, None, today)
        assert result.status == OccupancyStatus.AVAILABLE

    def test_no_signal_is_available(self, reconciler, make_unit, make_calendar_day, today):
        result = reconciler.resolve(make_unit(), [], make_calendar_day(), None, today)
        assert result.status == OccupancyStatus.AVAILABLE
        assert result.reason == StatusReason.NO_SIGNAL


class TestStays:
    def test_test_booking_does_not_reserve(
        self, reconciler, make_unit, make_stay, make_calendar_day, today
    ):
        result = reconciler.resolve(
            make_unit(), [make_stay(guest_name="")], make_calendar_day(), None, today
        )
        assert result.status == OccupancyStatus.AVAILABLE

    def test_checkout_day_is_not_reserved_but_flagged(
        self, reconciler, make_unit, make_stay, make_calendar_day, today
    ):
        stay = make_stay(arrival_date=date(2024, 6, 12), departure_date=today)
        result = reconciler.resolve(make_unit(), [stay], make_calendar_day(), None, today)
        assert result.status == OccupancyStatus.AVAILABLE
        assert result.checking_out_today is True

    def test_checkout_and_checkin_same_day(
        self, reconciler, make_unit, make_stay, make_calendar_day, today
    ):
        leaving = make_stay("r1", arrival_date=date(2024, 6, 12), departure_date=today)
        arriving = make_stay("r2", arrival_date=today, departure_date=date(2024, 6, 18))
        result = reconciler.resolve(
            make_unit(), [leaving, arriving], make_calendar_day(), None, today
        )
        assert result.status == OccupancyStatus.RESERVED
        assert result.active_stay.reservation_id == "r2"
        assert result.checking_out_today is True
        assert result.anomalies == []

    def test_overlapping_stays_pick_earliest_arrival(
        self, reconciler, make_unit, make_stay, make_calendar_day, today
    ):
        later = make_stay("r1", arrival_date=date(2024, 6, 14))
        earlier = make_stay("r2", arrival_date=date(2024, 6, 13))
        for _ in range(3):
            result = reconciler.resolve(
                make_unit(), [later, earlier], make_calendar_day(), None, today
            )
            assert result.active_stay.reservation_id == "r2"
        kinds = [a.kind for a in result.anomalies]
        assert kinds == [AnomalyKind.OVERLAPPING_STAYS]

    def test_overlap_tie_broken_by_reservation_id(
        self, reconciler, make_unit, make_stay, make_calendar_day, today
    ):
        stays = [make_stay("r7"), make_stay("r3")]
        result = reconciler.resolve(make_unit(), stays, make_calendar_day(), None, today)
        assert result.active_stay.reservation_id == "r3"


class TestDegraded:
    def test_calendar_failure_without_stays_is_available(self, reconciler, make_unit, today):
        result = reconciler.resolve(make_unit(), [], None, None, today, calendar_failed=True)
        assert result.status == OccupancyStatus.AVAILABLE
        assert result.reason == StatusReason.DEGRADED
        assert result.degraded is True
        assert [a.kind for a in result.anomalies] == [AnomalyKind.PARTIAL_FETCH_FAILURE]

    def test_calendar_failure_still_uses_active_stay(
        self, reconciler, make_unit, make_stay, today
    ):
        result = reconciler.resolve(
            make_unit(), [make_stay()], None, None, today, calendar_failed=True
        )
        assert result.status == OccupancyStatus.RESERVED
        assert result.reason == StatusReason.ACTIVE_STAY
        assert result.degraded is True

    def test_calendar_failure_ignores_stale_calendar_day(
        self, reconciler, make_unit, make_calendar_day, today
    ):
        result = reconciler.resolve(
            make_unit(),
            [],
            make_calendar_day(explicitly_blocked=True),
            None,
            today,
            calendar_failed=True,
        )
        assert result.status == OccupancyStatus.AVAILABLE

    def test_reservation_outage_keeps_calendar_block(
        self, reconciler, make_unit, make_calendar_day, today
    ):
        result = reconciler.resolve(
            make_unit(),
            [],
            make_calendar_day(explicitly_blocked=True),
            None,
            today,
            reservations_failed=True,
        )
        assert result.status == OccupancyStatus.BLOCKED
        assert result.reason == StatusReason.CALENDAR_BLOCKED
        assert result.degraded is True

    def test_reservation_outage_keeps_calendar_reservation(
        self, reconciler, make_unit, make_calendar_day, today
    ):
        result = reconciler.resolve(
            make_unit(),
            [],
            make_calendar_day(is_available=False, reservation_refs=["5551"]),
            None,
            today,
            reservations_failed=True,
        )
        assert result.status == OccupancyStatus.RESERVED
        assert result.reason == StatusReason.CALENDAR_RESERVED

    def test_reservation_outage_with_open_calendar_is_available(
        self, reconciler, make_unit, make_calendar_day, today
    ):
        result = reconciler.resolve(
            make_unit(), [], make_calendar_day(), None, today, reservations_failed=True
        )
        assert result.status == OccupancyStatus.AVAILABLE
        assert result.reason == StatusReason.DEGRADED

    def test_missing_calendar_entry_is_anomaly(self, reconciler, make_unit, make_stay, today):
        result = reconciler.resolve(make_unit(), [make_stay()], None, None, today)
        assert result.status == OccupancyStatus.RESERVED
        assert result.degraded is False
        assert [a.kind for a in result.anomalies] == [AnomalyKind.MISSING_CALENDAR_ENTRY]


def test_exactly_one_status_per_unit(make_unit, make_stay, make_calendar_day, make_override, today):
    units = [make_unit(str(i)) for i in range(1, 6)]
    stays = [make_stay("a", unit_id="1"), make_stay("b", unit_id="2", guest_name="Test")]
    calendar = {
        "1": make_calendar_day("1"),
        "2": make_calendar_day("2"),
        "3": make_calendar_day("3", explicitly_blocked=True),
        "4": None,
    }
    results = reconcile_all(
        units,
        stays,
        calendar,
        [make_override("5")],
        today,
        degraded_unit_ids={"4"},
    )
    assert [r.unit_id for r in results] == ["1", "2", "3", "4", "5"]
    assert [r.status for r in results] == [
        OccupancyStatus.RESERVED,
        OccupancyStatus.AVAILABLE,
        OccupancyStatus.BLOCKED,
        OccupancyStatus.AVAILABLE,
        OccupancyStatus.BLOCKED,
    ]
    assert all(isinstance(r.status, OccupancyStatus) for r in results)


def test_latest_override_wins(make_override):
    older = make_override(
        manual_status=OccupancyStatus.BLOCKED,
        updated_at=datetime(2024, 6, 10, tzinfo=timezone.utc),
    )
    newer = make_override(
        manual_status=OccupancyStatus.AVAILABLE,
        updated_at=datetime(2024, 6, 12, tzinfo=timezone.utc),
    )
    assert effective_overrides([newer, older])["100"].manual_status == OccupancyStatus.AVAILABLE
