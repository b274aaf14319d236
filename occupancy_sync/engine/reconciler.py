"""Occupancy reconciliation: one authoritative status per unit.

Signals are applied in priority order, highest first:

1. A cleaning override with manual status Blocked.
2. A calendar day that is explicitly blocked or has blocked units.
3. An eligible, non-test stay active today.
4. A calendar day that is unavailable, or references a reservation that is
   not a known excluded stay.
5. Otherwise the unit is Available.

Units whose inputs could not be fetched are flagged degraded. The signals
that were fetched still apply; with none left the unit is Available.
"""

from collections import defaultdict
from datetime import date
from typing import Iterable, Mapping, Optional

from structlog import get_logger

from occupancy_sync.engine.stay_filter import (
    TestBookingDetector,
    is_checking_out_today,
    is_eligible_status,
    is_likely_test_booking,
    qualifies_for_occupancy,
)
from occupancy_sync.models.occupancy import (
    ActiveStaySummary,
    Anomaly,
    AnomalyKind,
    CalendarDay,
    CleaningOverride,
    GuestType,
    OccupancyStatus,
    RentalUnit,
    StatusReason,
    Stay,
    UnitOccupancy,
)

logger = get_logger(__name__)


def _stay_sort_key(stay: Stay) -> tuple[date, str]:
    return (stay.arrival_date, stay.id)


def effective_overrides(
    overrides: Iterable[CleaningOverride],
) -> dict[str, CleaningOverride]:
    """Collapse overrides to one per unit; the latest ``updated_at`` wins."""
    effective: dict[str, CleaningOverride] = {}
    for override in overrides:
        current = effective.get(override.unit_id)
        if current is None or override.updated_at > current.updated_at:
            effective[override.unit_id] = override
    return effective


class OccupancyReconciler:
    """Merges catalog, stay, calendar and override signals into a status."""

    def __init__(self, detector: Optional[TestBookingDetector] = None):
        """Initialize the reconciler.

        Args:
            detector: Test-booking detector; defaults to one built from settings
        """
        self.detector = detector or TestBookingDetector()

    def _is_excluded(self, stay: Stay) -> bool:
        return (
            not is_eligible_status(stay)
            or stay.is_likely_test
            or is_likely_test_booking(stay, self.detector)
        )

    def resolve(
        self,
        unit: RentalUnit,
        stays: Iterable[Stay],
        calendar_day: Optional[CalendarDay],
        override: Optional[CleaningOverride],
        today: date,
        calendar_failed: bool = False,
        reservations_failed: bool = False,
    ) -> UnitOccupancy:
        """Resolve the status of one unit for ``today``.

        Never raises on inconsistent input; inconsistencies are returned as
        anomalies on the result.

        Args:
            unit: The unit being resolved
            stays: Stays referencing this unit (any dates, any status)
            calendar_day: Today's calendar entry, or None if missing
            override: Effective cleaning override, if any
            today: Local calendar date of the cycle
            calendar_failed: Calendar lookup for this unit failed
            reservations_failed: Reservation feed was unavailable this cycle

        Returns:
            UnitOccupancy carrying the status and the rule that decided it
        """
        stays = list(stays)
        anomalies: list[Anomaly] = []
        degraded = calendar_failed or reservations_failed

        checking_out_today = any(
            is_checking_out_today(stay, today) and not self._is_excluded(stay)
            for stay in stays
        )

        def result(
            status: OccupancyStatus,
            reason: StatusReason,
            active_stay: Optional[ActiveStaySummary] = None,
        ) -> UnitOccupancy:
            return UnitOccupancy(
                unit_id=unit.id,
                display_name=unit.display_name,
                category=unit.category,
                status=status,
                reason=reason,
                active_stay=active_stay,
                checking_out_today=checking_out_today,
                degraded=degraded,
                override_reason=override.reason if override else None,
                anomalies=anomalies,
            )

        if override is not None and override.manual_status == OccupancyStatus.BLOCKED:
            return result(OccupancyStatus.BLOCKED, StatusReason.OVERRIDE_BLOCKED)

        if degraded:
            anomalies.append(
                Anomaly(
                    kind=AnomalyKind.PARTIAL_FETCH_FAILURE,
                    unit_id=unit.id,
                    message="Some inputs unavailable, deciding from the rest",
                    details={
                        "calendar_failed": calendar_failed,
                        "reservations_failed": reservations_failed,
                    },
                )
            )

        # A failed calendar lookup leaves no calendar signal, not a missing entry
        if calendar_failed:
            calendar_day = None
        elif calendar_day is None:
            anomalies.append(
                Anomaly(
                    kind=AnomalyKind.MISSING_CALENDAR_ENTRY,
                    unit_id=unit.id,
                    message="No calendar entry for today",
                    details={"date": today.isoformat()},
                )
            )
        elif calendar_day.is_blocked:
            return result(OccupancyStatus.BLOCKED, StatusReason.CALENDAR_BLOCKED)

        qualifying = sorted(
            (s for s in stays if qualifies_for_occupancy(s, today, self.detector)),
            key=_stay_sort_key,
        )
        if qualifying:
            selected = qualifying[0]
            if len(qualifying) > 1:
                anomalies.append(
                    Anomaly(
                        kind=AnomalyKind.OVERLAPPING_STAYS,
                        unit_id=unit.id,
                        message="More than one active stay; earliest arrival selected",
                        details={
                            "selected": selected.id,
                            "reservation_ids": [s.id for s in qualifying],
                        },
                    )
                )
            guest_type = (
                GuestType.CHECKING_IN
                if selected.arrival_date == today
                else GuestType.STAYING
            )
            return result(
                OccupancyStatus.RESERVED,
                StatusReason.ACTIVE_STAY,
                ActiveStaySummary(
                    reservation_id=selected.id,
                    guest_name=selected.guest_name,
                    arrival_date=selected.arrival_date,
                    departure_date=selected.departure_date,
                    guest_type=guest_type,
                ),
            )

        if calendar_day is not None and self._calendar_reserved(calendar_day, stays):
            return result(OccupancyStatus.RESERVED, StatusReason.CALENDAR_RESERVED)

        if degraded:
            return result(OccupancyStatus.AVAILABLE, StatusReason.DEGRADED)
        return result(OccupancyStatus.AVAILABLE, StatusReason.NO_SIGNAL)

    def _calendar_reserved(self, calendar_day: CalendarDay, stays: list[Stay]) -> bool:
        """Calendar-only reservation signal.

        A reference to a stay we know to be cancelled or a test booking does
        not count. Unavailability explained entirely by such stays does not
        count either.
        """
        excluded_ids = {stay.id for stay in stays if self._is_excluded(stay)}
        unexplained_refs = [
            ref for ref in calendar_day.reservation_refs if ref not in excluded_ids
        ]
        if unexplained_refs:
            return True
        if not calendar_day.is_available:
            return not calendar_day.reservation_refs
        return False


def reconcile_all(
    units: Iterable[RentalUnit],
    stays: Iterable[Stay],
    calendar_days: Mapping[str, Optional[CalendarDay]],
    overrides: Iterable[CleaningOverride],
    today: date,
    degraded_unit_ids: Optional[set[str]] = None,
    reservations_failed: bool = False,
    reconciler: Optional[OccupancyReconciler] = None,
) -> list[UnitOccupancy]:
    """Resolve every unit, in catalog order.

    Args:
        units: Classified units
        stays: Every fetched stay; grouped by unit here
        calendar_days: Unit id to today's calendar entry (None or absent when
            the calendar returned no entry for today)
        overrides: Cleaning overrides; the latest per unit applies
        today: Local calendar date of the cycle
        degraded_unit_ids: Units whose calendar lookup failed
        reservations_failed: Reservation feed was unavailable this cycle
        reconciler: Reconciler to use

    Returns:
        One UnitOccupancy per unit
    """
    reconciler = reconciler or OccupancyReconciler()
    degraded_unit_ids = degraded_unit_ids or set()
    override_map = effective_overrides(overrides)

    stays_by_unit: dict[str, list[Stay]] = defaultdict(list)
    for stay in stays:
        stays_by_unit[stay.unit_id].append(stay)

    results = []
    for unit in units:
        occupancy = reconciler.resolve(
            unit,
            stays_by_unit.get(unit.id, []),
            calendar_days.get(unit.id),
            override_map.get(unit.id),
            today,
            calendar_failed=unit.id in degraded_unit_ids,
            reservations_failed=reservations_failed,
        )
        for anomaly in occupancy.anomalies:
            logger.warning(
                "Occupancy anomaly",
                kind=anomaly.kind.value,
                unit_id=anomaly.unit_id,
                anomaly_message=anomaly.message,
            )
        results.append(occupancy)

    return results
