"""Transformer for converting Hostaway calendar days to CalendarDays."""

from datetime import date
from typing import Any, Optional

from pydantic import ValidationError
from structlog import get_logger

from occupancy_sync.models.hostaway import HostawayCalendarDay
from occupancy_sync.models.occupancy import CalendarDay

logger = get_logger(__name__)


class CalendarTransformer:
    """Transforms Hostaway calendar entries to CalendarDays."""

    @staticmethod
    def transform(unit_id: str, day_data: dict[str, Any]) -> CalendarDay:
        """Transform a single calendar entry.

        A day is explicitly blocked when its status is "blocked". Availability
        uses ``isAvailable`` and falls back to the status when absent.

        Args:
            unit_id: Unit the calendar belongs to
            day_data: Raw calendar day dictionary

        Returns:
            CalendarDay
        """
        day = HostawayCalendarDay.model_validate(day_data)
        status = (day.status or "").strip().lower()

        if day.is_available is not None:
            is_available = bool(day.is_available)
        else:
            is_available = status in ("", "available")

        refs = []
        for reservation in day.reservations:
            ref = reservation.get("id") or reservation.get("reservationId")
            if ref is not None:
                refs.append(str(ref))

        return CalendarDay(
            unit_id=unit_id,
            date=day.date,
            explicitly_blocked=status == "blocked",
            blocked_unit_count=max(day.count_blocked_units or 0, 0),
            reservation_refs=refs,
            is_available=is_available,
        )

    @staticmethod
    def find_day(
        unit_id: str,
        days_data: list[dict[str, Any]],
        target: date,
    ) -> Optional[CalendarDay]:
        """Return the entry for ``target``, or None if the calendar lacks it."""
        for day_data in days_data:
            try:
                day = CalendarTransformer.transform(unit_id, day_data)
            except ValidationError as e:
                logger.warning(
                    "Skipping malformed calendar entry",
                    unit_id=unit_id,
                    error=str(e),
                )
                continue
            if day.date == target:
                return day
        return None
