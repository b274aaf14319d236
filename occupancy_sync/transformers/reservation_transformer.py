"""Transformer for converting Hostaway reservations to Stays."""

from typing import Any, Optional

from pydantic import ValidationError
from structlog import get_logger

from occupancy_sync.engine.stay_filter import TestBookingDetector, is_likely_test_booking
from occupancy_sync.models.hostaway import HostawayReservation
from occupancy_sync.models.occupancy import LifecycleStatusMapper, Stay

logger = get_logger(__name__)


class ReservationTransformer:
    """Transforms Hostaway reservations to Stays."""

    @staticmethod
    def _guest_name(reservation: HostawayReservation) -> str:
        """Guest name, falling back to first and last name."""
        if reservation.guest_name and reservation.guest_name.strip():
            return reservation.guest_name.strip()
        parts = [
            (reservation.guest_first_name or "").strip(),
            (reservation.guest_last_name or "").strip(),
        ]
        return " ".join(part for part in parts if part)

    @staticmethod
    def transform(
        reservation_data: dict[str, Any],
        detector: Optional[TestBookingDetector] = None,
    ) -> Optional[Stay]:
        """Transform a single reservation.

        Args:
            reservation_data: Raw reservation dictionary
            detector: Test-booking detector used to derive ``is_likely_test``

        Returns:
            Stay, or None when the reservation lacks a unit or dates
        """
        try:
            reservation = HostawayReservation.model_validate(reservation_data)
        except ValidationError as e:
            logger.warning(
                "Skipping malformed reservation",
                reservation_id=reservation_data.get("id"),
                error=str(e),
            )
            return None

        if (
            reservation.listing_map_id is None
            or reservation.arrival_date is None
            or reservation.departure_date is None
        ):
            logger.debug(
                "Skipping reservation without unit or dates",
                reservation_id=reservation.id,
            )
            return None

        stay = Stay(
            id=str(reservation.id),
            unit_id=str(reservation.listing_map_id),
            guest_name=ReservationTransformer._guest_name(reservation),
            arrival_date=reservation.arrival_date,
            departure_date=reservation.departure_date,
            lifecycle_status=LifecycleStatusMapper.map_hostaway_status(reservation.status),
            comment=reservation.comment or "",
            guest_note=reservation.guest_note or "",
        )
        stay.is_likely_test = is_likely_test_booking(stay, detector)
        return stay

    @staticmethod
    def transform_batch(
        reservations: list[dict[str, Any]],
        detector: Optional[TestBookingDetector] = None,
    ) -> list[Stay]:
        """Transform reservations, dropping the ones that cannot be placed."""
        stays = []
        for reservation_data in reservations:
            stay = ReservationTransformer.transform(reservation_data, detector)
            if stay is not None:
                stays.append(stay)
        return stays
