"""Transformer for converting snapshots to tabular store rows.

Store fields are text, so every value is rendered as a string.
"""

from datetime import datetime
from typing import Any

from occupancy_sync.models.occupancy import (
    CategorySnapshot,
    OccupancySnapshot,
    UnitOccupancy,
)

# Natural keys
UNIT_KEY_FIELD = "Apartment Name"
CATEGORY_KEY_FIELD = "Category"
SUMMARY_TIME_FIELD = "Date and Time"

PORTFOLIO_ROW_KEY = "Total"
HOUR_BUCKET_FORMAT = "%Y-%m-%d %H"


def _flag(value: bool) -> str:
    return "Yes" if value else "No"


class SnapshotTransformer:
    """Builds store rows from an OccupancySnapshot."""

    @staticmethod
    def unit_row(unit: UnitOccupancy) -> dict[str, str]:
        """One row per unit, keyed by apartment name."""
        stay = unit.active_stay
        return {
            UNIT_KEY_FIELD: unit.display_name,
            "Listing ID": unit.unit_id,
            "Category": unit.category.value,
            "Status": unit.status.value,
            "Reason": unit.reason.value,
            "Guest Name": stay.guest_name if stay else "",
            "Guest Type": stay.guest_type.value if stay else "",
            "Reservation ID": stay.reservation_id if stay else "",
            "Checking Out Today": _flag(unit.checking_out_today),
            "Degraded": _flag(unit.degraded),
        }

    @staticmethod
    def category_row(snapshot: CategorySnapshot) -> dict[str, str]:
        """One row per category; the portfolio row uses the key "Total"."""
        return {
            CATEGORY_KEY_FIELD: snapshot.category.value if snapshot.category else PORTFOLIO_ROW_KEY,
            "Available": str(snapshot.available),
            "Reserved": str(snapshot.reserved),
            "Blocked": str(snapshot.blocked),
            "Total": str(snapshot.total),
            "Occupancy Rate": str(snapshot.occupancy_rate),
        }

    @staticmethod
    def unit_rows(snapshot: OccupancySnapshot) -> list[dict[str, str]]:
        return [SnapshotTransformer.unit_row(unit) for unit in snapshot.per_unit]

    @staticmethod
    def category_rows(snapshot: OccupancySnapshot) -> list[dict[str, str]]:
        rows = [SnapshotTransformer.category_row(c) for c in snapshot.per_category]
        rows.append(
            SnapshotTransformer.category_row(
                CategorySnapshot(
                    available=snapshot.available,
                    reserved=snapshot.reserved,
                    blocked=snapshot.blocked,
                    total=snapshot.total_units,
                    occupancy_rate=snapshot.occupancy_rate,
                )
            )
        )
        return rows

    @staticmethod
    def summary_row(snapshot: OccupancySnapshot, local_now: datetime) -> dict[str, Any]:
        """Hourly portfolio summary: available units per category plus totals.

        Args:
            snapshot: Reconciled snapshot
            local_now: Current time in the portfolio's timezone

        Returns:
            Row fields
        """
        row: dict[str, Any] = {SUMMARY_TIME_FIELD: local_now.strftime("%Y-%m-%d %H:%M")}
        for category in snapshot.per_category:
            if category.category is not None:
                row[category.category.value] = str(category.available)
        row.update(
            {
                "Available": str(snapshot.available),
                "Reserved": str(snapshot.reserved),
                "Blocked": str(snapshot.blocked),
                "Occupancy Rate": str(snapshot.occupancy_rate),
            }
        )
        return row

    @staticmethod
    def unit_key(fields: dict[str, Any]) -> str:
        return str(fields.get(UNIT_KEY_FIELD) or "").strip()

    @staticmethod
    def category_key(fields: dict[str, Any]) -> str:
        return str(fields.get(CATEGORY_KEY_FIELD) or "").strip()
