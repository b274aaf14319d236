"""Data transformation package."""

from occupancy_sync.transformers.calendar_transformer import CalendarTransformer
from occupancy_sync.transformers.listing_transformer import ListingTransformer
from occupancy_sync.transformers.reservation_transformer import ReservationTransformer
from occupancy_sync.transformers.snapshot_transformer import SnapshotTransformer

__all__ = [
    "ListingTransformer",
    "ReservationTransformer",
    "CalendarTransformer",
    "SnapshotTransformer",
]
