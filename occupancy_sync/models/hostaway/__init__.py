"""Hostaway API response models."""

from occupancy_sync.models.hostaway.calendar import HostawayCalendarDay
from occupancy_sync.models.hostaway.listing import HostawayListing, ListingsResponse
from occupancy_sync.models.hostaway.reservation import HostawayReservation

__all__ = [
    "HostawayListing",
    "ListingsResponse",
    "HostawayReservation",
    "HostawayCalendarDay",
]
