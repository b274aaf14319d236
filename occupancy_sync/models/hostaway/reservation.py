"""Pydantic models for Hostaway reservation responses."""

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field


class HostawayReservation(BaseModel):
    """Reservation as returned by GET /reservations.

    Only the fields needed for occupancy are modelled; the rest is kept
    through ``extra = "allow"``.
    """

    id: int
    listing_map_id: Optional[int] = Field(None, alias="listingMapId")
    guest_name: Optional[str] = Field(None, alias="guestName")
    guest_first_name: Optional[str] = Field(None, alias="guestFirstName")
    guest_last_name: Optional[str] = Field(None, alias="guestLastName")
    arrival_date: Optional[date] = Field(None, alias="arrivalDate")
    departure_date: Optional[date] = Field(None, alias="departureDate")
    status: Optional[str] = None
    comment: Optional[str] = None
    guest_note: Optional[str] = Field(None, alias="guestNote")

    class Config:
        extra = "allow"
        populate_by_name = True
