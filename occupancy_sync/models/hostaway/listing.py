"""Pydantic models for Hostaway listing responses."""

from typing import Any, Optional

from pydantic import BaseModel, Field


class HostawayListing(BaseModel):
    """Single listing as returned by GET /listings."""

    id: int
    name: Optional[str] = None  # Public name
    internal_listing_name: Optional[str] = Field(None, alias="internalListingName")
    external_listing_name: Optional[str] = Field(None, alias="externalListingName")
    city: Optional[str] = None
    country: Optional[str] = None
    country_code: Optional[str] = Field(None, alias="countryCode")
    address: Optional[str] = None
    bedrooms_number: Optional[int] = Field(None, alias="bedroomsNumber")
    bedrooms: Optional[int] = None  # Legacy field, some listings only carry this
    person_capacity: Optional[int] = Field(None, alias="personCapacity")

    class Config:
        extra = "allow"
        populate_by_name = True


class ListingsResponse(BaseModel):
    """Envelope for GET /listings."""

    status: Optional[str] = None
    result: list[dict[str, Any]] = Field(default_factory=list)
    count: Optional[int] = None
    limit: Optional[int] = None
    offset: Optional[int] = None

    class Config:
        extra = "allow"
        populate_by_name = True
