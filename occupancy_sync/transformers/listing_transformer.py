"""Transformer for converting Hostaway listings to RentalUnits."""

from typing import Any

from pydantic import ValidationError
from structlog import get_logger

from occupancy_sync.models.hostaway import HostawayListing
from occupancy_sync.models.occupancy import RentalUnit

logger = get_logger(__name__)


def _clean(value: Any) -> str:
    return str(value).strip() if value is not None else ""


class ListingTransformer:
    """Transforms Hostaway listings to RentalUnits (uncategorised)."""

    @staticmethod
    def transform(listing_data: dict[str, Any]) -> RentalUnit:
        """Transform a single listing.

        The display name is the internal listing name, falling back to the
        public name and finally to the id. Bedroom count prefers
        ``bedroomsNumber`` over the legacy ``bedrooms`` field.

        Args:
            listing_data: Raw listing dictionary

        Returns:
            RentalUnit with category left as Unknown

        Raises:
            ValidationError: If the listing has no usable id
        """
        listing = HostawayListing.model_validate(listing_data)
        unit_id = str(listing.id)
        public_name = _clean(listing.name) or _clean(listing.external_listing_name)
        display_name = _clean(listing.internal_listing_name) or public_name or unit_id

        bedroom_count = listing.bedrooms_number
        if bedroom_count is None:
            bedroom_count = listing.bedrooms

        return RentalUnit(
            id=unit_id,
            display_name=display_name,
            name=public_name,
            city=_clean(listing.city) or None,
            country=_clean(listing.country) or None,
            country_code=_clean(listing.country_code) or None,
            address=_clean(listing.address) or None,
            bedroom_count=bedroom_count,
            guest_capacity=listing.person_capacity,
        )

    @staticmethod
    def transform_batch(listings: list[dict[str, Any]]) -> list[RentalUnit]:
        """Transform a page of listings, skipping malformed entries.

        Args:
            listings: Raw listing dictionaries

        Returns:
            RentalUnits in input order
        """
        units = []
        for listing_data in listings:
            try:
                units.append(ListingTransformer.transform(listing_data))
            except ValidationError as e:
                logger.warning(
                    "Skipping malformed listing",
                    listing_id=listing_data.get("id") if isinstance(listing_data, dict) else None,
                    error=str(e),
                )
        return units
