"""Unit catalog: paged listing fetch with region filtering."""

from typing import Optional

from pydantic import BaseModel, Field, field_validator
from structlog import get_logger

from occupancy_sync.clients import HostawayClient
from occupancy_sync.config import settings
from occupancy_sync.models.occupancy import RentalUnit
from occupancy_sync.transformers import ListingTransformer

logger = get_logger(__name__)


def _normalise(values: list[str]) -> list[str]:
    return [v.strip().lower() for v in values if v and v.strip()]


class RegionFilter(BaseModel):
    """Case-insensitive region match over catalog fields.

    A unit matches when its country code equals a configured code, or a
    configured value is a substring of its country, city/address or names.
    An empty filter admits every unit.
    """

    country_codes: list[str] = Field(default_factory=list)
    countries: list[str] = Field(default_factory=list)
    cities: list[str] = Field(default_factory=list)
    name_tokens: list[str] = Field(default_factory=list)

    @field_validator("country_codes", "countries", "cities", "name_tokens")
    @classmethod
    def _lowercase(cls, values: list[str]) -> list[str]:
        return _normalise(values)

    @classmethod
    def from_settings(cls) -> "RegionFilter":
        return cls(
            country_codes=list(settings.region.country_codes),
            countries=list(settings.region.countries),
            cities=list(settings.region.cities),
            name_tokens=list(settings.region.name_tokens),
        )

    def is_empty(self) -> bool:
        return not (self.country_codes or self.countries or self.cities or self.name_tokens)

    def matches(self, unit: RentalUnit) -> bool:
        if self.is_empty():
            return True

        country_code = (unit.country_code or "").lower()
        if country_code and any(code == country_code for code in self.country_codes):
            return True

        country = (unit.country or "").lower()
        if country and any(token in country for token in self.countries):
            return True

        locality = f"{unit.city or ''} {unit.address or ''}".lower()
        if locality.strip() and any(token in locality for token in self.cities):
            return True

        names = f"{unit.display_name} {unit.name}".lower()
        return any(token in names for token in self.name_tokens)


class UnitCatalog:
    """Fetches the full unit inventory from the catalog API."""

    def __init__(self, client: HostawayClient):
        """Initialize the catalog.

        Args:
            client: Hostaway API client
        """
        self.client = client
        self.page_size = settings.hostaway.listings_page_size
        self.max_pages = settings.hostaway.max_pages

    async def fetch_all_units(
        self, region_filter: Optional[RegionFilter] = None
    ) -> list[RentalUnit]:
        """Page through every listing and keep those inside the region.

        Paging stops on a short page or after ``max_pages`` pages.

        Args:
            region_filter: Region filter; None admits every unit

        Returns:
            Uncategorised units in catalog order

        Raises:
            FetchError: If a page cannot be fetched
            AuthConfigError: If the token is missing or rejected
        """
        region_filter = region_filter or RegionFilter()
        units: list[RentalUnit] = []
        total_fetched = 0

        for page in range(self.max_pages):
            offset = page * self.page_size
            listings = await self.client.list_listings(offset=offset, limit=self.page_size)
            total_fetched += len(listings)
            units.extend(ListingTransformer.transform_batch(listings))
            if len(listings) < self.page_size:
                break
        else:
            logger.warning(
                "Listing pagination cap reached",
                max_pages=self.max_pages,
                fetched=total_fetched,
            )

        in_region = [unit for unit in units if region_filter.matches(unit)]
        logger.info(
            "Fetched unit catalog",
            fetched=total_fetched,
            in_region=len(in_region),
        )
        return in_region
