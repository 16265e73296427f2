from abc import ABC, abstractmethod

from inventsync.domain.entities.listing import Listing, ListingSummary
from inventsync.domain.enums.listing_status import Marketplace


class ListingRepository(ABC):
    """Port for the append-only listings table."""

    @abstractmethod
    async def add(self, listing: Listing) -> Listing:
        ...

    @abstractmethod
    async def list_for_marketplace(self, marketplace: Marketplace) -> list[ListingSummary]:
        """All listings on the marketplace joined with product columns, newest first."""
        ...

    @abstractmethod
    async def latest_for_product(
        self, product_id: str, marketplace: Marketplace
    ) -> Listing | None:
        ...
