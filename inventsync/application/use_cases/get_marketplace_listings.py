from inventsync.application.interfaces.listing_repository import ListingRepository
from inventsync.domain.entities.listing import Listing, ListingSummary
from inventsync.domain.enums.listing_status import Marketplace


class GetMarketplaceListings:
    """Use case: read the listing history of one marketplace."""

    def __init__(self, listing_repo: ListingRepository) -> None:
        self._listing_repo = listing_repo

    async def all(self, marketplace: Marketplace = Marketplace.EBAY) -> list[ListingSummary]:
        return await self._listing_repo.list_for_marketplace(marketplace)

    async def current_for_product(
        self, product_id: str, marketplace: Marketplace = Marketplace.EBAY
    ) -> Listing | None:
        """The newest attempt decides the product's current status."""
        return await self._listing_repo.latest_for_product(product_id, marketplace)
