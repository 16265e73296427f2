import structlog

from inventsync.application.interfaces.connection_repository import ConnectionRepository
from inventsync.application.interfaces.marketplace_client import (
    CategorySuggestion,
    MarketplaceClientFactory,
)
from inventsync.domain.enums.listing_status import Marketplace
from inventsync.domain.errors import MarketplaceError, PreconditionError, ValidationError

logger = structlog.get_logger(__name__)


class SearchMarketplaceCategories:
    """Use case: suggest marketplace category ids for a free-text query."""

    def __init__(
        self,
        connection_repo: ConnectionRepository,
        client_factory: MarketplaceClientFactory,
    ) -> None:
        self._connection_repo = connection_repo
        self._client_factory = client_factory

    async def execute(
        self, query: str, marketplace: Marketplace = Marketplace.EBAY
    ) -> list[CategorySuggestion]:
        query = query.strip()
        if not query:
            raise ValidationError("Search query is required")

        connection = await self._connection_repo.get(marketplace)
        if connection is None or not connection.is_connected:
            raise PreconditionError(
                "eBay is not connected. Please connect your eBay account first."
            )

        client = self._client_factory.for_credentials(connection.credentials)
        result = await client.search_categories(query)
        if not result.success:
            raise MarketplaceError(result.error or "Category search failed")

        logger.info("categories_searched", query=query, results=len(result.categories))
        return result.categories
