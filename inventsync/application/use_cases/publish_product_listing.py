from dataclasses import dataclass

import structlog

from inventsync.application.interfaces.connection_repository import ConnectionRepository
from inventsync.application.interfaces.listing_repository import ListingRepository
from inventsync.application.interfaces.marketplace_client import MarketplaceClientFactory
from inventsync.application.interfaces.product_repository import ProductRepository
from inventsync.application.workflows.publish_workflow import PublishWorkflow
from inventsync.domain.entities.listing import Listing
from inventsync.domain.entities.publish_result import PublishResult
from inventsync.domain.enums.listing_status import Marketplace
from inventsync.domain.errors import NotFoundError, PreconditionError, ValidationError

logger = structlog.get_logger(__name__)


@dataclass
class PublishProductListingInput:
    product_id: str
    category_id: str
    marketplace: Marketplace = Marketplace.EBAY


@dataclass
class PublishProductListingOutput:
    listing: Listing
    result: PublishResult


class PublishProductListing:
    """
    Use case: publish one product to a connected marketplace and record the attempt.

    Exactly one Listing row is appended per call that reaches the workflow,
    whatever the outcome. Republishing never touches earlier rows.
    """

    def __init__(
        self,
        product_repo: ProductRepository,
        connection_repo: ConnectionRepository,
        listing_repo: ListingRepository,
        client_factory: MarketplaceClientFactory,
    ) -> None:
        self._product_repo = product_repo
        self._connection_repo = connection_repo
        self._listing_repo = listing_repo
        self._client_factory = client_factory

    async def execute(self, input_data: PublishProductListingInput) -> PublishProductListingOutput:
        category_id = (input_data.category_id or "").strip()
        if not category_id:
            raise ValidationError("Category ID is required")

        product = await self._product_repo.get(input_data.product_id)
        if product is None:
            raise NotFoundError("Product", input_data.product_id)

        connection = await self._connection_repo.get(input_data.marketplace)
        if connection is None or not connection.is_connected:
            raise PreconditionError(
                "eBay is not connected. Please connect your eBay account first."
            )

        client = self._client_factory.for_credentials(connection.credentials)
        result = await PublishWorkflow(client).run(product, category_id)

        listing = await self._listing_repo.add(
            Listing.record_attempt(
                product_id=product.id,
                marketplace_connection_id=connection.id,
                result=result,
            )
        )

        logger.info(
            "listing_recorded",
            listing_id=listing.id,
            product_id=product.id,
            status=listing.status.value,
        )
        return PublishProductListingOutput(listing=listing, result=result)
