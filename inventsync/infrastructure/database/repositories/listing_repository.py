from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from inventsync.application.interfaces.listing_repository import ListingRepository
from inventsync.domain.entities.listing import Listing, ListingSummary
from inventsync.domain.entities.publish_result import PublishResult
from inventsync.domain.enums.listing_status import ListingStatus, Marketplace
from inventsync.infrastructure.database.codecs import decode_mapping, encode_json
from inventsync.infrastructure.database.models import (
    ListingModel,
    MarketplaceConnectionModel,
    ProductModel,
)
from inventsync.infrastructure.database.repositories._timestamps import as_utc


def _decode_listing_data(raw: str | None) -> PublishResult | None:
    data = decode_mapping(raw)
    if not data:
        return None
    try:
        return PublishResult.from_dict(data)
    except (TypeError, ValueError):
        return None


def _to_domain(model: ListingModel) -> Listing:
    try:
        status = ListingStatus(model.status)
    except ValueError:
        status = ListingStatus.ERROR

    return Listing(
        id=model.id,
        product_id=model.product_id,
        marketplace_connection_id=model.marketplace_connection_id,
        external_id=model.external_id,
        offer_id=model.offer_id,
        status=status,
        listing_url=model.listing_url,
        listing_data=_decode_listing_data(model.listing_data),
        error_message=model.error_message,
        created_at=as_utc(model.created_at),
        updated_at=as_utc(model.updated_at),
    )


def _to_model(listing: Listing) -> ListingModel:
    return ListingModel(
        id=listing.id,
        product_id=listing.product_id,
        marketplace_connection_id=listing.marketplace_connection_id,
        external_id=listing.external_id,
        offer_id=listing.offer_id,
        status=listing.status.value,
        listing_url=listing.listing_url,
        listing_data=(
            encode_json(listing.listing_data.to_dict()) if listing.listing_data else None
        ),
        error_message=listing.error_message,
        created_at=listing.created_at,
        updated_at=listing.updated_at,
    )


class SqlAlchemyListingRepository(ListingRepository):
    """SQLAlchemy implementation for listing persistence."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, listing: Listing) -> Listing:
        self._session.add(_to_model(listing))
        await self._session.flush()
        return listing

    async def list_for_marketplace(self, marketplace: Marketplace) -> list[ListingSummary]:
        result = await self._session.execute(
            select(ListingModel, ProductModel.sku, ProductModel.title, ProductModel.price)
            .join(ProductModel, ListingModel.product_id == ProductModel.id)
            .join(
                MarketplaceConnectionModel,
                ListingModel.marketplace_connection_id == MarketplaceConnectionModel.id,
            )
            .where(MarketplaceConnectionModel.marketplace == marketplace.value)
            .order_by(ListingModel.created_at.desc())
        )
        return [
            ListingSummary(
                listing=_to_domain(model),
                sku=sku,
                product_title=title,
                price=Decimal(str(price)),
            )
            for model, sku, title, price in result.all()
        ]

    async def latest_for_product(
        self, product_id: str, marketplace: Marketplace
    ) -> Listing | None:
        result = await self._session.execute(
            select(ListingModel)
            .join(
                MarketplaceConnectionModel,
                ListingModel.marketplace_connection_id == MarketplaceConnectionModel.id,
            )
            .where(
                ListingModel.product_id == product_id,
                MarketplaceConnectionModel.marketplace == marketplace.value,
            )
            .order_by(ListingModel.created_at.desc())
            .limit(1)
        )
        model = result.scalars().first()
        return _to_domain(model) if model is not None else None
