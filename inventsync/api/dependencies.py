"""
FastAPI dependency injection wiring.

Each dependency function returns a fully-constructed object with its
collaborators injected, keeping the route handlers thin. The Database
itself is opened by the application lifespan and read from app state.
"""
from collections.abc import AsyncGenerator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from inventsync.application.interfaces.connection_repository import ConnectionRepository
from inventsync.application.interfaces.listing_repository import ListingRepository
from inventsync.application.interfaces.marketplace_client import MarketplaceClientFactory
from inventsync.application.interfaces.product_repository import ProductRepository
from inventsync.application.use_cases.get_marketplace_listings import GetMarketplaceListings
from inventsync.application.use_cases.marketplace_connection_manager import (
    MarketplaceConnectionManager,
)
from inventsync.application.use_cases.publish_product_listing import PublishProductListing
from inventsync.application.use_cases.search_marketplace_categories import (
    SearchMarketplaceCategories,
)
from inventsync.infrastructure.database.connection import Database
from inventsync.infrastructure.database.repositories.connection_repository import (
    SqlAlchemyConnectionRepository,
)
from inventsync.infrastructure.database.repositories.listing_repository import (
    SqlAlchemyListingRepository,
)
from inventsync.infrastructure.database.repositories.product_repository import (
    SqlAlchemyProductRepository,
)
from inventsync.infrastructure.external_services.ebay_client import EbayClientFactory


# ---- Low-level dependencies ------------------------------------------------

def get_database(request: Request) -> Database:
    return request.app.state.database


async def get_session(
    database: Database = Depends(get_database),
) -> AsyncGenerator[AsyncSession, None]:
    async with database.session() as session:
        yield session


def get_product_repo(session: AsyncSession = Depends(get_session)) -> ProductRepository:
    return SqlAlchemyProductRepository(session)


def get_connection_repo(session: AsyncSession = Depends(get_session)) -> ConnectionRepository:
    return SqlAlchemyConnectionRepository(session)


def get_listing_repo(session: AsyncSession = Depends(get_session)) -> ListingRepository:
    return SqlAlchemyListingRepository(session)


def get_client_factory() -> MarketplaceClientFactory:
    return EbayClientFactory()


# ---- Use-case dependencies -------------------------------------------------

def get_connection_manager(
    connection_repo: ConnectionRepository = Depends(get_connection_repo),
    client_factory: MarketplaceClientFactory = Depends(get_client_factory),
) -> MarketplaceConnectionManager:
    return MarketplaceConnectionManager(connection_repo, client_factory)


def get_publish_use_case(
    product_repo: ProductRepository = Depends(get_product_repo),
    connection_repo: ConnectionRepository = Depends(get_connection_repo),
    listing_repo: ListingRepository = Depends(get_listing_repo),
    client_factory: MarketplaceClientFactory = Depends(get_client_factory),
) -> PublishProductListing:
    return PublishProductListing(product_repo, connection_repo, listing_repo, client_factory)


def get_listings_use_case(
    listing_repo: ListingRepository = Depends(get_listing_repo),
) -> GetMarketplaceListings:
    return GetMarketplaceListings(listing_repo)


def get_category_search_use_case(
    connection_repo: ConnectionRepository = Depends(get_connection_repo),
    client_factory: MarketplaceClientFactory = Depends(get_client_factory),
) -> SearchMarketplaceCategories:
    return SearchMarketplaceCategories(connection_repo, client_factory)
