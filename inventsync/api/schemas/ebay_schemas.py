from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from inventsync.application.interfaces.marketplace_client import CategorySuggestion
from inventsync.domain.entities.listing import Listing, ListingSummary
from inventsync.domain.entities.marketplace_connection import MarketplaceConnection


class ConnectRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    access_token: str | None = Field(default=None, alias="accessToken")
    sandbox: bool = True


class PublishRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    category_id: str | None = Field(default=None, alias="categoryId")


class ConnectionResponse(BaseModel):
    """Connection as shown to clients. Credentials are never included."""

    id: str
    marketplace: str
    name: str
    status: str
    settings: dict[str, Any]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, connection: MarketplaceConnection) -> "ConnectionResponse":
        return cls(
            id=connection.id,
            marketplace=connection.marketplace.value,
            name=connection.name,
            status=connection.status.value,
            settings=dict(connection.settings),
            created_at=connection.created_at,
            updated_at=connection.updated_at,
        )


class ListingResponse(BaseModel):
    id: str
    product_id: str
    marketplace_connection_id: str
    external_id: str | None = None
    offer_id: str | None = None
    status: str
    listing_url: str | None = None
    listing_data: dict[str, Any] | None = None
    error_message: str | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, listing: Listing) -> "ListingResponse":
        return cls(
            id=listing.id,
            product_id=listing.product_id,
            marketplace_connection_id=listing.marketplace_connection_id,
            external_id=listing.external_id,
            offer_id=listing.offer_id,
            status=listing.status.value,
            listing_url=listing.listing_url,
            listing_data=listing.listing_data.to_dict() if listing.listing_data else None,
            error_message=listing.error_message,
            created_at=listing.created_at,
            updated_at=listing.updated_at,
        )


class ListingSummaryResponse(ListingResponse):
    sku: str
    product_title: str
    price: float

    @classmethod
    def from_summary(cls, summary: ListingSummary) -> "ListingSummaryResponse":
        base = ListingResponse.from_entity(summary.listing)
        return cls(
            **base.model_dump(),
            sku=summary.sku,
            product_title=summary.product_title,
            price=float(summary.price),
        )


class PublishedListingResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    listing_id: str | None = Field(default=None, alias="listingId")
    offer_id: str | None = Field(default=None, alias="offerId")
    listing_url: str | None = Field(default=None, alias="listingUrl")


class CategoryResponse(BaseModel):
    id: str
    name: str

    @classmethod
    def from_suggestion(cls, suggestion: CategorySuggestion) -> "CategoryResponse":
        return cls(id=suggestion.id, name=suggestion.name)
