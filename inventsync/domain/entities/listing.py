from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4

from inventsync.domain.entities.publish_result import PublishResult
from inventsync.domain.enums.listing_status import ListingStatus


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Listing:
    """
    One publish attempt of a product on a marketplace connection.

    Rows are append-only: republishing inserts a new Listing, and the most
    recent one is the product's current status.
    """

    id: str = field(default_factory=lambda: str(uuid4()))
    product_id: str = ""
    marketplace_connection_id: str = ""
    external_id: str | None = None
    offer_id: str | None = None
    status: ListingStatus = ListingStatus.DRAFT
    listing_url: str | None = None
    listing_data: PublishResult | None = None
    error_message: str | None = None

    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    @classmethod
    def record_attempt(
        cls,
        *,
        product_id: str,
        marketplace_connection_id: str,
        result: PublishResult,
    ) -> "Listing":
        return cls(
            product_id=product_id,
            marketplace_connection_id=marketplace_connection_id,
            external_id=result.listing_id,
            offer_id=result.offer_id,
            status=ListingStatus.ACTIVE if result.success else ListingStatus.ERROR,
            listing_url=result.listing_url,
            listing_data=result,
            error_message=None if result.success else result.error,
        )


@dataclass
class ListingSummary:
    """A listing joined with the product columns the dashboards show."""

    listing: Listing
    sku: str
    product_title: str
    price: Decimal
