"""
Port for a remote marketplace's selling API.

Every capability returns a result value; transport and remote errors are
reported through ``error`` rather than raised.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal

from inventsync.domain.entities.marketplace_connection import MarketplaceCredentials
from inventsync.domain.enums.product_condition import ProductCondition


@dataclass(frozen=True)
class CallResult:
    success: bool
    error: str | None = None


@dataclass(frozen=True)
class OfferResult(CallResult):
    offer_id: str | None = None


@dataclass(frozen=True)
class PublishOfferResult(CallResult):
    listing_id: str | None = None


@dataclass(frozen=True)
class BusinessPolicies:
    """Seller policy ids; any of them may be missing."""

    fulfillment_policy_id: str | None = None
    payment_policy_id: str | None = None
    return_policy_id: str | None = None

    def as_listing_policies(self) -> dict[str, str]:
        policies = {
            "fulfillmentPolicyId": self.fulfillment_policy_id,
            "paymentPolicyId": self.payment_policy_id,
            "returnPolicyId": self.return_policy_id,
        }
        return {key: value for key, value in policies.items() if value}


@dataclass(frozen=True)
class InventoryItemRequest:
    sku: str
    title: str
    description: str
    quantity: int
    condition: ProductCondition
    image_urls: list[str]
    brand: str | None = None


@dataclass(frozen=True)
class OfferRequest:
    sku: str
    price: Decimal
    category_id: str
    policies: BusinessPolicies = field(default_factory=BusinessPolicies)


@dataclass(frozen=True)
class CategorySuggestion:
    id: str
    name: str


@dataclass(frozen=True)
class CategorySearchResult(CallResult):
    categories: list[CategorySuggestion] = field(default_factory=list)


class MarketplaceClient(ABC):
    @abstractmethod
    async def verify_token(self) -> bool:
        ...

    @abstractmethod
    async def ensure_location(self) -> CallResult:
        """Idempotent: look the location up, create it only when absent."""
        ...

    @abstractmethod
    async def upsert_inventory_item(self, item: InventoryItemRequest) -> CallResult:
        ...

    @abstractmethod
    async def fetch_policies(self) -> BusinessPolicies:
        """Best effort; failures produce empty ids."""
        ...

    @abstractmethod
    async def create_offer(self, offer: OfferRequest) -> OfferResult:
        ...

    @abstractmethod
    async def publish_offer(self, offer_id: str) -> PublishOfferResult:
        ...

    @abstractmethod
    async def search_categories(self, query: str) -> CategorySearchResult:
        ...

    @abstractmethod
    def listing_url(self, listing_id: str) -> str:
        """Canonical public item page for a published listing."""
        ...


class MarketplaceClientFactory(ABC):
    """Builds a client bound to one set of stored credentials."""

    @abstractmethod
    def for_credentials(self, credentials: MarketplaceCredentials) -> MarketplaceClient:
        ...
