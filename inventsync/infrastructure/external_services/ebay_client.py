"""HTTP client for the eBay Sell Inventory, Account and Taxonomy APIs."""
from typing import Any
from urllib.parse import quote

import httpx
import structlog

from inventsync.application.interfaces.marketplace_client import (
    BusinessPolicies,
    CallResult,
    CategorySearchResult,
    CategorySuggestion,
    InventoryItemRequest,
    MarketplaceClient,
    MarketplaceClientFactory,
    OfferRequest,
    OfferResult,
    PublishOfferResult,
)
from inventsync.config import settings
from inventsync.domain.entities.marketplace_connection import MarketplaceCredentials

logger = structlog.get_logger(__name__)

EBAY_SANDBOX_URL = "https://api.sandbox.ebay.com"
EBAY_PRODUCTION_URL = "https://api.ebay.com"

DEFAULT_LOCATION: dict[str, Any] = {
    "location": {
        "address": {
            "addressLine1": "123 Main Street",
            "city": "San Jose",
            "stateOrProvince": "CA",
            "postalCode": "95125",
            "country": "US",
        }
    },
    "locationTypes": ["WAREHOUSE"],
    "name": "Default Warehouse",
    "merchantLocationStatus": "ENABLED",
}

# policy type -> (collection key in the response, id key of each entry)
_POLICY_ENDPOINTS: dict[str, tuple[str, str]] = {
    "fulfillment_policy": ("fulfillmentPolicies", "fulfillmentPolicyId"),
    "payment_policy": ("paymentPolicies", "paymentPolicyId"),
    "return_policy": ("returnPolicies", "returnPolicyId"),
}


class EbayRequestError(Exception):
    """A failed eBay call, carrying the normalized error message."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


def extract_error_message(exc: httpx.HTTPError) -> str:
    """First entry of eBay's ``errors`` array, else the transport's own text."""
    if isinstance(exc, httpx.HTTPStatusError):
        try:
            payload = exc.response.json()
        except ValueError:
            payload = None
        if isinstance(payload, dict):
            errors = payload.get("errors")
            if isinstance(errors, list) and errors and isinstance(errors[0], dict):
                message = errors[0].get("message") or errors[0].get("longMessage")
                if message:
                    return str(message)
        return f"Request failed with status code {exc.response.status_code}"
    return str(exc) or exc.__class__.__name__


class EbayClient(MarketplaceClient):
    """Thin HTTP wrapper around the eBay REST APIs used for listing."""

    def __init__(
        self,
        access_token: str,
        sandbox: bool = True,
        *,
        marketplace_id: str = settings.ebay_marketplace_id,
        currency: str = settings.ebay_currency,
        location_key: str = settings.ebay_location_key,
        listing_description: str = settings.ebay_listing_description,
        item_url_template: str = settings.ebay_item_url_template,
        category_tree_id: str = settings.ebay_category_tree_id,
        timeout: float = settings.ebay_http_timeout,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = EBAY_SANDBOX_URL if sandbox else EBAY_PRODUCTION_URL
        self._marketplace_id = marketplace_id
        self._currency = currency
        self._location_key = location_key
        self._listing_description = listing_description
        self._item_url_template = item_url_template
        self._category_tree_id = category_tree_id
        self._timeout = timeout
        self._transport = transport
        self._headers = {
            "Authorization": f"Bearer {access_token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
            "Content-Language": "en-US",
        }

    @property
    def base_url(self) -> str:
        return self._base_url

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Send one request; raise EbayRequestError with the normalized message on failure."""
        async with httpx.AsyncClient(
            base_url=self._base_url,
            headers=self._headers,
            timeout=self._timeout,
            transport=self._transport,
        ) as client:
            try:
                response = await client.request(method, path, params=params, json=json)
                response.raise_for_status()
            except httpx.HTTPStatusError as exc:
                message = extract_error_message(exc)
                logger.error(
                    "ebay_request_failed",
                    method=method,
                    path=path,
                    status_code=exc.response.status_code,
                    error=message,
                )
                raise EbayRequestError(message, exc.response.status_code) from exc
            except httpx.RequestError as exc:
                message = extract_error_message(exc)
                logger.error("ebay_connection_failed", method=method, path=path, error=message)
                raise EbayRequestError(message) from exc

        if not response.content:
            return {}
        try:
            data = response.json()
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}

    # -------------------------------------------------------------------------
    # Account
    # -------------------------------------------------------------------------

    async def verify_token(self) -> bool:
        try:
            await self._request("GET", "/sell/inventory/v1/inventory_item", params={"limit": 1})
        except EbayRequestError:
            return False
        return True

    async def fetch_policies(self) -> BusinessPolicies:
        found: dict[str, str | None] = {}
        for policy_type, (collection_key, id_key) in _POLICY_ENDPOINTS.items():
            found[policy_type] = None
            try:
                data = await self._request(
                    "GET",
                    f"/sell/account/v1/{policy_type}",
                    params={"marketplace_id": self._marketplace_id},
                )
            except EbayRequestError as exc:
                logger.warning("ebay_policy_lookup_failed", policy_type=policy_type, error=str(exc))
                continue
            entries = data.get(collection_key) or []
            if entries and isinstance(entries[0], dict):
                found[policy_type] = entries[0].get(id_key) or None

        return BusinessPolicies(
            fulfillment_policy_id=found["fulfillment_policy"],
            payment_policy_id=found["payment_policy"],
            return_policy_id=found["return_policy"],
        )

    # -------------------------------------------------------------------------
    # Inventory
    # -------------------------------------------------------------------------

    async def ensure_location(self) -> CallResult:
        path = f"/sell/inventory/v1/location/{quote(self._location_key, safe='')}"
        try:
            await self._request("GET", path)
            logger.info("ebay_location_exists", location_key=self._location_key)
            return CallResult(success=True)
        except EbayRequestError:
            pass

        try:
            await self._request("POST", path, json=DEFAULT_LOCATION)
        except EbayRequestError as exc:
            return CallResult(success=False, error=str(exc))

        logger.info("ebay_location_created", location_key=self._location_key)
        return CallResult(success=True)

    async def upsert_inventory_item(self, item: InventoryItemRequest) -> CallResult:
        product: dict[str, Any] = {
            "title": item.title,
            "description": item.description,
            "imageUrls": list(item.image_urls),
        }
        if item.brand:
            product["aspects"] = {"Brand": [item.brand]}

        payload = {
            "availability": {"shipToLocationAvailability": {"quantity": item.quantity}},
            "condition": item.condition.value,
            "product": product,
        }

        try:
            await self._request(
                "PUT",
                f"/sell/inventory/v1/inventory_item/{quote(item.sku, safe='')}",
                json=payload,
            )
        except EbayRequestError as exc:
            return CallResult(success=False, error=str(exc))

        logger.info("ebay_inventory_item_upserted", sku=item.sku)
        return CallResult(success=True)

    async def create_offer(self, offer: OfferRequest) -> OfferResult:
        payload: dict[str, Any] = {
            "sku": offer.sku,
            "marketplaceId": self._marketplace_id,
            "format": "FIXED_PRICE",
            "availableQuantity": 1,
            "categoryId": offer.category_id,
            "listingDescription": self._listing_description,
            "merchantLocationKey": self._location_key,
            "pricingSummary": {
                "price": {"value": f"{offer.price:.2f}", "currency": self._currency},
            },
        }
        listing_policies = offer.policies.as_listing_policies()
        if listing_policies:
            payload["listingPolicies"] = listing_policies

        try:
            data = await self._request("POST", "/sell/inventory/v1/offer", json=payload)
        except EbayRequestError as exc:
            return OfferResult(success=False, error=str(exc))

        offer_id = data.get("offerId")
        if not offer_id:
            return OfferResult(success=False, error="eBay did not return an offer id")

        logger.info("ebay_offer_created", sku=offer.sku, offer_id=offer_id)
        return OfferResult(success=True, offer_id=str(offer_id))

    async def publish_offer(self, offer_id: str) -> PublishOfferResult:
        try:
            data = await self._request(
                "POST", f"/sell/inventory/v1/offer/{quote(offer_id, safe='')}/publish", json={}
            )
        except EbayRequestError as exc:
            return PublishOfferResult(success=False, error=str(exc))

        listing_id = data.get("listingId")
        if not listing_id:
            return PublishOfferResult(success=False, error="eBay did not return a listing id")

        logger.info("ebay_offer_published", offer_id=offer_id, listing_id=listing_id)
        return PublishOfferResult(success=True, listing_id=str(listing_id))

    # -------------------------------------------------------------------------
    # Taxonomy
    # -------------------------------------------------------------------------

    async def search_categories(self, query: str) -> CategorySearchResult:
        try:
            data = await self._request(
                "GET",
                f"/commerce/taxonomy/v1/category_tree/{self._category_tree_id}"
                "/get_category_suggestions",
                params={"q": query[:200]},
            )
        except EbayRequestError as exc:
            return CategorySearchResult(success=False, error=str(exc))

        categories = []
        for suggestion in data.get("categorySuggestions") or []:
            category = suggestion.get("category") or {}
            if category.get("categoryId"):
                categories.append(
                    CategorySuggestion(
                        id=str(category["categoryId"]),
                        name=str(category.get("categoryName") or ""),
                    )
                )
        return CategorySearchResult(success=True, categories=categories)

    def listing_url(self, listing_id: str) -> str:
        return self._item_url_template.format(listing_id=listing_id)


class EbayClientFactory(MarketplaceClientFactory):
    def __init__(self, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._transport = transport

    def for_credentials(self, credentials: MarketplaceCredentials) -> EbayClient:
        return EbayClient(
            credentials.access_token,
            credentials.sandbox,
            transport=self._transport,
        )
