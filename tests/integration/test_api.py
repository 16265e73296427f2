"""
Integration tests for the API layer.

The first group swaps repositories and use cases for mocks through
dependency_overrides. The end-to-end group runs the real stack against an
in-memory SQLite database, with eBay served by an httpx MockTransport.
"""
from collections.abc import Generator
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from fastapi.testclient import TestClient

from inventsync.api.dependencies import (
    get_client_factory,
    get_connection_manager,
    get_listings_use_case,
    get_product_repo,
    get_publish_use_case,
)
from inventsync.api.errors import status_for
from inventsync.api.main import app, create_app
from inventsync.application.use_cases.publish_product_listing import PublishProductListingOutput
from inventsync.config import settings
from inventsync.domain.entities.listing import Listing, ListingSummary
from inventsync.domain.entities.product import Product
from inventsync.domain.entities.publish_result import PublishResult
from inventsync.domain.enums.publish_state import PublishState
from inventsync.domain.errors import (
    AuthenticationError,
    ConflictError,
    LocationError,
    MarketplaceError,
    PreconditionError,
)
from inventsync.infrastructure.database.connection import Database
from inventsync.infrastructure.external_services.ebay_client import EbayClientFactory


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _make_product(**overrides: Any) -> Product:
    values: dict[str, Any] = {
        "sku": "CAM-001",
        "title": "Sony A6400",
        "price": Decimal("499.99"),
        "quantity": 2,
        "condition": "USED_GOOD",
        "images": ["https://img/1.jpg"],
    }
    values.update(overrides)
    return Product(**values)


@pytest.fixture()
def client() -> Generator[TestClient, None, None]:
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestEnvelope:
    def test_unknown_route_uses_envelope(self, client: TestClient) -> None:
        response = client.get("/api/nothing-here")

        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "Not found"}

    def test_health_reports_unopened_database(self, client: TestClient) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "degraded"
        assert body["database"].startswith("error:")

    def test_location_error_maps_to_bad_gateway(self) -> None:
        assert status_for(LocationError("Failed to create inventory location")) == 502
        assert status_for(MarketplaceError("Bad token")) == 502

    def test_malformed_body_is_400(self, client: TestClient) -> None:
        app.dependency_overrides[get_product_repo] = lambda: MagicMock()

        response = client.post("/api/products", json={"sku": "A", "title": "B", "price": "abc"})

        assert response.status_code == 400
        assert response.json()["success"] is False
        assert "price" in response.json()["error"]


class TestProductRoutes:
    def test_list_products(self, client: TestClient) -> None:
        repo = MagicMock()
        repo.list_all = AsyncMock(return_value=[_make_product()])
        app.dependency_overrides[get_product_repo] = lambda: repo

        response = client.get("/api/products")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"][0]["sku"] == "CAM-001"
        assert body["data"][0]["price"] == 499.99

    def test_get_missing_product_is_404(self, client: TestClient) -> None:
        repo = MagicMock()
        repo.get = AsyncMock(return_value=None)
        app.dependency_overrides[get_product_repo] = lambda: repo

        response = client.get("/api/products/missing")

        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "Product not found"}

    def test_duplicate_sku_is_409(self, client: TestClient) -> None:
        repo = MagicMock()
        repo.create = AsyncMock(side_effect=ConflictError("SKU already exists"))
        app.dependency_overrides[get_product_repo] = lambda: repo

        response = client.post(
            "/api/products", json={"sku": "CAM-001", "title": "Sony", "price": 10}
        )

        assert response.status_code == 409
        assert response.json()["error"] == "SKU already exists"

    def test_update_merges_kept_and_new_images(self, client: TestClient) -> None:
        repo = MagicMock()
        repo.update = AsyncMock(return_value=_make_product())
        app.dependency_overrides[get_product_repo] = lambda: repo

        response = client.put(
            "/api/products/p-1",
            json={
                "title": "Sony A6400",
                "price": 450,
                "keepImages": ["https://img/1.jpg"],
                "images": ["https://img/2.jpg", "https://img/1.jpg"],
            },
        )

        assert response.status_code == 200
        product_id, fields = repo.update.call_args.args
        assert product_id == "p-1"
        assert fields.images == ["https://img/1.jpg", "https://img/2.jpg"]

    def test_delete_product(self, client: TestClient) -> None:
        repo = MagicMock()
        repo.delete = AsyncMock()
        app.dependency_overrides[get_product_repo] = lambda: repo

        response = client.delete("/api/products/p-1")

        assert response.status_code == 200
        assert response.json()["message"] == "Product deleted"
        repo.delete.assert_awaited_once_with("p-1")


class TestEbayRoutes:
    def test_connection_is_null_when_not_connected(self, client: TestClient) -> None:
        manager = MagicMock()
        manager.get_connection = AsyncMock(return_value=None)
        app.dependency_overrides[get_connection_manager] = lambda: manager

        response = client.get("/api/ebay/connection")

        assert response.status_code == 200
        assert response.json()["success"] is True
        assert response.json()["data"] is None

    def test_rejected_token_is_401(self, client: TestClient) -> None:
        manager = MagicMock()
        manager.connect = AsyncMock(
            side_effect=AuthenticationError("Invalid or expired eBay access token")
        )
        app.dependency_overrides[get_connection_manager] = lambda: manager

        response = client.post("/api/ebay/connect", json={"accessToken": "stale"})

        assert response.status_code == 401
        assert response.json()["error"] == "Invalid or expired eBay access token"

    def test_publish_without_connection_is_400(self, client: TestClient) -> None:
        use_case = MagicMock()
        use_case.execute = AsyncMock(
            side_effect=PreconditionError(
                "eBay is not connected. Please connect your eBay account first."
            )
        )
        app.dependency_overrides[get_publish_use_case] = lambda: use_case

        response = client.post("/api/ebay/list/p-1", json={"categoryId": "31388"})

        assert response.status_code == 400
        assert "not connected" in response.json()["error"]

    def test_failed_publish_reports_step_error(self, client: TestClient) -> None:
        result = PublishResult(
            success=False,
            error="Invalid category",
            failed_at=PublishState.CREATING_OFFER,
            trail=(PublishState.ENSURING_LOCATION, PublishState.FAILED),
        )
        use_case = MagicMock()
        use_case.execute = AsyncMock(
            return_value=PublishProductListingOutput(
                listing=Listing.record_attempt(
                    product_id="p-1", marketplace_connection_id="c-1", result=result
                ),
                result=result,
            )
        )
        app.dependency_overrides[get_publish_use_case] = lambda: use_case

        response = client.post("/api/ebay/list/p-1", json={"categoryId": "31388"})

        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "data": None,
            "error": "Invalid category",
            "message": "Failed to list product on eBay",
        }

    def test_listings_include_product_columns(self, client: TestClient) -> None:
        listing = Listing.record_attempt(
            product_id="p-1",
            marketplace_connection_id="c-1",
            result=PublishResult(success=True, listing_id="123456", offer_id="OFFER-1"),
        )
        use_case = MagicMock()
        use_case.all = AsyncMock(
            return_value=[
                ListingSummary(
                    listing=listing, sku="CAM-001", product_title="Sony A6400", price=Decimal("10")
                )
            ]
        )
        app.dependency_overrides[get_listings_use_case] = lambda: use_case

        response = client.get("/api/ebay/listings")

        assert response.status_code == 200
        entry = response.json()["data"][0]
        assert entry["sku"] == "CAM-001"
        assert entry["product_title"] == "Sony A6400"
        assert entry["status"] == "active"
        assert entry["external_id"] == "123456"


class FakeEbay:
    """Minimal stand-in for the eBay REST endpoints the publish workflow calls."""

    def __init__(self) -> None:
        self.offer_error: str | None = None
        self.requests: list[httpx.Request] = []

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        method, path = request.method, request.url.path

        if path == "/sell/inventory/v1/inventory_item" and method == "GET":
            return httpx.Response(200, json={"inventoryItems": []})
        if path.startswith("/sell/inventory/v1/location/"):
            return httpx.Response(200, json={})
        if path.startswith("/sell/inventory/v1/inventory_item/") and method == "PUT":
            return httpx.Response(204)
        if path.startswith("/sell/account/v1/"):
            return httpx.Response(200, json={})
        if path == "/sell/inventory/v1/offer" and method == "POST":
            if self.offer_error:
                return httpx.Response(400, json={"errors": [{"message": self.offer_error}]})
            return httpx.Response(201, json={"offerId": "OFFER-1"})
        if path == "/sell/inventory/v1/offer/OFFER-1/publish":
            return httpx.Response(200, json={"listingId": "123456"})
        if "get_category_suggestions" in path:
            return httpx.Response(
                200,
                json={
                    "categorySuggestions": [
                        {"category": {"categoryId": "31388", "categoryName": "Digital Cameras"}}
                    ]
                },
            )
        return httpx.Response(404, json={"errors": [{"message": "Not found"}]})


@pytest.fixture()
def ebay() -> FakeEbay:
    return FakeEbay()


@pytest.fixture()
def live_client(monkeypatch: pytest.MonkeyPatch, ebay: FakeEbay) -> Generator[TestClient, None, None]:
    monkeypatch.setattr(settings, "create_tables_on_startup", True)
    live_app = create_app(Database("sqlite+aiosqlite://"))
    live_app.dependency_overrides[get_client_factory] = lambda: EbayClientFactory(
        transport=httpx.MockTransport(ebay.handle)
    )
    with TestClient(live_app) as c:
        yield c


def _create_product(c: TestClient, **overrides: Any) -> dict[str, Any]:
    body = {"sku": "CAM-001", "title": "Sony A6400", "price": 499.9, "quantity": 0}
    body.update(overrides)
    response = c.post("/api/products", json=body)
    assert response.status_code == 201
    return response.json()["data"]


class TestEndToEnd:
    def test_health_with_open_database(self, live_client: TestClient) -> None:
        body = live_client.get("/health").json()
        assert body["status"] == "ok"
        assert body["database"] == "connected"

    def test_product_crud(self, live_client: TestClient) -> None:
        created = _create_product(live_client, images=["https://img/1.jpg"])
        assert created["condition"] == "NEW"
        assert created["images"] == ["https://img/1.jpg"]

        duplicate = live_client.post(
            "/api/products", json={"sku": "CAM-001", "title": "Again", "price": 1}
        )
        assert duplicate.status_code == 409

        updated = live_client.put(
            f"/api/products/{created['id']}", json={"title": "Sony A6400 body", "price": 450}
        )
        assert updated.status_code == 200
        assert updated.json()["data"]["images"] == []
        assert updated.json()["data"]["sku"] == "CAM-001"

        assert live_client.delete(f"/api/products/{created['id']}").status_code == 200
        assert live_client.get(f"/api/products/{created['id']}").status_code == 404

    def test_missing_required_fields(self, live_client: TestClient) -> None:
        response = live_client.post("/api/products", json={"title": "No SKU", "price": 1})

        assert response.status_code == 400
        assert response.json()["error"] == "SKU, title, and price are required"

    def test_connect_publish_and_list(self, live_client: TestClient, ebay: FakeEbay) -> None:
        product = _create_product(live_client)

        not_connected = live_client.post(
            f"/api/ebay/list/{product['id']}", json={"categoryId": "31388"}
        )
        assert not_connected.status_code == 400
        assert ebay.requests == []

        connected = live_client.post(
            "/api/ebay/connect", json={"accessToken": "token-1", "sandbox": True}
        )
        assert connected.status_code == 201
        assert connected.json()["message"] == "eBay connected successfully"
        assert "credentials" not in connected.json()["data"]
        assert live_client.get("/api/ebay/connection").json()["data"]["name"] == "eBay Store"

        no_category = live_client.post(f"/api/ebay/list/{product['id']}", json={})
        assert no_category.status_code == 400
        assert no_category.json()["error"] == "Category ID is required"

        published = live_client.post(
            f"/api/ebay/list/{product['id']}", json={"categoryId": "31388"}
        )
        assert published.status_code == 200
        assert published.json()["data"] == {
            "listingId": "123456",
            "offerId": "OFFER-1",
            "listingUrl": "https://www.ebay.com/itm/123456",
        }

        listings = live_client.get("/api/ebay/listings").json()["data"]
        assert len(listings) == 1
        assert listings[0]["sku"] == "CAM-001"
        assert listings[0]["status"] == "active"

        current = live_client.get(f"/api/ebay/listings/{product['id']}").json()["data"]
        assert current["external_id"] == "123456"
        assert current["listing_data"]["states"][-1] == "Done"

    def test_failed_publish_is_recorded(self, live_client: TestClient, ebay: FakeEbay) -> None:
        product = _create_product(live_client)
        live_client.post("/api/ebay/connect", json={"accessToken": "token-1"})
        ebay.offer_error = "Invalid category"

        response = live_client.post(
            f"/api/ebay/list/{product['id']}", json={"categoryId": "0"}
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid category"
        current = live_client.get(f"/api/ebay/listings/{product['id']}").json()["data"]
        assert current["status"] == "error"
        assert current["error_message"] == "Invalid category"
        assert current["listing_data"]["failedAt"] == "CreatingOffer"

    def test_deleting_product_removes_its_listings(
        self, live_client: TestClient, ebay: FakeEbay
    ) -> None:
        product = _create_product(live_client)
        live_client.post("/api/ebay/connect", json={"accessToken": "token-1"})
        live_client.post(f"/api/ebay/list/{product['id']}", json={"categoryId": "31388"})

        live_client.delete(f"/api/products/{product['id']}")

        assert live_client.get("/api/ebay/listings").json()["data"] == []

    def test_category_search(self, live_client: TestClient) -> None:
        live_client.post("/api/ebay/connect", json={"accessToken": "token-1"})

        response = live_client.get("/api/ebay/categories", params={"q": "camera"})

        assert response.status_code == 200
        assert response.json()["data"] == [{"id": "31388", "name": "Digital Cameras"}]

    def test_disconnect(self, live_client: TestClient) -> None:
        live_client.post("/api/ebay/connect", json={"accessToken": "token-1"})

        assert live_client.post("/api/ebay/disconnect").json()["message"] == "eBay disconnected"
        assert live_client.get("/api/ebay/connection").json()["data"] is None
