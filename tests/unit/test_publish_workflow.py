"""Unit tests for the publish workflow; the marketplace client is mocked."""
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from inventsync.application.interfaces.marketplace_client import (
    BusinessPolicies,
    CallResult,
    InventoryItemRequest,
    OfferRequest,
    OfferResult,
    PublishOfferResult,
)
from inventsync.application.workflows.publish_workflow import (
    LOCATION_FAILURE_MESSAGE,
    UNKNOWN_FAILURE_MESSAGE,
    PublishWorkflow,
)
from inventsync.domain.entities.product import Product, ProductFields
from inventsync.domain.enums.product_condition import ProductCondition
from inventsync.domain.enums.publish_state import PublishState
from inventsync.domain.errors import LocationError

PLACEHOLDER = "https://example.test/placeholder.png"


def _make_client(
    *,
    location: CallResult = CallResult(success=True),
    inventory: CallResult = CallResult(success=True),
    policies: BusinessPolicies = BusinessPolicies(),
    offer: OfferResult = OfferResult(success=True, offer_id="OFFER-1"),
    publish: PublishOfferResult = PublishOfferResult(success=True, listing_id="123456"),
) -> MagicMock:
    client = MagicMock()
    client.ensure_location = AsyncMock(return_value=location)
    client.upsert_inventory_item = AsyncMock(return_value=inventory)
    client.fetch_policies = AsyncMock(return_value=policies)
    client.create_offer = AsyncMock(return_value=offer)
    client.publish_offer = AsyncMock(return_value=publish)
    client.listing_url = MagicMock(side_effect=lambda listing_id: f"https://www.ebay.com/itm/{listing_id}")
    return client


def _make_product(**overrides: object) -> Product:
    values: dict[str, object] = {
        "sku": "CAM-001",
        "title": "Sony A6400",
        "price": Decimal("499.9"),
        "quantity": 3,
        "condition": "USED_EXCELLENT",
        "brand": "Sony",
        "images": ["https://img/1.jpg"],
    }
    values.update(overrides)
    return Product.create(ProductFields(**values))  # type: ignore[arg-type]


class TestSuccessfulPublish:
    @pytest.mark.asyncio
    async def test_returns_listing_and_canonical_url(self) -> None:
        client = _make_client()

        result = await PublishWorkflow(client, PLACEHOLDER).run(_make_product(), "31388")

        assert result.success is True
        assert result.listing_id == "123456"
        assert result.offer_id == "OFFER-1"
        assert result.listing_url == "https://www.ebay.com/itm/123456"
        assert result.error is None
        assert result.trail[-1] == PublishState.DONE

    @pytest.mark.asyncio
    async def test_calls_steps_in_order(self) -> None:
        client = _make_client()

        await PublishWorkflow(client, PLACEHOLDER).run(_make_product(), "31388")

        assert [call[0] for call in client.mock_calls] == [
            "ensure_location",
            "upsert_inventory_item",
            "fetch_policies",
            "create_offer",
            "publish_offer",
            "listing_url",
        ]

    @pytest.mark.asyncio
    async def test_builds_inventory_item_from_product(self) -> None:
        client = _make_client()

        await PublishWorkflow(client, PLACEHOLDER).run(_make_product(), "31388")

        item: InventoryItemRequest = client.upsert_inventory_item.await_args.args[0]
        assert item.sku == "CAM-001"
        assert item.title == "Sony A6400"
        assert item.description == "Sony A6400"
        assert item.quantity == 3
        assert item.condition == ProductCondition.USED_EXCELLENT
        assert item.image_urls == ["https://img/1.jpg"]
        assert item.brand == "Sony"

    @pytest.mark.asyncio
    async def test_unknown_condition_is_sent_as_new(self) -> None:
        client = _make_client()

        await PublishWorkflow(client, PLACEHOLDER).run(_make_product(condition="pristine"), "31388")

        item: InventoryItemRequest = client.upsert_inventory_item.await_args.args[0]
        assert item.condition == ProductCondition.NEW

    @pytest.mark.asyncio
    async def test_placeholder_image_and_single_unit_when_missing(self) -> None:
        client = _make_client()

        await PublishWorkflow(client, PLACEHOLDER).run(_make_product(images=[], quantity=0), "31388")

        item: InventoryItemRequest = client.upsert_inventory_item.await_args.args[0]
        assert item.image_urls == [PLACEHOLDER]
        assert item.quantity == 1

    @pytest.mark.asyncio
    async def test_offer_carries_price_category_and_found_policies(self) -> None:
        policies = BusinessPolicies(fulfillment_policy_id="F1", return_policy_id="R1")
        client = _make_client(policies=policies)

        await PublishWorkflow(client, PLACEHOLDER).run(_make_product(), "31388")

        offer: OfferRequest = client.create_offer.await_args.args[0]
        assert offer.sku == "CAM-001"
        assert offer.category_id == "31388"
        assert offer.price == Decimal("499.90")
        assert offer.policies.as_listing_policies() == {
            "fulfillmentPolicyId": "F1",
            "returnPolicyId": "R1",
        }


class TestFailedPublish:
    @pytest.mark.asyncio
    async def test_location_failure_stops_before_inventory(self) -> None:
        client = _make_client(location=CallResult(success=False, error="boom"))

        result = await PublishWorkflow(client, PLACEHOLDER).run(_make_product(), "31388")

        assert result.success is False
        assert result.error == LOCATION_FAILURE_MESSAGE
        assert result.failed_at == PublishState.ENSURING_LOCATION
        client.upsert_inventory_item.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_inventory_failure_never_creates_or_publishes_offer(self) -> None:
        client = _make_client(inventory=CallResult(success=False, error="Invalid SKU"))

        result = await PublishWorkflow(client, PLACEHOLDER).run(_make_product(), "31388")

        assert result.success is False
        assert result.error == "Invalid SKU"
        assert result.failed_at == PublishState.UPSERTING_INVENTORY
        assert result.offer_id is None
        client.create_offer.assert_not_awaited()
        client.publish_offer.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_offer_failure_surfaces_adapter_message(self) -> None:
        client = _make_client(offer=OfferResult(success=False, error="Category is not valid"))

        result = await PublishWorkflow(client, PLACEHOLDER).run(_make_product(), "bad")

        assert result.error == "Category is not valid"
        assert result.failed_at == PublishState.CREATING_OFFER
        client.publish_offer.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_publish_failure_reports_orphaned_offer(self) -> None:
        client = _make_client(
            publish=PublishOfferResult(success=False, error="No return policy")
        )

        result = await PublishWorkflow(client, PLACEHOLDER).run(_make_product(), "31388")

        assert result.success is False
        assert result.offer_id == "OFFER-1"
        assert result.orphaned_offer_id == "OFFER-1"
        assert result.trail == (
            PublishState.ENSURING_LOCATION,
            PublishState.UPSERTING_INVENTORY,
            PublishState.CREATING_OFFER,
            PublishState.PUBLISHING,
            PublishState.FAILED,
        )

    @pytest.mark.asyncio
    async def test_adapter_exception_becomes_failed_result(self) -> None:
        client = _make_client()
        client.create_offer = AsyncMock(side_effect=RuntimeError("socket closed"))

        result = await PublishWorkflow(client, PLACEHOLDER).run(_make_product(), "31388")

        assert result.success is False
        assert result.error == "socket closed"
        assert result.failed_at == PublishState.CREATING_OFFER
        assert result.orphaned_offer_id is None

    @pytest.mark.asyncio
    async def test_location_error_from_adapter_fails_first_step(self) -> None:
        client = _make_client()
        client.ensure_location = AsyncMock(side_effect=LocationError("Address rejected"))

        result = await PublishWorkflow(client, PLACEHOLDER).run(_make_product(), "31388")

        assert result.success is False
        assert result.error == "Address rejected"
        assert result.failed_at == PublishState.ENSURING_LOCATION
        assert result.trail == (PublishState.ENSURING_LOCATION, PublishState.FAILED)
        client.upsert_inventory_item.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_adapter_message_is_reported_generically(self) -> None:
        client = _make_client(inventory=CallResult(success=False))

        result = await PublishWorkflow(client, PLACEHOLDER).run(_make_product(), "31388")

        assert result.error == UNKNOWN_FAILURE_MESSAGE
        assert result.failed_at == PublishState.UPSERTING_INVENTORY
