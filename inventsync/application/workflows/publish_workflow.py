"""
Drives one product through the marketplace publish sequence.

The steps run strictly in order and stop at the first failure:

    EnsuringLocation -> UpsertingInventory -> CreatingOffer -> Publishing -> Done

Any step may instead move to Failed. Step failures are raised internally as
LocationError or MarketplaceError and returned as a failed PublishResult;
nothing is raised past ``run``.

A failure while Publishing leaves the offer from CreatingOffer on the
marketplace. No compensating delete is issued; the result reports it as
``orphaned_offer_id``.
"""
import structlog

from inventsync.application.interfaces.marketplace_client import (
    InventoryItemRequest,
    MarketplaceClient,
    OfferRequest,
)
from inventsync.config import settings
from inventsync.domain.entities.product import Product
from inventsync.domain.entities.publish_result import PublishResult
from inventsync.domain.enums.publish_state import PublishState
from inventsync.domain.errors import LocationError, MarketplaceError
from inventsync.domain.state_machine.publish_state_machine import PublishStateMachine

logger = structlog.get_logger(__name__)

LOCATION_FAILURE_MESSAGE = "Failed to create inventory location"
UNKNOWN_FAILURE_MESSAGE = "Unknown marketplace error"


def _step_error(message: str | None) -> MarketplaceError:
    return MarketplaceError(message or UNKNOWN_FAILURE_MESSAGE)


class PublishWorkflow:
    def __init__(
        self,
        client: MarketplaceClient,
        placeholder_image_url: str = settings.ebay_placeholder_image_url,
    ) -> None:
        self._client = client
        self._placeholder_image_url = placeholder_image_url

    async def run(self, product: Product, category_id: str) -> PublishResult:
        machine = PublishStateMachine()
        offer_id: str | None = None
        log = logger.bind(product_id=product.id, sku=product.sku, category_id=category_id)

        try:
            location = await self._client.ensure_location()
            if not location.success:
                raise LocationError(LOCATION_FAILURE_MESSAGE)

            machine.advance(PublishState.UPSERTING_INVENTORY)
            inventory = await self._client.upsert_inventory_item(self._inventory_item(product))
            if not inventory.success:
                raise _step_error(inventory.error)

            machine.advance(PublishState.CREATING_OFFER)
            policies = await self._client.fetch_policies()
            offer = await self._client.create_offer(
                OfferRequest(
                    sku=product.sku,
                    price=product.price,
                    category_id=category_id,
                    policies=policies,
                )
            )
            if not offer.success or not offer.offer_id:
                raise _step_error(offer.error)
            offer_id = offer.offer_id

            machine.advance(PublishState.PUBLISHING)
            published = await self._client.publish_offer(offer_id)
            if not published.success or not published.listing_id:
                raise _step_error(published.error)

            machine.advance(PublishState.DONE)
        except MarketplaceError as exc:
            return self._failed(machine, str(exc), offer_id, product)
        except Exception as exc:
            log.exception("publish_step_raised", state=machine.state.value)
            return self._failed(machine, str(exc) or exc.__class__.__name__, offer_id, product)

        listing_url = self._client.listing_url(published.listing_id)
        log.info(
            "publish_succeeded",
            listing_id=published.listing_id,
            offer_id=offer_id,
            listing_url=listing_url,
        )
        return PublishResult(
            success=True,
            listing_id=published.listing_id,
            offer_id=offer_id,
            listing_url=listing_url,
            trail=tuple(machine.trail),
        )

    def _inventory_item(self, product: Product) -> InventoryItemRequest:
        return InventoryItemRequest(
            sku=product.sku,
            title=product.title,
            description=product.listing_description,
            # Zero on hand is submitted as a single unit, as the dashboard expects.
            quantity=product.quantity or 1,
            condition=product.listing_condition,
            image_urls=list(product.images) or [self._placeholder_image_url],
            brand=product.brand,
        )

    @staticmethod
    def _failed(
        machine: PublishStateMachine,
        message: str,
        offer_id: str | None,
        product: Product,
    ) -> PublishResult:
        machine.fail()
        result = PublishResult(
            success=False,
            offer_id=offer_id,
            error=message,
            failed_at=machine.failed_at,
            trail=tuple(machine.trail),
        )
        logger.warning(
            "publish_failed",
            product_id=product.id,
            sku=product.sku,
            failed_at=machine.failed_at.value if machine.failed_at else None,
            error=message,
            orphaned_offer_id=result.orphaned_offer_id,
        )
        return result
