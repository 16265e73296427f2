from typing import Any

import structlog

from inventsync.application.interfaces.connection_repository import ConnectionRepository
from inventsync.application.interfaces.marketplace_client import MarketplaceClientFactory
from inventsync.domain.entities.marketplace_connection import (
    MarketplaceConnection,
    MarketplaceCredentials,
    default_settings,
)
from inventsync.domain.enums.listing_status import ConnectionStatus, Marketplace
from inventsync.domain.errors import AuthenticationError, ValidationError

logger = structlog.get_logger(__name__)


def parse_marketplace(value: str | Marketplace) -> Marketplace:
    try:
        return Marketplace(value)
    except ValueError as exc:
        raise ValidationError(f"Unsupported marketplace: {value}") from exc


class MarketplaceConnectionManager:
    """
    Keeps at most one connection per marketplace.

    Connecting verifies the token remotely before anything is written, then
    replaces the previous row and provisions the default fulfillment
    location. Provisioning is advisory: a failure is logged and every
    publish attempt ensures the location again.
    """

    def __init__(
        self,
        connection_repo: ConnectionRepository,
        client_factory: MarketplaceClientFactory,
    ) -> None:
        self._connection_repo = connection_repo
        self._client_factory = client_factory

    async def get_connection(self, marketplace: str | Marketplace) -> MarketplaceConnection | None:
        return await self._connection_repo.get(parse_marketplace(marketplace))

    async def connect(
        self,
        marketplace: str | Marketplace,
        credentials: MarketplaceCredentials,
        settings: dict[str, Any] | None = None,
    ) -> MarketplaceConnection:
        market = parse_marketplace(marketplace)
        if not credentials.access_token.strip():
            raise ValidationError("Access token is required")

        client = self._client_factory.for_credentials(credentials)
        if not await client.verify_token():
            logger.warning("marketplace_token_rejected", marketplace=market.value)
            raise AuthenticationError("Invalid or expired eBay access token")

        connection = await self._connection_repo.replace(
            MarketplaceConnection(
                marketplace=market,
                credentials=credentials,
                status=ConnectionStatus.CONNECTED,
                settings=settings if settings is not None else default_settings(),
            )
        )
        logger.info(
            "marketplace_connected",
            marketplace=market.value,
            connection_id=connection.id,
            sandbox=credentials.sandbox,
        )

        location = await client.ensure_location()
        if not location.success:
            logger.warning(
                "location_provisioning_failed",
                marketplace=market.value,
                error=location.error,
            )

        return connection

    async def disconnect(self, marketplace: str | Marketplace) -> None:
        market = parse_marketplace(marketplace)
        await self._connection_repo.delete(market)
        logger.info("marketplace_disconnected", marketplace=market.value)
