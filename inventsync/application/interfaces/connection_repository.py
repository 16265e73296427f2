from abc import ABC, abstractmethod

from inventsync.domain.entities.marketplace_connection import MarketplaceConnection
from inventsync.domain.enums.listing_status import Marketplace


class ConnectionRepository(ABC):
    """Port for the one-row-per-marketplace connection table."""

    @abstractmethod
    async def get(self, marketplace: Marketplace) -> MarketplaceConnection | None:
        ...

    @abstractmethod
    async def replace(self, connection: MarketplaceConnection) -> MarketplaceConnection:
        """Delete any row for the same marketplace, then insert this one, in one transaction."""
        ...

    @abstractmethod
    async def delete(self, marketplace: Marketplace) -> None:
        """No-op when nothing is stored."""
        ...
