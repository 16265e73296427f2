from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from inventsync.application.interfaces.connection_repository import ConnectionRepository
from inventsync.domain.entities.marketplace_connection import (
    MarketplaceConnection,
    MarketplaceCredentials,
    default_settings,
)
from inventsync.domain.enums.listing_status import ConnectionStatus, Marketplace
from inventsync.infrastructure.database.codecs import decode_mapping, encode_json
from inventsync.infrastructure.database.models import MarketplaceConnectionModel
from inventsync.infrastructure.database.repositories._timestamps import as_utc


def _to_domain(model: MarketplaceConnectionModel) -> MarketplaceConnection:
    try:
        status = ConnectionStatus(model.status)
    except ValueError:
        status = ConnectionStatus.DISCONNECTED

    return MarketplaceConnection(
        id=model.id,
        marketplace=Marketplace(model.marketplace),
        name=model.name,
        status=status,
        credentials=MarketplaceCredentials.from_dict(decode_mapping(model.credentials)),
        settings=decode_mapping(model.settings) or default_settings(),
        created_at=as_utc(model.created_at),
        updated_at=as_utc(model.updated_at),
    )


def _to_model(connection: MarketplaceConnection) -> MarketplaceConnectionModel:
    return MarketplaceConnectionModel(
        id=connection.id,
        marketplace=connection.marketplace.value,
        name=connection.name,
        status=connection.status.value,
        credentials=encode_json(connection.credentials.to_dict()),
        settings=encode_json(connection.settings),
        created_at=connection.created_at,
        updated_at=connection.updated_at,
    )


class SqlAlchemyConnectionRepository(ConnectionRepository):
    """SQLAlchemy implementation for marketplace connections."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, marketplace: Marketplace) -> MarketplaceConnection | None:
        result = await self._session.execute(
            select(MarketplaceConnectionModel)
            .where(MarketplaceConnectionModel.marketplace == marketplace.value)
            .order_by(MarketplaceConnectionModel.created_at.desc())
            .limit(1)
        )
        model = result.scalars().first()
        return _to_domain(model) if model is not None else None

    async def replace(self, connection: MarketplaceConnection) -> MarketplaceConnection:
        # Both statements share the request's transaction.
        await self._session.execute(
            delete(MarketplaceConnectionModel).where(
                MarketplaceConnectionModel.marketplace == connection.marketplace.value
            )
        )
        self._session.add(_to_model(connection))
        await self._session.flush()
        return connection

    async def delete(self, marketplace: Marketplace) -> None:
        await self._session.execute(
            delete(MarketplaceConnectionModel).where(
                MarketplaceConnectionModel.marketplace == marketplace.value
            )
        )
        await self._session.flush()
