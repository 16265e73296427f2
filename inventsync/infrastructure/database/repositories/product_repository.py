from decimal import Decimal

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from inventsync.application.interfaces.product_repository import ProductRepository
from inventsync.domain.entities.product import Product, ProductFields
from inventsync.domain.errors import ConflictError, NotFoundError
from inventsync.infrastructure.database.codecs import decode_string_list, encode_json
from inventsync.infrastructure.database.models import ProductModel
from inventsync.infrastructure.database.repositories._timestamps import as_utc

logger = structlog.get_logger(__name__)

DUPLICATE_SKU_MESSAGE = "SKU already exists"


def _to_domain(model: ProductModel) -> Product:
    return Product(
        id=model.id,
        sku=model.sku,
        title=model.title,
        description=model.description,
        price=Decimal(str(model.price)),
        quantity=model.quantity,
        condition=model.condition,
        brand=model.brand,
        category=model.category,
        images=decode_string_list(model.images),
        created_at=as_utc(model.created_at),
        updated_at=as_utc(model.updated_at),
    )


def _to_model(product: Product) -> ProductModel:
    return ProductModel(
        id=product.id,
        sku=product.sku,
        title=product.title,
        description=product.description,
        price=product.price,
        quantity=product.quantity,
        condition=product.condition,
        brand=product.brand,
        category=product.category,
        images=encode_json(product.images),
        created_at=product.created_at,
        updated_at=product.updated_at,
    )


class SqlAlchemyProductRepository(ProductRepository):
    """SQLAlchemy implementation for product persistence."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, fields: ProductFields) -> Product:
        product = Product.create(fields)

        existing = await self._session.execute(
            select(ProductModel.id).where(ProductModel.sku == product.sku)
        )
        if existing.first() is not None:
            raise ConflictError(DUPLICATE_SKU_MESSAGE)

        self._session.add(_to_model(product))
        try:
            await self._session.flush()
        except IntegrityError as exc:
            # Lost a race with a concurrent insert of the same SKU.
            raise ConflictError(DUPLICATE_SKU_MESSAGE) from exc

        logger.info("product_created", product_id=product.id, sku=product.sku)
        return product

    async def get(self, product_id: str) -> Product | None:
        model = await self._session.get(ProductModel, product_id)
        return _to_domain(model) if model is not None else None

    async def list_all(self) -> list[Product]:
        result = await self._session.execute(
            select(ProductModel).order_by(ProductModel.created_at.desc())
        )
        return [_to_domain(m) for m in result.scalars().all()]

    async def update(self, product_id: str, fields: ProductFields) -> Product:
        model = await self._session.get(ProductModel, product_id)
        if model is None:
            raise NotFoundError("Product", product_id)

        product = _to_domain(model)
        product.replace_fields(fields)

        model.title = product.title
        model.description = product.description
        model.price = product.price
        model.quantity = product.quantity
        model.condition = product.condition
        model.brand = product.brand
        model.category = product.category
        model.images = encode_json(product.images)
        model.updated_at = product.updated_at
        await self._session.flush()

        logger.info("product_updated", product_id=product.id)
        return product

    async def delete(self, product_id: str) -> None:
        model = await self._session.get(ProductModel, product_id)
        if model is None:
            raise NotFoundError("Product", product_id)

        await self._session.delete(model)
        await self._session.flush()
        logger.info("product_deleted", product_id=product_id)
