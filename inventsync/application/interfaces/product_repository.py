from abc import ABC, abstractmethod

from inventsync.domain.entities.product import Product, ProductFields


class ProductRepository(ABC):
    """Port for persisting and querying products."""

    @abstractmethod
    async def create(self, fields: ProductFields) -> Product:
        """Raises ValidationError or ConflictError (duplicate SKU)."""
        ...

    @abstractmethod
    async def get(self, product_id: str) -> Product | None:
        ...

    @abstractmethod
    async def list_all(self) -> list[Product]:
        """Newest first."""
        ...

    @abstractmethod
    async def update(self, product_id: str, fields: ProductFields) -> Product:
        """Full-field overwrite. Raises NotFoundError or ValidationError."""
        ...

    @abstractmethod
    async def delete(self, product_id: str) -> None:
        """Raises NotFoundError. Cascades to the product's listings."""
        ...
