from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from inventsync.domain.entities.product import Product, ProductFields, merge_image_urls


class ProductRequest(BaseModel):
    """
    Body of POST and PUT /api/products.

    Required-field and range checks live on the Product entity so both
    endpoints report them the same way. On update, ``keepImages`` lists the
    already-stored URLs to retain and ``images`` the newly added ones.
    """

    model_config = ConfigDict(populate_by_name=True)

    sku: str | None = None
    title: str | None = None
    description: str | None = None
    price: Decimal | None = None
    quantity: int | None = None
    condition: str | None = None
    brand: str | None = None
    category: str | None = None
    images: list[str] | None = None
    keep_images: list[str] | None = Field(default=None, alias="keepImages")

    def to_fields(self) -> ProductFields:
        return ProductFields(
            sku=self.sku,
            title=self.title,
            description=self.description,
            price=self.price,
            quantity=self.quantity,
            condition=self.condition,
            brand=self.brand,
            category=self.category,
            images=merge_image_urls(self.keep_images, self.images),
        )


class ProductResponse(BaseModel):
    id: str
    sku: str
    title: str
    description: str | None = None
    price: float
    quantity: int
    condition: str
    brand: str | None = None
    category: str | None = None
    images: list[str]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, product: Product) -> "ProductResponse":
        return cls(
            id=product.id,
            sku=product.sku,
            title=product.title,
            description=product.description,
            price=float(product.price),
            quantity=product.quantity,
            condition=product.condition,
            brand=product.brand,
            category=product.category,
            images=list(product.images),
            created_at=product.created_at,
            updated_at=product.updated_at,
        )
