from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from uuid import uuid4

from inventsync.domain.enums.product_condition import ProductCondition
from inventsync.domain.errors import ValidationError


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid4())


def merge_image_urls(kept: list[str] | None, added: list[str] | None) -> list[str]:
    """Kept URLs first, then newly added ones; drops blanks and repeats, keeps order."""
    merged: list[str] = []
    for url in [*(kept or []), *(added or [])]:
        url = url.strip() if isinstance(url, str) else ""
        if url and url not in merged:
            merged.append(url)
    return merged


def _to_price(value: Decimal | float | int | str | None) -> Decimal:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError("SKU, title, and price are required")
    try:
        price = Decimal(str(value))
    except InvalidOperation as exc:
        raise ValidationError(f"Invalid price: {value!r}") from exc
    if not price.is_finite() or price < 0:
        raise ValidationError("Price must be a non-negative number")
    return price


def _to_quantity(value: int | None) -> int:
    if value is None:
        return 0
    if value < 0:
        raise ValidationError("Quantity must be a non-negative integer")
    return value


def _blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _condition_as_supplied(value: str | None) -> str:
    # Stored verbatim; ProductCondition.normalize maps it at publish time.
    if value is None or not value.strip():
        return ProductCondition.NEW.value
    return value


def _image_list(images: list[str] | None) -> list[str]:
    """The final ordered URL list, repeats included; only blank or non-string entries are dropped."""
    return [url for url in images or [] if isinstance(url, str) and url.strip()]


@dataclass
class ProductFields:
    """
    Caller-supplied product values for create and update.

    Update uses full-replace semantics, so a field left as None here is
    written back as its empty/default value rather than being kept.
    """

    sku: str | None = None
    title: str | None = None
    description: str | None = None
    price: Decimal | None = None
    quantity: int | None = None
    condition: str | None = None
    brand: str | None = None
    category: str | None = None
    images: list[str] = field(default_factory=list)


@dataclass
class Product:
    """A merchant's inventory item; sku is the external inventory key."""

    id: str = field(default_factory=_new_id)
    sku: str = ""
    title: str = ""
    description: str | None = None
    price: Decimal = Decimal("0.00")
    quantity: int = 0
    condition: str = ProductCondition.NEW.value
    brand: str | None = None
    category: str | None = None
    images: list[str] = field(default_factory=list)

    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    # -------------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------------

    @classmethod
    def create(cls, fields: ProductFields) -> "Product":
        sku = _blank_to_none(fields.sku)
        title = _blank_to_none(fields.title)
        if sku is None or title is None or fields.price is None:
            raise ValidationError("SKU, title, and price are required")

        product = cls(sku=sku)
        product._assign(fields, title)
        return product

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------

    def replace_fields(self, fields: ProductFields) -> None:
        """Overwrite every mutable column. The SKU is immutable after creation."""
        title = _blank_to_none(fields.title)
        if title is None:
            raise ValidationError("Title is required")
        self._assign(fields, title)
        self.updated_at = _utcnow()

    def _assign(self, fields: ProductFields, title: str) -> None:
        self.title = title
        self.description = _blank_to_none(fields.description)
        self.price = _to_price(fields.price)
        self.quantity = _to_quantity(fields.quantity)
        self.condition = _condition_as_supplied(fields.condition)
        self.brand = _blank_to_none(fields.brand)
        self.category = _blank_to_none(fields.category)
        self.images = _image_list(fields.images)

    # -------------------------------------------------------------------------
    # Publish-time views
    # -------------------------------------------------------------------------

    @property
    def listing_description(self) -> str:
        return self.description or self.title

    @property
    def listing_condition(self) -> ProductCondition:
        return ProductCondition.normalize(self.condition)
