"""
shopledger.commerce.cart

Cart records and reducers.

Why reducers:
- The controller replaces its cart list wholesale on every mutation; pure functions keep
  "one line item per product" and "no zero quantities" in one place.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator


def _exact_decimal(v: Any) -> Any:
    # Floats go through their shortest repr so 12.99 stays 12.99, not 12.9900000000000002131...
    if isinstance(v, float):
        return Decimal(str(v))
    return v


class Product(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    name: str = ""
    price: Decimal = Field(ge=0)
    category: str = ""
    image: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_text(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v

    @field_validator("price", mode="before")
    @classmethod
    def _price(cls, v: Any) -> Any:
        return _exact_decimal(v)


class LineItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    product_ref: str
    name: str = ""
    unit_price: Decimal = Field(ge=0)
    quantity: int = Field(ge=1)
    image: str | None = None

    @field_validator("unit_price", mode="before")
    @classmethod
    def _unit_price(cls, v: Any) -> Any:
        return _exact_decimal(v)

    @classmethod
    def from_product(cls, product: Product, *, quantity: int = 1) -> LineItem:
        return cls(
            product_ref=product.id,
            name=product.name,
            unit_price=product.price,
            quantity=quantity,
            image=product.image,
        )

    @property
    def subtotal(self) -> Decimal:
        return self.unit_price * self.quantity


def as_product(product: Product | Mapping[str, Any]) -> Product:
    if isinstance(product, Product):
        return product
    return Product.model_validate(dict(product))


def add_item(items: list[LineItem], product: Product) -> list[LineItem]:
    """
    Increment the existing line for `product`, or append a new line with quantity 1.
    """

    if any(item.product_ref == product.id for item in items):
        return [
            item.model_copy(update={"quantity": item.quantity + 1})
            if item.product_ref == product.id
            else item
            for item in items
        ]
    return [*items, LineItem.from_product(product)]


def remove_item(items: list[LineItem], product_ref: str) -> list[LineItem]:
    return [item for item in items if item.product_ref != product_ref]


def set_quantity(items: list[LineItem], product_ref: str, quantity: int) -> list[LineItem]:
    """A quantity of zero or less removes the line."""

    if quantity <= 0:
        return remove_item(items, product_ref)
    return [
        item.model_copy(update={"quantity": int(quantity)}) if item.product_ref == product_ref else item
        for item in items
    ]


def cart_total(items: Iterable[LineItem]) -> Decimal:
    return sum((item.subtotal for item in items), Decimal("0"))


def cart_item_count(items: Iterable[LineItem]) -> int:
    return sum(item.quantity for item in items)


def dump_items(items: Iterable[LineItem]) -> list[dict[str, Any]]:
    return [item.model_dump(mode="json") for item in items]


def load_items(raw: Iterable[Any]) -> list[LineItem]:
    """
    Rebuild line items from persisted/remote JSON. Malformed entries and duplicate refs are
    dropped so a corrupted snapshot can never violate the cart invariants.
    """

    out: list[LineItem] = []
    seen: set[str] = set()
    for entry in raw:
        if not isinstance(entry, dict):
            continue
        try:
            item = LineItem.model_validate(entry)
        except ValidationError:
            continue
        if item.product_ref in seen:
            continue
        seen.add(item.product_ref)
        out.append(item)
    return out


# --- Module Notes -----------------------------------------------------------
# `unit_price` is serialized as a decimal string; remote documents use the same shape.
