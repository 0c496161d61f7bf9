"""
tests.test_cart

Cart reducers and the anonymous cart on the controller.
"""

from __future__ import annotations

from decimal import Decimal

import pytest
from pydantic import ValidationError

from shopledger.commerce.cart import (
    LineItem,
    Product,
    add_item,
    cart_item_count,
    cart_total,
    load_items,
    set_quantity,
)
from shopledger.state.controller import SessionController
from shopledger.storage.kv import MemoryKeyValueStore

HEADPHONES = {"id": 7, "name": "Headphones", "price": 79.99, "category": "audio"}


def test_adding_same_product_twice_yields_one_line() -> None:
    product = Product.model_validate(HEADPHONES)
    items = add_item(add_item([], product), product)
    assert len(items) == 1
    assert items[0].product_ref == "7"
    assert items[0].quantity == 2


@pytest.mark.parametrize("quantity", [0, -5])
def test_non_positive_quantity_removes_line(quantity: int) -> None:
    items = add_item([], Product.model_validate(HEADPHONES))
    assert set_quantity(items, "7", quantity) == []


def test_total_is_decimal_exact() -> None:
    items = [
        LineItem(product_ref="a", unit_price=12.99, quantity=2),
        LineItem(product_ref="b", unit_price=3.00, quantity=1),
    ]
    assert cart_total(items) == Decimal("28.98")
    assert cart_item_count(items) == 3


def test_load_items_drops_invalid_and_duplicate_entries() -> None:
    raw = [
        {"product_ref": "a", "unit_price": "1.50", "quantity": 1},
        {"product_ref": "a", "unit_price": "9.00", "quantity": 4},
        {"product_ref": "b", "unit_price": "-1", "quantity": 1},
        {"product_ref": "c", "unit_price": "2", "quantity": 0},
        "junk",
    ]
    items = load_items(raw)
    assert [(i.product_ref, i.quantity) for i in items] == [("a", 1)]


def test_guest_cart_scenario(settings, provider) -> None:
    kv = MemoryKeyValueStore()
    ctl = SessionController(kv, provider, settings=settings)

    ctl.add_to_cart(HEADPHONES)
    ctl.add_to_cart(HEADPHONES)
    ctl.update_quantity("7", 5)

    assert ctl.cart_item_count == 5
    assert ctl.cart_total == Decimal("399.95")
    assert kv.get("pf_cart:guest")[0]["quantity"] == 5


def test_cart_survives_restart(settings, provider) -> None:
    kv = MemoryKeyValueStore()
    SessionController(kv, provider, settings=settings).add_to_cart(HEADPHONES)

    again = SessionController(kv, provider, settings=settings)
    assert [i.product_ref for i in again.cart] == ["7"]


def test_invalid_product_is_rejected(settings, provider) -> None:
    ctl = SessionController(MemoryKeyValueStore(), provider, settings=settings)
    with pytest.raises(ValidationError):
        ctl.add_to_cart({"id": "x", "price": -1})
    assert ctl.cart == []


def test_remove_and_clear(settings, provider) -> None:
    ctl = SessionController(MemoryKeyValueStore(), provider, settings=settings)
    ctl.add_to_cart(HEADPHONES)
    ctl.add_to_cart({"id": "8", "name": "Cable", "price": "4.50"})

    ctl.remove_from_cart("7")
    assert [i.product_ref for i in ctl.cart] == ["8"]
    ctl.clear_cart()
    assert ctl.cart == []
    assert ctl.cart_total == Decimal("0")


# --- Module Notes -----------------------------------------------------------
# Prices go through Decimal; float literals in fixtures are converted via their repr.
