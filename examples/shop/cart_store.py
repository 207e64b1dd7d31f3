"""Cart store for the shop example.

Demonstrates:
- Actions defined in the initializer, labelled for the inspector
- Middleware composition (persist + devtools)
- Deferred hydration with skip_hydration
- Selectors used with selector subscriptions
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from examples.shop.products import Product
from storelite import (
    Devtools,
    Inspector,
    Persist,
    PersistStorage,
    SetState,
    State,
    Store,
    create_store,
)

_logger = logging.getLogger(__name__)

CART_STORAGE_NAME = "cart-storage"


class CartItem(BaseModel):
    """A product in the cart with its quantity."""

    model_config = ConfigDict(frozen=True)

    product: Product
    quantity: int = Field(1, ge=1)


_cart_items = TypeAdapter(list[CartItem])


# --- Selectors ---


def select_cart_item_count(state: State) -> int:
    """Total number of units in the cart."""
    return sum(item.quantity for item in state["items"])


def select_cart_total(state: State) -> float:
    """Total price of all items."""
    return sum(item.product.price * item.quantity for item in state["items"])


def select_cart_item(product_id: str) -> Callable[[State], CartItem | None]:
    def selector(state: State) -> CartItem | None:
        return next((item for item in state["items"] if item.product.id == product_id), None)

    return selector


def select_is_in_cart(product_id: str) -> Callable[[State], bool]:
    def selector(state: State) -> bool:
        return any(item.product.id == product_id for item in state["items"])

    return selector


# --- Store ---


def _without(items: list[CartItem], product_id: str) -> list[CartItem]:
    return [item for item in items if item.product.id != product_id]


def cart_state(set_: SetState, get: Callable[[], State], api: Store) -> State:
    """Initializer: cart fields plus actions."""

    def add_item(product: Product) -> None:
        def update(state: State) -> dict[str, Any]:
            items: list[CartItem] = state["items"]
            if any(item.product.id == product.id for item in items):
                return {
                    "items": [
                        item.model_copy(update={"quantity": item.quantity + 1})
                        if item.product.id == product.id
                        else item
                        for item in items
                    ]
                }
            return {"items": [*items, CartItem(product=product, quantity=1)]}

        set_(update, action="cart/addItem")

    def remove_item(product_id: str) -> None:
        set_(lambda state: {"items": _without(state["items"], product_id)}, action="cart/removeItem")

    def update_quantity(product_id: str, quantity: int) -> None:
        def update(state: State) -> dict[str, Any]:
            if quantity <= 0:
                return {"items": _without(state["items"], product_id)}
            return {
                "items": [
                    item.model_copy(update={"quantity": quantity})
                    if item.product.id == product_id
                    else item
                    for item in state["items"]
                ]
            }

        set_(update, action="cart/updateQuantity")

    def clear_cart() -> None:
        set_({"items": []}, action="cart/clearCart")

    def toggle_cart() -> None:
        set_(lambda state: {"is_open": not state["is_open"]}, action="cart/toggleCart")

    def open_cart() -> None:
        set_({"is_open": True}, action="cart/openCart")

    def close_cart() -> None:
        set_({"is_open": False}, action="cart/closeCart")

    return {
        "items": [],
        "is_open": False,
        "add_item": add_item,
        "remove_item": remove_item,
        "update_quantity": update_quantity,
        "clear_cart": clear_cart,
        "toggle_cart": toggle_cart,
        "open_cart": open_cart,
        "close_cart": close_cart,
    }


def persisted_items(state: State) -> dict[str, Any]:
    """Only items are persisted; whether the cart is open is UI state."""
    return {"items": [item.model_dump(mode="json") for item in state["items"]]}


def merge_items(persisted_state: Any, current_state: State) -> State:
    """Validate persisted items back into CartItem models."""
    items = _cart_items.validate_python(persisted_state.get("items", []))
    return {**current_state, "items": items}


def create_cart_store(
    storage: PersistStorage | None = None,
    inspector: Inspector | None = None,
    log_item_count: bool = False,
) -> Store:
    """Create a cart store.

    Hydration is deferred: call `store.persist.rehydrate()` once the storage
    backend is available.

    Args:
        storage: Persistence backend (default: per PersistSettings).
        inspector: Inspector for the devtools middleware.
        log_item_count: Log every change of the item count.
    """
    store = create_store(
        cart_state,
        middleware=[
            Persist(
                name=CART_STORAGE_NAME,
                storage=storage,
                partialize=persisted_items,
                merge=merge_items,
                skip_hydration=True,
            ),
            Devtools(name="CartStore", inspector=inspector),
        ],
    )
    if log_item_count:
        store.subscribe(
            select_cart_item_count,
            lambda count, previous: _logger.info("Cart items changed: %d -> %d", previous, count),
        )
    return store
