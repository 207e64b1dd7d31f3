"""Cart store integration tests."""

import logging

import pytest

from examples.shop import (
    PRODUCTS,
    create_cart_store,
    select_cart_item,
    select_cart_item_count,
    select_cart_total,
    select_is_in_cart,
)
from examples.shop.cart_store import CART_STORAGE_NAME, CartItem

P1, P2, P3 = PRODUCTS[:3]


@pytest.fixture
def cart(storage, inspector):
    store = create_cart_store(storage=storage, inspector=inspector)
    store.persist.rehydrate()
    return store


def test_starting_state():
    store = create_cart_store(inspector=None)
    state = store.get_state()

    assert state["items"] == []
    assert state["is_open"] is False
    assert not store.persist.has_hydrated()


def test_add_update_remove_scenario(cart):
    actions = cart.get_state()

    actions["add_item"](P1)
    actions["add_item"](P1)
    assert cart.get_state()["items"] == [CartItem(product=P1, quantity=2)]

    actions["update_quantity"](P1.id, 0)
    assert cart.get_state()["items"] == []


def test_selectors(cart):
    actions = cart.get_state()
    actions["add_item"](P1)
    actions["add_item"](P2)
    actions["update_quantity"](P2.id, 3)

    state = cart.get_state()
    assert select_cart_item_count(state) == 4
    assert select_cart_total(state) == P1.price + 3 * P2.price
    assert select_cart_item(P2.id)(state).quantity == 3
    assert select_cart_item(P3.id)(state) is None
    assert select_is_in_cart(P1.id)(state)
    assert not select_is_in_cart(P3.id)(state)


def test_remove_and_clear(cart):
    actions = cart.get_state()
    actions["add_item"](P1)
    actions["add_item"](P2)

    actions["remove_item"](P1.id)
    assert [item.product for item in cart.get_state()["items"]] == [P2]

    actions["clear_cart"]()
    assert cart.get_state()["items"] == []


def test_open_close_toggle(cart):
    actions = cart.get_state()
    actions["toggle_cart"]()
    assert cart.get_state()["is_open"] is True
    actions["close_cart"]()
    assert cart.get_state()["is_open"] is False
    actions["open_cart"]()
    assert cart.get_state()["is_open"] is True


def test_items_survive_reload_but_not_ui_state(storage, inspector):
    first = create_cart_store(storage=storage, inspector=inspector)
    first.persist.rehydrate()
    first.get_state()["add_item"](P1)
    first.get_state()["open_cart"]()

    second = create_cart_store(storage=storage)
    assert second.get_state()["items"] == []

    second.persist.rehydrate()
    assert second.get_state()["items"] == [CartItem(product=P1, quantity=1)]
    assert second.get_state()["is_open"] is False


def test_invalid_persisted_items_keep_empty_cart(backend, storage):
    backend.set_item(
        CART_STORAGE_NAME,
        '{"name": "cart-storage", "version": 0, "state": {"items": [{"quantity": 1}]}}',
    )
    store = create_cart_store(storage=storage)
    store.persist.rehydrate()

    assert store.get_state()["items"] == []
    assert store.persist.has_hydrated()


def test_actions_are_labelled(cart, inspector):
    actions = cart.get_state()
    actions["add_item"](P1)
    actions["update_quantity"](P1.id, 5)
    actions["toggle_cart"]()

    assert inspector.action_types("CartStore") == [
        "cart/addItem",
        "cart/updateQuantity",
        "cart/toggleCart",
    ]


def test_item_count_subscription(storage, caplog):
    store = create_cart_store(storage=storage, log_item_count=True)
    counts = []
    store.subscribe(select_cart_item_count, lambda count, previous: counts.append(count))

    with caplog.at_level(logging.INFO, logger="examples.shop.cart_store"):
        store.get_state()["add_item"](P1)
        store.get_state()["open_cart"]()
        store.get_state()["add_item"](P1)

    assert counts == [1, 2]
    assert "Cart items changed: 0 -> 1" in caplog.text
