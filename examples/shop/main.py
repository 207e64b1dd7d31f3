"""CLI entry point for the shop example.

Usage:
    python -m examples.shop.main                   # In-memory storage
    python -m examples.shop.main --storage-dir .state
    python -m examples.shop.main --preference dark --verbose
"""

from __future__ import annotations

import argparse
import logging
import sys

from examples.shop.cart_store import create_cart_store, select_cart_item_count, select_cart_total
from examples.shop.products import PRODUCTS
from examples.shop.theme_store import StaticPreference, create_theme_store
from storelite import FileStorage, MemoryStorage, RecordingInspector, create_json_storage


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="shop",
        description="Shop - storelite example with a persisted cart and theme",
    )
    parser.add_argument("--storage-dir", help="Persist stores as JSON files in this directory")
    parser.add_argument(
        "--preference", choices=("light", "dark"), default="light", help="System colour scheme"
    )
    parser.add_argument("--verbose", action="store_true", help="Log store activity")

    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    backend = FileStorage(args.storage_dir) if args.storage_dir else MemoryStorage()
    storage = create_json_storage(lambda: backend)
    inspector = RecordingInspector()

    cart = create_cart_store(storage=storage, inspector=inspector, log_item_count=args.verbose)
    cart.persist.rehydrate()
    print(f"Restored cart with {select_cart_item_count(cart.get_state())} items")

    actions = cart.get_state()
    actions["add_item"](PRODUCTS[0])
    actions["add_item"](PRODUCTS[0])
    actions["add_item"](PRODUCTS[2])
    actions["update_quantity"](PRODUCTS[2].id, 0)
    actions["open_cart"]()

    state = cart.get_state()
    print(f"Cart: {select_cart_item_count(state)} items, total {select_cart_total(state):.2f}")
    print("Actions:", ", ".join(inspector.action_types("CartStore")))

    preference = StaticPreference(args.preference)
    theme = create_theme_store(preference, storage=storage)
    theme.persist.rehydrate()
    print(f"Theme: {theme.get_state()['theme']} -> {theme.get_state()['resolved_theme']}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
