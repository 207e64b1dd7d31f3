"""Shop example for storelite.

A cart and a theme store as an application would define them:

- **Cart**: items with quantities, persisted (items only) and reported to an
  inspector under the name "CartStore". Hydration is deferred until the
  application calls `store.persist.rehydrate()`.
- **Theme**: "light", "dark" or "system". A "system" theme is resolved
  against an injected `PreferenceProvider` as soon as hydration finishes.

## Running the Example

```bash
python -m examples.shop.main --storage-dir .state --verbose
```
"""

from examples.shop.cart_store import (
    CartItem,
    create_cart_store,
    select_cart_item,
    select_cart_item_count,
    select_cart_total,
    select_is_in_cart,
)
from examples.shop.products import PRODUCTS, Product, get_product_by_id, get_products_by_category
from examples.shop.theme_store import (
    PreferenceProvider,
    StaticPreference,
    create_theme_store,
    resolve_theme,
)

__all__ = [
    # Products
    "Product",
    "PRODUCTS",
    "get_product_by_id",
    "get_products_by_category",
    # Cart
    "CartItem",
    "create_cart_store",
    "select_cart_item",
    "select_cart_item_count",
    "select_cart_total",
    "select_is_in_cart",
    # Theme
    "PreferenceProvider",
    "StaticPreference",
    "create_theme_store",
    "resolve_theme",
]
